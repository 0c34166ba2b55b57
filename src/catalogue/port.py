"""Catalog port (abstract interface).

Read-only lookups that feed pricing and selection validation. Amounts are
rupees as ``Decimal``; conversion to paise happens in the pricing engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal


class CatalogEntryNotFound(LookupError):
    """A catalog reference does not resolve to an active entry."""

    def __init__(self, kind: str, entry_id: str) -> None:
        super().__init__(f"{kind} {entry_id!r} not found in catalog")
        self.kind = kind
        self.entry_id = entry_id


@dataclass(frozen=True)
class Design:
    id: str
    name: str
    category: str
    complexity: str | None
    base_price: Decimal


@dataclass(frozen=True)
class Fabric:
    id: str
    name: str
    price_per_meter: Decimal
    description: str = ""


@dataclass(frozen=True)
class FabricColor:
    id: str
    name: str
    hex_code: str


@dataclass(frozen=True)
class GarmentType:
    id: str
    name: str
    base_stitching_price: Decimal
    default_fabric_consumption: Decimal


@dataclass(frozen=True)
class StandardSize:
    id: str
    label: str
    extra_price: Decimal = Decimal("0")


@dataclass(frozen=True)
class EmbroideryPricingTable:
    """Complexity tier -> embroidery price in rupees."""

    tiers: dict[str, Decimal] = field(default_factory=dict)

    def price_for(self, complexity: str | None) -> Decimal | None:
        if complexity is None:
            return None
        return self.tiers.get(complexity)


class Catalog(ABC):
    """Abstract catalog interface."""

    @abstractmethod
    def get_design(self, design_id: str) -> Design: ...

    @abstractmethod
    def get_fabric(self, fabric_id: str) -> Fabric: ...

    @abstractmethod
    def get_fabric_color(self, color_id: str) -> FabricColor: ...

    @abstractmethod
    def get_garment_type(self, garment_id: str) -> GarmentType: ...

    @abstractmethod
    def get_standard_size(self, size_id: str) -> StandardSize: ...

    @abstractmethod
    def get_embroidery_pricing_table(self) -> EmbroideryPricingTable: ...
