"""Pricing engine: pure functions from a draft's selections to a cost breakdown.

Each component is computed from the catalog and rounded once, half-up to
the paisa. The total is the exact integer sum of the present components and
is always recomputed in full; cached prices are never patched.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from catalogue.port import Catalog
from ordering.draft.selections import Selections, ServiceType
from ordering.settings import get_settings
from ordering.shared.money import Money


class CostComponentName(Enum):
    EMBROIDERY = "EmbroideryCost"
    STITCHING = "StitchingCost"
    GARMENT_BASE = "GarmentBaseCost"
    FABRIC = "FabricCost"
    SIZE_UPCHARGE = "SizeUpcharge"


@dataclass(frozen=True)
class CostComponent:
    name: CostComponentName
    amount: Money


@dataclass(frozen=True)
class PriceBreakdown:
    components: tuple[CostComponent, ...]
    total: Money

    def amount_of(self, name: CostComponentName) -> Money | None:
        return next((c.amount for c in self.components if c.name == name), None)

    def as_dict(self) -> dict[str, int]:
        return {component.name.value: component.amount.paise for component in self.components}


def embroidery_cost(design, table) -> Money:
    tier_price = table.price_for(design.complexity)
    return Money.of(tier_price if tier_price is not None else design.base_price)


def fabric_consumption(service_type: ServiceType, selections: Selections, garment) -> Decimal | None:
    if service_type == ServiceType.CLOTH_ONLY:
        return selections.length_m
    return garment.default_fabric_consumption if garment is not None else None


def price(
    service_type,
    design_id: str,
    selections: Selections,
    catalog: Catalog,
    stitching_fee: Decimal | None = None,
) -> PriceBreakdown:
    """Price one unit of a customization.

    Raises ``CatalogEntryNotFound`` when a referenced entry is missing.
    """
    service_type = ServiceType(service_type)
    if stitching_fee is None:
        stitching_fee = get_settings().stitching_flat_fee

    design = catalog.get_design(design_id)
    garment = catalog.get_garment_type(selections.garment_id) if selections.garment_id else None

    components = [
        CostComponent(
            CostComponentName.EMBROIDERY,
            embroidery_cost(design, catalog.get_embroidery_pricing_table()),
        )
    ]

    if service_type != ServiceType.CLOTH_ONLY:
        components.append(CostComponent(CostComponentName.STITCHING, Money.of(stitching_fee)))

    if garment is not None:
        components.append(CostComponent(CostComponentName.GARMENT_BASE, Money.of(garment.base_stitching_price)))

    consumption = fabric_consumption(service_type, selections, garment)
    if selections.fabric_id and consumption is not None:
        fabric = catalog.get_fabric(selections.fabric_id)
        components.append(
            CostComponent(CostComponentName.FABRIC, Money.of(fabric.price_per_meter).times(consumption))
        )

    if selections.standard_size_id:
        size = catalog.get_standard_size(selections.standard_size_id)
        components.append(CostComponent(CostComponentName.SIZE_UPCHARGE, Money.of(size.extra_price)))
    elif selections.uses_custom_measurements:
        components.append(CostComponent(CostComponentName.SIZE_UPCHARGE, Money.zero()))

    return PriceBreakdown(components=tuple(components), total=Money.sum_of(c.amount for c in components))


def price_draft(draft, catalog: Catalog, stitching_fee: Decimal | None = None) -> PriceBreakdown:
    return price(draft.service_type, draft.design_id, draft.selections, catalog, stitching_fee)
