"""Service-dependent customization choices carried by a draft."""

from dataclasses import asdict, dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum

from protean.exceptions import ValidationError

from catalogue.port import Catalog, CatalogEntryNotFound


class ServiceType(Enum):
    CLOTH_ONLY = "ClothOnly"
    EMBROIDERY_STITCHING = "EmbroideryStitching"
    SEND_YOUR_FABRIC = "SendYourFabric"


REQUIRED_MEASUREMENTS = ("chest", "waist", "length")


@dataclass(frozen=True)
class Selections:
    """Everything the shopper picked for one bag line, apart from quantity.

    ``ClothOnly`` carries fabric, color and an explicit length in meters.
    Stitched services carry a garment plus either a standard size or a set
    of custom measurements. ``SendYourFabric`` replaces the catalog fabric
    with the customer's own ``fabric_details`` and a pickup address.
    """

    fabric_id: str | None = None
    color_id: str | None = None
    length_m: Decimal | None = None
    garment_id: str | None = None
    standard_size_id: str | None = None
    custom_measurements: dict | None = None
    fabric_details: dict | None = None
    pickup_address_id: str | None = None

    def __post_init__(self):
        if self.length_m is not None and not isinstance(self.length_m, Decimal):
            try:
                object.__setattr__(self, "length_m", Decimal(str(self.length_m)))
            except InvalidOperation:
                raise ValidationError({"length_m": [f"Length must be a number of meters, got {self.length_m!r}"]}) from None

    @classmethod
    def from_dict(cls, data: dict | None) -> "Selections":
        return cls().merged_with(dict(data or {}))

    @staticmethod
    def field_names() -> tuple[str, ...]:
        return (
            "fabric_id",
            "color_id",
            "length_m",
            "garment_id",
            "standard_size_id",
            "custom_measurements",
            "fabric_details",
            "pickup_address_id",
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        if data["length_m"] is not None:
            data["length_m"] = str(data["length_m"])
        return data

    def merged_with(self, changes: dict) -> "Selections":
        """Return a copy with the given fields replaced."""
        unknown = set(changes) - set(self.field_names())
        if unknown:
            raise ValidationError({name: ["Unknown selection field"] for name in sorted(unknown)})
        return replace(self, **changes)

    @property
    def uses_custom_measurements(self) -> bool:
        return self.custom_measurements is not None

    def validate(self, service_type: ServiceType, catalog: Catalog) -> None:
        """Raise ``ValidationError`` listing every incomplete or unknown selection."""
        errors: dict[str, list[str]] = {}

        def require(name: str, message: str) -> None:
            if getattr(self, name) in (None, "", {}):
                errors.setdefault(name, []).append(message)

        def forbid(name: str) -> None:
            if getattr(self, name) not in (None, "", {}):
                errors.setdefault(name, []).append(f"Not applicable to {service_type.value}")

        if service_type == ServiceType.CLOTH_ONLY:
            require("fabric_id", "Choose a fabric")
            require("color_id", "Choose a color")
            require("length_m", "Enter the length of fabric in meters")
            if self.length_m is not None and self.length_m <= 0:
                errors.setdefault("length_m", []).append("Length must be greater than zero")
            for name in ("garment_id", "standard_size_id", "custom_measurements", "fabric_details", "pickup_address_id"):
                forbid(name)
        elif service_type == ServiceType.EMBROIDERY_STITCHING:
            require("fabric_id", "Choose a fabric")
            require("color_id", "Choose a color")
            require("garment_id", "Choose a garment")
            self._validate_sizing(errors)
            for name in ("length_m", "fabric_details", "pickup_address_id"):
                forbid(name)
        else:
            require("fabric_details", "Describe the fabric you are sending")
            require("pickup_address_id", "Choose a pickup address")
            if self.fabric_details and not self.fabric_details.get("fabric_type"):
                errors.setdefault("fabric_details", []).append("Fabric type is required")
            if self.garment_id:
                self._validate_sizing(errors)
            elif self.standard_size_id or self.custom_measurements:
                errors.setdefault("garment_id", []).append("Choose a garment to be stitched")
            forbid("length_m")

        self._validate_references(catalog, errors)

        if errors:
            raise ValidationError(errors)

    def _validate_sizing(self, errors: dict) -> None:
        if self.standard_size_id and self.custom_measurements:
            errors.setdefault("standard_size_id", []).append("Choose a standard size or custom measurements, not both")
        elif not self.standard_size_id and not self.custom_measurements:
            errors.setdefault("standard_size_id", []).append("Choose a size or enter custom measurements")
        elif self.custom_measurements:
            missing = [name for name in REQUIRED_MEASUREMENTS if not self.custom_measurements.get(name)]
            if missing:
                errors.setdefault("custom_measurements", []).append(f"Missing measurements: {', '.join(missing)}")

    def _validate_references(self, catalog: Catalog, errors: dict) -> None:
        lookups = (
            ("fabric_id", catalog.get_fabric),
            ("color_id", catalog.get_fabric_color),
            ("garment_id", catalog.get_garment_type),
            ("standard_size_id", catalog.get_standard_size),
        )
        for name, lookup in lookups:
            value = getattr(self, name)
            if value and name not in errors:
                try:
                    lookup(value)
                except CatalogEntryNotFound as exc:
                    errors.setdefault(name, []).append(str(exc))
