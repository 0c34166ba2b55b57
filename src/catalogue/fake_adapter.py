"""In-memory catalog for development and testing.

Entries are registered with ``add_*`` helpers; ``seeded()`` returns a
catalog loaded with the storefront's standard fabrics, garments and sizes.
"""

from decimal import Decimal

from catalogue.port import (
    Catalog,
    CatalogEntryNotFound,
    Design,
    EmbroideryPricingTable,
    Fabric,
    FabricColor,
    GarmentType,
    StandardSize,
)


class InMemoryCatalog(Catalog):
    def __init__(self) -> None:
        self.designs: dict[str, Design] = {}
        self.fabrics: dict[str, Fabric] = {}
        self.colors: dict[str, FabricColor] = {}
        self.garments: dict[str, GarmentType] = {}
        self.sizes: dict[str, StandardSize] = {}
        self.pricing_table = EmbroideryPricingTable()

    @classmethod
    def seeded(cls) -> "InMemoryCatalog":
        from catalogue.seed import seed

        catalog = cls()
        seed(catalog)
        return catalog

    # -------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------
    def add_design(self, id, name, base_price, complexity=None, category="Traditional") -> Design:
        design = Design(
            id=id, name=name, category=category, complexity=complexity, base_price=Decimal(str(base_price))
        )
        self.designs[id] = design
        return design

    def add_fabric(self, id, name, price_per_meter, description="") -> Fabric:
        fabric = Fabric(id=id, name=name, price_per_meter=Decimal(str(price_per_meter)), description=description)
        self.fabrics[id] = fabric
        return fabric

    def add_color(self, id, name, hex_code="#000000") -> FabricColor:
        color = FabricColor(id=id, name=name, hex_code=hex_code)
        self.colors[id] = color
        return color

    def add_garment(self, id, name, base_stitching_price, default_fabric_consumption) -> GarmentType:
        garment = GarmentType(
            id=id,
            name=name,
            base_stitching_price=Decimal(str(base_stitching_price)),
            default_fabric_consumption=Decimal(str(default_fabric_consumption)),
        )
        self.garments[id] = garment
        return garment

    def add_size(self, id, label=None, extra_price=0) -> StandardSize:
        size = StandardSize(id=id, label=label or id, extra_price=Decimal(str(extra_price)))
        self.sizes[id] = size
        return size

    def set_complexity_price(self, complexity: str, price) -> None:
        tiers = dict(self.pricing_table.tiers)
        tiers[complexity] = Decimal(str(price))
        self.pricing_table = EmbroideryPricingTable(tiers=tiers)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    @staticmethod
    def _lookup(entries: dict, kind: str, entry_id):
        try:
            return entries[entry_id]
        except KeyError:
            raise CatalogEntryNotFound(kind, entry_id) from None

    def get_design(self, design_id: str) -> Design:
        return self._lookup(self.designs, "Design", design_id)

    def get_fabric(self, fabric_id: str) -> Fabric:
        return self._lookup(self.fabrics, "Fabric", fabric_id)

    def get_fabric_color(self, color_id: str) -> FabricColor:
        return self._lookup(self.colors, "Color", color_id)

    def get_garment_type(self, garment_id: str) -> GarmentType:
        return self._lookup(self.garments, "Garment", garment_id)

    def get_standard_size(self, size_id: str) -> StandardSize:
        return self._lookup(self.sizes, "Size", size_id)

    def get_embroidery_pricing_table(self) -> EmbroideryPricingTable:
        return self.pricing_table
