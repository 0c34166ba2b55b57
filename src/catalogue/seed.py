"""Storefront seed data: designs, fabrics, colors, garments and sizes."""

DESIGNS = [
    # id, name, category, complexity, base price
    ("royal-peacock-bridal", "Royal Peacock Bridal", "Bridal", "Heavy", 12000),
    ("classic-rose-vine", "Classic Rose Vine", "Floral", "Medium", 4500),
    ("geometric-gold-borders", "Geometric Gold Borders", "Border", "Simple", 3000),
    ("minimalist-buttas", "Minimalist Buttas", "Minimal", "Simple", 2500),
    ("temple-architecture", "Temple Architecture", "Traditional", "Complex", 15000),
    ("festive-glitter", "Festive Glitter", "Festive", "Medium", 5500),
    ("modern-abstract", "Modern Abstract", "Modern", None, 4800),
    ("heavy-zardosi-maggam", "Heavy Zardosi Maggam", "Heavy", "Heavy", 18000),
]

COMPLEXITY_PRICES = {
    "Simple": 1200,
    "Medium": 2500,
    "Complex": 4000,
    "Heavy": 6500,
}

FABRICS = [
    ("raw-silk", "Raw Silk", 850, "Rich texture with a subtle sheen, perfect for structured garments."),
    ("pure-cotton", "Pure Cotton", 350, "Breathable and soft, ideal for daily wear and comfort."),
    ("velvet", "Velvet", 1200, "Luxurious and soft piles, adding grandeur to any outfit."),
    ("organza", "Organza", 650, "Sheer, crisp, and lightweight fabric for a delicate look."),
    ("crepe", "Crepe", 550, "Flowy fabric with a grainy texture, drapes beautifully."),
]

COLORS = [
    ("royal-red", "Royal Red", "#8B0000"),
    ("navy-blue", "Navy Blue", "#000080"),
    ("emerald-green", "Emerald Green", "#50C878"),
    ("ivory", "Ivory", "#FFFFF0"),
    ("black", "Black", "#000000"),
    ("gold", "Gold", "#FFD700"),
    ("silver", "Silver", "#C0C0C0"),
]

GARMENTS = [
    # id, name, base stitching price, default fabric consumption (m)
    ("blouse", "Blouse", 850, "1"),
    ("kurta", "Kurta", 650, "2.5"),
    ("lehenga", "Lehenga", 1500, "4"),
    ("gown", "Gown", 1800, "3.5"),
    ("salwar", "Salwar Suit", 1200, "4.5"),
]

SIZES = [
    ("XS", 0),
    ("S", 0),
    ("M", 0),
    ("L", 0),
    ("XL", 50),
    ("XXL", 100),
    ("XXXL", 150),
]


def seed(catalog) -> None:
    for design_id, name, category, complexity, base_price in DESIGNS:
        catalog.add_design(design_id, name, base_price, complexity=complexity, category=category)
    for complexity, price in COMPLEXITY_PRICES.items():
        catalog.set_complexity_price(complexity, price)
    for fabric_id, name, price, description in FABRICS:
        catalog.add_fabric(fabric_id, name, price, description)
    for color_id, name, hex_code in COLORS:
        catalog.add_color(color_id, name, hex_code)
    for garment_id, name, base_price, consumption in GARMENTS:
        catalog.add_garment(garment_id, name, base_price, consumption)
    for label, extra in SIZES:
        catalog.add_size(label, label, extra)
