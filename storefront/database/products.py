"""Static product catalog"""

from decimal import Decimal
from typing import Optional
from ..models.product import Product, ProductCategory

# Product catalog (prices in whole rupees)
PRODUCTS: dict[int, Product] = {
    1: Product(
        id=1,
        name="Whey Protein pro",
        description="High-quality whey protein isolate for muscle recovery and growth. 24g protein, 5.5g BCAAs per serving.",
        price=Decimal("2499"),
        category=ProductCategory.PROTEIN,
        image="Images/prot.jpg",
        features=["24g protein per serving", "5.5g BCAAs", "Low in carbs and fat", "Fast absorption"],
    ),
    2: Product(
        id=2,
        name="Creatine Monohydrate",
        description="Pure creatine monohydrate for increased strength and power output during workouts.",
        price=Decimal("899"),
        category=ProductCategory.PERFORMANCE,
        image="Images/creatine.webp",
        features=["Pure creatine monohydrate", "Increases strength and power", "Scientifically proven"],
    ),
    3: Product(
        id=3,
        name="BCAA Amino Acids",
        description="Branched-chain amino acids to support muscle recovery and reduce fatigue in a new apple flavour.",
        price=Decimal("1100"),
        category=ProductCategory.RECOVERY,
        image="Images/BCAA.webp",
        features=["2:1:1 BCAA ratio", "Reduces muscle fatigue", "Supports recovery"],
    ),
    4: Product(
        id=4,
        name="Pre-Workout Formula",
        description="Advanced pre-workout blend for maximum energy and focus.",
        price=Decimal("1799"),
        category=ProductCategory.ENERGY,
        image="Images/preworkout.webp",
        features=["Enhanced energy and focus", "Improved endurance", "No crash effect"],
    ),
    5: Product(
        id=5,
        name="Omega-3 Fish Oil",
        description="Premium fish oil supplement for heart health and joint support.",
        price=Decimal("799"),
        category=ProductCategory.HEALTH,
        image="Images/omega3.webp",
        features=["Heart health support", "Joint health benefits", "High EPA/DHA content"],
    ),
    6: Product(
        id=6,
        name="Vitamin D3 + K2",
        description="Essential vitamin D3 with K2 for bone health and immune support.",
        price=Decimal("999"),
        category=ProductCategory.VITAMINS,
        image="Images/d3k21.webp",
        features=["Bone health support", "Immune system boost", "Calcium absorption"],
    ),
    7: Product(
        id=7,
        name="Performance Tank Top",
        description="Moisture-wicking tank top for maximum comfort during intense workouts.",
        price=Decimal("699"),
        category=ProductCategory.TOPS,
        image="Images/tanktop.jpg",
        features=["Moisture-wicking fabric", "Breathable design", "Quick-dry technology"],
    ),
    8: Product(
        id=8,
        name="Compression Shorts",
        description="High-performance compression shorts for support and comfort during training.",
        price=Decimal("899"),
        category=ProductCategory.BOTTOMS,
        image="Images/compression.webp",
        features=["Compression support", "Moisture-wicking", "Anti-chafe design"],
    ),
    9: Product(
        id=9,
        name="Gym Hoodie",
        description="Premium cotton blend hoodie perfect for pre and post-workout comfort.",
        price=Decimal("1499"),
        category=ProductCategory.OUTERWEAR,
        image="Images/hoodie.jpg",
        features=["Premium cotton blend", "Warm and cozy", "Durable construction"],
    ),
    10: Product(
        id=10,
        name="Training Leggings",
        description="High-waisted leggings with pocket for your essentials during workouts.",
        price=Decimal("1050"),
        category=ProductCategory.BOTTOMS,
        image="Images/leggings.webp",
        features=["High-waisted design", "Built-in pocket", "Four-way stretch"],
    ),
    11: Product(
        id=11,
        name="Performance T-Shirt",
        description="Breathable performance t-shirt with anti-odor technology.",
        price=Decimal("999"),
        category=ProductCategory.TOPS,
        image="Images/tshirt.jpg",
        features=["Anti-odor technology", "Breathable fabric", "UV protection"],
    ),
    12: Product(
        id=12,
        name="Gym Bag",
        description="Spacious gym bag with multiple compartments for all your gear.",
        price=Decimal("1899"),
        category=ProductCategory.ACCESSORIES,
        image="Images/bag.webp",
        features=["Multiple compartments", "Water-resistant material", "Large capacity"],
    ),
}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self):
        self.products = PRODUCTS.copy()

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[ProductCategory] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Search products with filters.

        Returns:
            Tuple of (matching products, total count)
        """
        results = list(self.products.values())

        if query:
            query_lower = query.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower() or query_lower in p.description.lower()
            ]

        if category:
            results = [p for p in results if p.category == category]

        if min_price is not None:
            results = [p for p in results if p.price >= min_price]
        if max_price is not None:
            results = [p for p in results if p.price <= max_price]

        total = len(results)
        results = results[offset : offset + limit]

        return results, total

    def get_categories(self) -> list[str]:
        """Categories that have at least one product"""
        seen = {p.category.value for p in self.products.values()}
        return [c.value for c in ProductCategory if c.value in seen]


# Singleton instance
product_db = ProductDatabase()
