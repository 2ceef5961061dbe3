"""Shared product, purchase, expense and stock-movement type constants."""

PRODUCT_TYPE_INGREDIENT_BASED = "ingredientBased"
PRODUCT_TYPE_DIRECT_COST = "directCost"

PRODUCT_TYPE_CHOICES = (
    PRODUCT_TYPE_INGREDIENT_BASED,
    PRODUCT_TYPE_DIRECT_COST,
)

PURCHASE_TYPE_INGREDIENT = "ingredient"
PURCHASE_TYPE_SUPPLY = "supply"

PURCHASE_TYPE_CHOICES = (
    PURCHASE_TYPE_INGREDIENT,
    PURCHASE_TYPE_SUPPLY,
)

SUPPLY_CATEGORY_CHOICES = ("packaging", "cleaning", "delivery", "office", "other")

EXPENSE_CATEGORY_CHOICES = (
    "rent",
    "utilities",
    "salaries",
    "ingredients",
    "supplies",
    "marketing",
    "equipment",
    "maintenance",
    "insurance",
    "other",
)

MOVEMENT_SOURCE_PURCHASE = "purchase"
MOVEMENT_SOURCE_SALE = "sale"
MOVEMENT_SOURCE_MANUAL = "manual"


def normalize_product_type(value: str | None) -> str:
    """Return a known product type, defaulting to ingredient-based."""

    cleaned = (value or "").strip()
    for choice in PRODUCT_TYPE_CHOICES:
        if cleaned.casefold() == choice.casefold():
            return choice
    return PRODUCT_TYPE_INGREDIENT_BASED


__all__ = [
    "EXPENSE_CATEGORY_CHOICES",
    "MOVEMENT_SOURCE_MANUAL",
    "MOVEMENT_SOURCE_PURCHASE",
    "MOVEMENT_SOURCE_SALE",
    "PRODUCT_TYPE_CHOICES",
    "PRODUCT_TYPE_DIRECT_COST",
    "PRODUCT_TYPE_INGREDIENT_BASED",
    "PURCHASE_TYPE_CHOICES",
    "PURCHASE_TYPE_INGREDIENT",
    "PURCHASE_TYPE_SUPPLY",
    "SUPPLY_CATEGORY_CHOICES",
    "normalize_product_type",
]
