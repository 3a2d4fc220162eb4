"""
System categories seeded for every new account.
These rows are marked is_system: users can use them but never rename or delete them.
"""

from ..domain.ledger import CategoryType

# (name, color, icon)
INCOME_CATEGORIES = [
    ("Salary", "#2E7D32", "work"),
    ("Freelance", "#388E3C", "laptop"),
    ("Business Income", "#43A047", "store"),
    ("Interest", "#66BB6A", "percent"),
    ("Gift Received", "#81C784", "card_giftcard"),
    ("Other Income", "#A5D6A7", "payments"),
]

EXPENSE_CATEGORIES = [
    ("Food", "#E65100", "restaurant"),
    ("Groceries", "#EF6C00", "shopping_cart"),
    ("Rent", "#C62828", "home"),
    ("Utilities", "#AD1457", "bolt"),
    ("Transportation", "#6A1B9A", "directions_bus"),
    ("Healthcare", "#283593", "local_hospital"),
    ("Entertainment", "#1565C0", "movie"),
    ("Shopping", "#00838F", "shopping_bag"),
    ("Education", "#00695C", "school"),
    ("Other Expense", "#5D4037", "more_horiz"),
]


def system_category_rows() -> list[tuple[str, CategoryType, str, str]]:
    """Return every seed row as (name, type, color, icon)."""
    rows = [(name, CategoryType.INCOME, color, icon) for name, color, icon in INCOME_CATEGORIES]
    rows += [(name, CategoryType.EXPENSE, color, icon) for name, color, icon in EXPENSE_CATEGORIES]
    return rows
