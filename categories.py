"""Category directory: the static category reference data and lookups over it."""

from typing import Dict, Iterable, List, Optional

from database import Category, TransactionType

FALLBACK_NAME = "Other"
FALLBACK_COLOR = "#CBD5E1"

# Seeded once, in this order, so ids are stable (1 = Salary ... 16 = Gifts/extra)
DEFAULT_CATEGORIES = [
    # Income
    {"name": "Salary", "type": TransactionType.INCOME, "icon": "briefcase", "color": "#10B981"},
    {"name": "Freelance", "type": TransactionType.INCOME, "icon": "code", "color": "#3B82F6"},
    {"name": "Investments", "type": TransactionType.INCOME, "icon": "trending-up", "color": "#8B5CF6"},
    {"name": "Gifts", "type": TransactionType.INCOME, "icon": "gift", "color": "#EC4899"},
    {"name": "Other Income", "type": TransactionType.INCOME, "icon": "plus-circle", "color": "#6366F1"},
    # Expense
    {"name": "Shopping", "type": TransactionType.EXPENSE, "icon": "shopping-bag", "color": "#EF4444"},
    {"name": "Food & Dining", "type": TransactionType.EXPENSE, "icon": "utensils", "color": "#8B5CF6"},
    {"name": "Bills & Utilities", "type": TransactionType.EXPENSE, "icon": "file-text", "color": "#F59E0B"},
    {"name": "Transportation", "type": TransactionType.EXPENSE, "icon": "car", "color": "#10B981"},
    {"name": "Entertainment", "type": TransactionType.EXPENSE, "icon": "film", "color": "#EC4899"},
    # Savings
    {"name": "Emergency Fund", "type": TransactionType.SAVING, "icon": "shield", "color": "#3B82F6"},
    {"name": "Vacation", "type": TransactionType.SAVING, "icon": "plane", "color": "#F59E0B"},
    {"name": "New Phone", "type": TransactionType.SAVING, "icon": "smartphone", "color": "#6366F1"},
    {"name": "Home", "type": TransactionType.SAVING, "icon": "home", "color": "#10B981"},
    # Extra cash
    {"name": "Pocket Money", "type": TransactionType.EXTRA, "icon": "wallet", "color": "#8B5CF6"},
    {"name": "Gifts", "type": TransactionType.EXTRA, "icon": "gift", "color": "#EC4899"},
]


def seed_categories(store) -> int:
    """Insert the default categories unless the directory is already populated."""
    if store.list_categories():
        return 0
    for entry in DEFAULT_CATEGORIES:
        store.create_category(**entry)
    return len(DEFAULT_CATEGORIES)


class CategoryDirectory:
    """Read-only id -> category lookup with a fallback for unknown ids."""

    def __init__(self, categories: Iterable[Category]):
        self._by_id: Dict[int, Category] = {c.id: c for c in categories}

    def __len__(self):
        return len(self._by_id)

    def get(self, category_id: Optional[int]) -> Optional[Category]:
        if category_id is None:
            return None
        return self._by_id.get(category_id)

    def name_for(self, category_id: Optional[int]) -> str:
        category = self.get(category_id)
        return category.name if category else FALLBACK_NAME

    def color_for(self, category_id: Optional[int]) -> str:
        category = self.get(category_id)
        return category.color if category else FALLBACK_COLOR

    def by_type(self, tx_type) -> List[Category]:
        tx_type = TransactionType(tx_type)
        return [c for c in self._by_id.values() if TransactionType(c.type) is tx_type]
