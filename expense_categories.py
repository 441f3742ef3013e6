from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional

# Reserved categories. Everything else is a genuine expense.
UPI_PAYMENT = "UPI Payment"
EXTRA_UPI_PAYMENT = "Extra UPI Payment"
EXTRA_CASH_PAYMENT = "Extra Cash Payment"
DRAWINGS = "Drawings"
OPENING_CASH = "Opening Cash"

RESERVED_CATEGORIES = frozenset(
    {UPI_PAYMENT, EXTRA_UPI_PAYMENT, EXTRA_CASH_PAYMENT, DRAWINGS, OPENING_CASH}
)


@dataclass(frozen=True)
class ExpenseTaxonomy:
    """
    How one report reads expense rows.

    revenue_categories: amounts added to revenue (POS records top-ups as expense rows)
    excluded_categories: never counted as general expenses
    online_categories: summed into the online payment figure
    """

    name: str
    revenue_categories: FrozenSet[str] = frozenset()
    excluded_categories: FrozenSet[str] = frozenset()
    online_categories: FrozenSet[str] = frozenset()

    def is_revenue(self, category: Optional[str]) -> bool:
        return category in self.revenue_categories

    def is_general_expense(self, category: Optional[str]) -> bool:
        return category not in self.excluded_categories

    def is_online(self, category: Optional[str]) -> bool:
        return category in self.online_categories

    def general_expense_filter(self) -> Dict[str, Any]:
        if not self.excluded_categories:
            return {}
        return {"category": {"$nin": sorted(self.excluded_categories)}}


# Daily insights: both "extra" rows are income, UPI rows are reported as online.
INSIGHTS_TAXONOMY = ExpenseTaxonomy(
    name="insights",
    revenue_categories=frozenset({EXTRA_CASH_PAYMENT, EXTRA_UPI_PAYMENT}),
    excluded_categories=RESERVED_CATEGORIES,
    online_categories=frozenset({UPI_PAYMENT}),
)

# Growth percentages count every expense row, reserved or not.
PERCENTAGE_TAXONOMY = ExpenseTaxonomy(name="percentage")

# Dashboard revenue comes from orders only.
DASHBOARD_TAXONOMY = ExpenseTaxonomy(name="dashboard")

# Counter cash: opening cash and cash top-ups are in the drawer, UPI top-ups are not.
# Plain "UPI Payment" and "Drawings" rows reduce the drawer.
CASH_BALANCE_TAXONOMY = ExpenseTaxonomy(
    name="cash_balance",
    revenue_categories=frozenset({EXTRA_CASH_PAYMENT, OPENING_CASH}),
    excluded_categories=frozenset({EXTRA_CASH_PAYMENT, OPENING_CASH, EXTRA_UPI_PAYMENT}),
)

# Expense table ("General Expenses" view).
EXPENSE_LIST_TAXONOMY = ExpenseTaxonomy(
    name="expense_list",
    excluded_categories=RESERVED_CATEGORIES,
)

GENERAL_EXPENSES = "General Expenses"

EXPENSE_CATEGORY_ALIASES = {
    "Online Payments": (UPI_PAYMENT, EXTRA_UPI_PAYMENT),
    "Cash Payments": (EXTRA_CASH_PAYMENT,),
    "Extra Payments": (EXTRA_CASH_PAYMENT, EXTRA_UPI_PAYMENT),
}


def expense_category_filter(category: Optional[str]) -> Dict[str, Any]:
    """Mongo filter for the expense table's category selector."""
    value = (category or "").strip()
    if not value or value == GENERAL_EXPENSES:
        return EXPENSE_LIST_TAXONOMY.general_expense_filter()
    aliased = EXPENSE_CATEGORY_ALIASES.get(value)
    if aliased is None:
        return {"category": value}
    if len(aliased) == 1:
        return {"category": aliased[0]}
    return {"category": {"$in": list(aliased)}}
