from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from branches import Branch
from report_policies import ReportPolicy
from services.date_windows import DateWindow

logger = logging.getLogger(__name__)

ORDER_FIELDS = {"total": 1, "tableDeliveryCharge": 1, "createdAt": 1}
EXPENSE_FIELDS = {"amount": 1, "category": 1, "createdAt": 1}


def as_float(val: Any) -> float:
    try:
        return float(val)
    except Exception:
        return 0.0


def is_number(val: Any) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def order_revenue(doc: Dict[str, Any], subtract_delivery_charge: bool = True) -> float:
    """Order total, less the table delivery charge when one is recorded."""
    total = as_float(doc.get("total"))
    charge = doc.get("tableDeliveryCharge")
    if subtract_delivery_charge and is_number(charge):
        total -= charge
    return total


@dataclass
class DayTotals:
    date: str
    orders: int = 0
    revenue: float = 0.0
    general_expenses: float = 0.0
    online: float = 0.0
    has_online: bool = False

    @property
    def profit(self) -> float:
        return self.revenue - self.general_expenses

    def merge(self, other: "DayTotals") -> None:
        self.orders += other.orders
        self.revenue += other.revenue
        self.general_expenses += other.general_expenses
        self.online += other.online
        self.has_online = self.has_online or other.has_online


@dataclass
class PeriodTotals:
    revenue: float = 0.0
    orders: int = 0
    general_expenses: float = 0.0
    online: float = 0.0
    daily: Dict[str, DayTotals] = field(default_factory=dict)
    branches: Dict[str, "PeriodTotals"] = field(default_factory=dict)

    @property
    def profit(self) -> float:
        return self.revenue - self.general_expenses

    def day(self, key: str) -> DayTotals:
        if key not in self.daily:
            self.daily[key] = DayTotals(date=key)
        return self.daily[key]

    def sorted_days(self) -> List[DayTotals]:
        return [self.daily[k] for k in sorted(self.daily)]

    def merge(self, other: "PeriodTotals") -> None:
        self.revenue += other.revenue
        self.orders += other.orders
        self.general_expenses += other.general_expenses
        self.online += other.online
        for key, day in other.daily.items():
            self.day(key).merge(day)


def _date_match(window: Optional[DateWindow]) -> Dict[str, Any]:
    if window is None:
        return {}
    return {"createdAt": window.mongo_range()}


def _day_key(window: Optional[DateWindow], doc: Dict[str, Any]) -> Optional[str]:
    created = doc.get("createdAt")
    if window is None or not isinstance(created, datetime):
        return None
    return window.day_key(created)


def aggregate_branch(
    database,
    branch: Branch,
    window: Optional[DateWindow],
    policy: ReportPolicy,
    fill_days: bool = False,
) -> PeriodTotals:
    """
    Totals for one branch. `window=None` means all time.
    Database errors propagate; callers never get a partial result.
    """
    totals = PeriodTotals()
    if fill_days and window is not None:
        for key in window.days():
            totals.day(key)

    order_query = {**policy.order_match, **_date_match(window)}
    for doc in database[branch.orders].find(order_query, ORDER_FIELDS):
        revenue = order_revenue(doc, policy.subtract_delivery_charge)
        totals.orders += 1
        totals.revenue += revenue
        key = _day_key(window, doc)
        if key:
            day = totals.day(key)
            day.orders += 1
            day.revenue += revenue

    if policy.read_expenses:
        taxonomy = policy.taxonomy
        for doc in database[branch.expenses].find(_date_match(window), EXPENSE_FIELDS):
            amount = as_float(doc.get("amount"))
            category = doc.get("category")
            key = _day_key(window, doc)
            day = totals.day(key) if key else None

            if taxonomy.is_revenue(category):
                totals.revenue += amount
                if day:
                    day.revenue += amount
            if taxonomy.is_general_expense(category):
                totals.general_expenses += amount
                if day:
                    day.general_expenses += amount
            if taxonomy.is_online(category):
                totals.online += amount
                if day:
                    day.online += amount
                    day.has_online = True

    logger.debug(
        "%s %s: revenue=%.2f orders=%d expenses=%.2f",
        policy.name, branch.name, totals.revenue, totals.orders, totals.general_expenses,
    )
    return totals


def aggregate_period(
    database,
    branches: Iterable[Branch],
    window: Optional[DateWindow],
    policy: ReportPolicy,
    fill_days: bool = False,
) -> PeriodTotals:
    """Fan out over each branch's collections and sum the results."""
    combined = PeriodTotals()
    if fill_days and window is not None:
        for key in window.days():
            combined.day(key)

    for branch in branches:
        branch_totals = aggregate_branch(database, branch, window, policy, fill_days=fill_days)
        combined.branches[branch.name] = branch_totals
        combined.merge(branch_totals)
    return combined
