"""
Per-endpoint reporting rules in one place.

The endpoints do not agree on date windows, order filters or which expense
categories count, and that divergence is kept on purpose. Change a rule here,
never inline in a route.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from expense_categories import (
    CASH_BALANCE_TAXONOMY,
    DASHBOARD_TAXONOMY,
    INSIGHTS_TAXONOMY,
    PERCENTAGE_TAXONOMY,
    ExpenseTaxonomy,
)
from services.date_windows import WindowPolicy

FULFILLED = {"status": "fulfilled"}
FULFILLED_DISPATCHED = {"status": "fulfilled", "order": "dispatched"}


@dataclass(frozen=True)
class ReportPolicy:
    name: str
    window: WindowPolicy
    taxonomy: ExpenseTaxonomy
    order_match: Dict[str, Any] = field(default_factory=dict)
    subtract_delivery_charge: bool = True
    read_expenses: bool = True


INSIGHTS = ReportPolicy(
    name="insights",
    window=WindowPolicy.BUSINESS_DAY_TRIMMED,
    taxonomy=INSIGHTS_TAXONOMY,
    order_match=FULFILLED,
)

DASHBOARD = ReportPolicy(
    name="dashboard-data",
    window=WindowPolicy.CALENDAR_UTC,
    taxonomy=DASHBOARD_TAXONOMY,
    order_match=FULFILLED_DISPATCHED,
    subtract_delivery_charge=False,
    read_expenses=False,
)

PERCENTAGE = ReportPolicy(
    name="percentage",
    window=WindowPolicy.INSTANT,
    taxonomy=PERCENTAGE_TAXONOMY,
    subtract_delivery_charge=False,
)

# All-time, so the window policy only matters if a caller narrows it.
CASH_BALANCE = ReportPolicy(
    name="cash-balance",
    window=WindowPolicy.BUSINESS_DAY,
    taxonomy=CASH_BALANCE_TAXONOMY,
    order_match=FULFILLED,
)

# Raw record listings.
ORDERS_WINDOW = WindowPolicy.BUSINESS_DAY
BOOKINGS_WINDOW = WindowPolicy.BUSINESS_DAY_CLOSED
EXPENSES_WINDOW = WindowPolicy.BUSINESS_DAY_CLOSED
