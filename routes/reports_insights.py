from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import Blueprint, jsonify, request

from branches import resolve_branches
from db import get_db
from report_policies import DASHBOARD, INSIGHTS, PERCENTAGE
from services.aggregation import aggregate_period
from services.date_windows import normalize_window, optional_window, previous_window
from services.growth import growth_percentage

logger = logging.getLogger(__name__)

reports_insights_bp = Blueprint("reports_insights", __name__, url_prefix="/api")

USERS = "UserData"


def _payload() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _money(val: float) -> float:
    return round(val, 2)


@reports_insights_bp.route("/insights", methods=["POST"])
def insights():
    """One row per business day in range, zero days included."""
    data = _payload()
    window = normalize_window(data.get("startDate"), data.get("endDate"), INSIGHTS.window)
    branches = resolve_branches(data.get("branch"))

    totals = aggregate_period(get_db(), branches, window, INSIGHTS, fill_days=True)

    rows: List[Dict[str, Any]] = []
    for day in totals.sorted_days():
        row = {
            "date": day.date,
            "numberOfOrders": day.orders,
            "generalExpenses": _money(day.general_expenses),
            "revenue": _money(day.revenue),
            "profit": _money(day.profit),
        }
        if day.has_online:
            row["online"] = _money(day.online)
        rows.append(row)
    return jsonify(rows)


@reports_insights_bp.route("/dashboard-data", methods=["POST"])
def dashboard_data():
    data = _payload()
    window = normalize_window(data.get("startDate"), data.get("endDate"), DASHBOARD.window)
    prev = optional_window(data.get("previousStartDate"), data.get("previousEndDate"), DASHBOARD.window)
    if prev is None:
        prev = previous_window(window)
    branches = resolve_branches(data.get("branch"))

    db = get_db()
    current = aggregate_period(db, branches, window, DASHBOARD)
    previous = aggregate_period(db, branches, prev, DASHBOARD)

    users_col = db[USERS]
    total_users = users_col.count_documents({})
    new_signups = users_col.count_documents({"signupDate": window.mongo_range()})

    sales_data: List[Dict[str, Any]] = []
    for branch in branches:
        for day in current.branches[branch.name].sorted_days():
            sales_data.append({
                "date": day.date,
                "revenue": _money(day.revenue),
                "orders": day.orders,
                "branch": branch.name,
            })
    sales_data.sort(key=lambda r: r["date"])

    return jsonify({
        "totalRevenue": _money(current.revenue),
        "totalUsers": total_users,
        "totalOrders": current.orders,
        "salesData": sales_data,
        "growthPercentage": growth_percentage(current.revenue, previous.revenue),
        "orderGrowthPercentage": growth_percentage(current.orders, previous.orders),
        "newSignups": new_signups,
    })


@reports_insights_bp.route("/percentage", methods=["POST"])
def percentage():
    """Growth of revenue, orders and expenses against the preceding equal period."""
    data = _payload()
    window = normalize_window(data.get("startDate"), data.get("endDate"), PERCENTAGE.window)
    branches = resolve_branches(data.get("branch"))

    db = get_db()
    current = aggregate_period(db, branches, window, PERCENTAGE)
    previous = aggregate_period(db, branches, previous_window(window), PERCENTAGE)

    return jsonify({
        "revenue": growth_percentage(current.revenue, previous.revenue),
        "orders": growth_percentage(current.orders, previous.orders),
        "expenses": growth_percentage(current.general_expenses, previous.general_expenses),
    })
