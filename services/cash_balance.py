from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from branches import BRANCH_ORDER, BRANCHES, Branch
from report_policies import CASH_BALANCE
from services.aggregation import aggregate_branch

CASH_ENTRIES = "CashBalanceDetails"

# Differences under a paisa count as a match.
MATCH_TOLERANCE = 0.01


def counter_balance(database, branch: Branch) -> float:
    """All-time cash that should be in the branch's drawer."""
    totals = aggregate_branch(database, branch, None, CASH_BALANCE)
    return totals.revenue - totals.general_expenses


def all_counter_balances(database) -> Dict[str, float]:
    return {name: round(counter_balance(database, BRANCHES[name]), 2) for name in BRANCH_ORDER}


def reconciliation_status(difference: float) -> str:
    if abs(difference) < MATCH_TOLERANCE:
        return "matched"
    return "excess" if difference > 0 else "short"


def build_cash_entry(database, branch: Branch, amount_entered: float) -> Dict[str, Any]:
    actual = round(counter_balance(database, branch), 2)
    difference = round(amount_entered - actual, 2)
    return {
        "location": branch.display_name,
        "amountEntered": amount_entered,
        "actualAmount": actual,
        "difference": difference,
        "status": reconciliation_status(difference),
        "createdAt": datetime.utcnow(),
    }
