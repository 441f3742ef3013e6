from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from errors import ValidationError

ALL_BRANCHES = "all"


@dataclass(frozen=True)
class Branch:
    name: str
    display_name: str
    orders: str
    expenses: str
    bookings: str


BRANCH_ORDER = ("Sevoke", "Dagapur")

BRANCHES: Dict[str, Branch] = {
    "Sevoke": Branch(
        name="Sevoke",
        display_name="Sevoke Road",
        orders="OrderSevoke",
        expenses="ExpenseSevoke",
        bookings="BookingSevoke",
    ),
    "Dagapur": Branch(
        name="Dagapur",
        display_name="Dagapur",
        orders="OrderDagapur",
        expenses="ExpenseDagapur",
        bookings="BookingDagapur",
    ),
}


def validate_registry(registry: Dict[str, Branch], order=BRANCH_ORDER) -> None:
    if set(order) != set(registry):
        raise RuntimeError("Branch order does not match the branch registry")
    seen = set()
    for key, branch in registry.items():
        if key != branch.name:
            raise RuntimeError(f"Branch registered as {key!r} is named {branch.name!r}")
        for collection in (branch.orders, branch.expenses, branch.bookings):
            if collection in seen:
                raise RuntimeError(f"Collection {collection!r} is mapped to more than one branch")
            seen.add(collection)


validate_registry(BRANCHES)

_LOOKUP = {}
for _branch in BRANCHES.values():
    _LOOKUP[_branch.name.lower()] = _branch
    _LOOKUP[_branch.display_name.lower()] = _branch


def find_branch(value: Optional[str]) -> Optional[Branch]:
    """Branch by name or display name, case-insensitive."""
    return _LOOKUP.get((value or "").strip().lower())


def resolve_branches(selector: Optional[str]) -> List[Branch]:
    """
    "all" (or nothing) -> every branch in fixed order; a branch name -> that branch.
    Unknown names are rejected rather than silently returning empty results.
    """
    value = (selector or "").strip()
    if not value or value.lower() == ALL_BRANCHES:
        return [BRANCHES[name] for name in BRANCH_ORDER]
    branch = find_branch(value)
    if branch is None:
        raise ValidationError(f"Unknown branch: {value}")
    return [branch]
