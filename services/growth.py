from __future__ import annotations


def growth_percentage(current: float, previous: float) -> float:
    """
    Percentage change from `previous` to `current`.
    With nothing to compare against, any positive figure counts as +100%.
    """
    if not previous:
        return 100.0 if current > 0 else 0.0
    return ((current - previous) / previous) * 100
