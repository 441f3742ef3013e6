"""Search / sort / paginate for list endpoints, driven by query args."""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 5
MAX_PAGE_SIZE = 100


def _int_arg(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _sort_value(val: Any):
    # None last, numbers before strings; keeps mixed columns comparable.
    if val is None or val == "":
        return (2, 0, "")
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return (0, val, "")
    return (1, 0, str(val).lower())


def filter_rows(rows: Iterable[Dict[str, Any]], search: str, fields: Sequence[str]) -> List[Dict[str, Any]]:
    needle = (search or "").strip().lower()
    rows = list(rows)
    if not needle or not fields:
        return rows
    return [
        r for r in rows
        if any(needle in str(r.get(f) if r.get(f) is not None else "").lower() for f in fields)
    ]


def sort_rows(rows: List[Dict[str, Any]], key: str, descending: bool = False) -> List[Dict[str, Any]]:
    if not key:
        return rows
    return sorted(rows, key=lambda r: _sort_value(r.get(key)), reverse=descending)


def paginate(rows: List[Dict[str, Any]], page: int, page_size: int) -> Dict[str, Any]:
    page_size = min(max(page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)
    total = len(rows)
    pages = max(math.ceil(total / page_size), 1)
    page = min(max(page, 1), pages)
    start = (page - 1) * page_size
    return {
        "items": rows[start:start + page_size],
        "pagination": {"page": page, "page_size": page_size, "total": total, "pages": pages},
    }


def apply_table_state(
    rows: Iterable[Dict[str, Any]],
    args,
    search_fields: Sequence[str] = (),
    default_sort: Optional[str] = None,
    default_order: str = "asc",
) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
    """
    `search`, `sort`, `order` narrow and order the rows. Only when `page` is given
    is the result wrapped as {"items", "pagination"}; otherwise a plain list.
    """
    out = filter_rows(rows, args.get("search") or "", search_fields)
    sort_key = (args.get("sort") or default_sort or "").strip()
    order = (args.get("order") or default_order or "asc").strip().lower()
    out = sort_rows(out, sort_key, descending=order == "desc")

    if not args.get("page"):
        return out
    return paginate(
        out,
        _int_arg(args.get("page"), 1),
        _int_arg(args.get("page_size"), DEFAULT_PAGE_SIZE),
    )
