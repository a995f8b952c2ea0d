"""
Pagination envelope for search endpoints.

``search`` endpoints always paginate and answer ``{"data": [...],
"meta": {...}}``; plain ``list`` endpoints answer ``{"data": [...]}``
with the full, unpaged result set.  Both shapes are produced here so
the resource endpoints never assemble them by hand.
"""

import math
from typing import Any, Callable, Dict, Iterable, List, Optional

from .config import settings
from .db import paginate
from .errors import ValidationFailed
from .query import Predicate


def validate_page(page: Optional[int], size: Optional[int], size_param: str = "size") -> tuple:
    """Apply defaults and bounds to ``page``/``size`` query values."""
    page = 1 if page is None else page
    size = settings.default_page_size if size is None else size
    errors: Dict[str, List[str]] = {}
    if page < 1:
        errors["page"] = ["The page field must be at least 1."]
    if size < 1 or size > settings.max_page_size:
        label = size_param.replace("_", " ")
        errors[size_param] = [f"The {label} field must be between 1 and {settings.max_page_size}."]
    if errors:
        raise ValidationFailed(errors)
    return page, size


def build_meta(total: int, page: int, size: int, count: int) -> Dict[str, Any]:
    first = (page - 1) * size + 1 if count else None
    return {
        "total": total,
        "current_page": page,
        "per_page": size,
        "last_page": max(1, math.ceil(total / size)),
        "from": first,
        "to": first + count - 1 if count else None,
    }


def paginated(
    table: str,
    predicate: Optional[Predicate],
    page: int,
    size: int,
    serialize: Callable[[List[Dict[str, Any]]], List[Any]],
) -> Dict[str, Any]:
    """Run one page of ``predicate`` over ``table`` and wrap it.

    ``serialize`` receives the whole page of raw rows at once so that
    resources with relationships can load them in a single query.
    A page past the last one yields empty ``data`` with the full
    ``total``; it is not an error.
    """
    rows, total = paginate(table, predicate, page, size)
    data = serialize(rows)
    return {"data": data, "meta": build_meta(total, page, size, len(data))}


def listing(items: Iterable[Any]) -> Dict[str, Any]:
    return {"data": list(items)}
