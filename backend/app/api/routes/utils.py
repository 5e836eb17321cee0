from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException

from app.core.timezone import get_timezone_aware_now

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
async def health_check() -> bool:
    return True


def get_current_time() -> datetime:
    """Returns the current datetime in the configured timezone."""
    return get_timezone_aware_now()


def apply_ordering(query: Any, order_by: list[str], sortable: dict[str, Any]) -> Any:
    """
    Apply `order_by` entries such as "title" or "-created_date" to a select.

    A leading "-" sorts descending. Unknown fields are rejected with a 400.
    """
    for order in order_by:
        is_desc = order.startswith("-")
        field = order.lstrip("-")
        column = sortable.get(field)
        if column is None:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid order_by field: {field}. Allowed fields: {list(sortable)}",
            )
        query = query.order_by(column.desc() if is_desc else column.asc())
    return query
