"""Sorting helper for repository list queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from kambafy.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply a "field:direction" ordering to a query.

    Unknown columns fall back to ``default_field``; unknown directions fall
    back to ``default_direction``.
    """
    field = default_field
    direction = default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        if hasattr(model, candidate_field):
            field = candidate_field
            direction = candidate_direction or "asc"
            if direction not in ("asc", "desc"):
                direction = default_direction

    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(getattr(model, field)))
