"""
Test support utilities for restcache tests.

Snapshot builders that don't fit as pytest fixtures but are useful across
multiple test files. They mirror what the write path does: bind a name to
coordinates and store a QueryState at those coordinates.
"""

from __future__ import annotations

from typing import Any

from restcache.core.enums import RequestStatus
from restcache.state.snapshot import ApiState, NameBinding, QueryState

REQUEST_AT = 1_700_000_000_000


def pending_query(**overrides: Any) -> QueryState:
    fields: dict[str, Any] = {"request_at": REQUEST_AT, "operation": "get"}
    fields.update(overrides)
    return QueryState(**fields)


def resolved_query(data: tuple[int, ...] = (0,), **overrides: Any) -> QueryState:
    fields: dict[str, Any] = {
        "status": RequestStatus.RESOLVED,
        "request_at": REQUEST_AT,
        "operation": "get",
        "data": data,
    }
    fields.update(overrides)
    return QueryState(**fields)


def build_state(
    resources: list[dict[str, Any]] | None = None,
    *,
    name: str | None = "test",
    cache_id: str = "test/",
    page: int = 1,
    query: QueryState | None = None,
) -> ApiState:
    """Snapshot with optional resources, name binding and query."""
    state = ApiState(resources=tuple(resources or ()))
    if name is not None:
        state = state.bind_name(name, NameBinding(cache_id, page))
    if query is not None:
        state = state.set_query(cache_id, page, query)
    return state
