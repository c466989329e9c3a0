"""
Raw selector: descriptor → :class:`~restcache.selectors.models.Request`.

Projects QueryState fields onto a Request without touching the entity
store; ``data`` stays a tuple of store positions.

The selector is curried: build it once, apply it to many snapshots::

    select_posts = select_request_raw("latest-posts")
    select_posts(state_a)
    select_posts(state_b)

Its inputs are the NameBinding and the QueryState objects the descriptor
points at. Both are taken from the snapshot by reference, so a snapshot that
changed somewhere else (another name, another cache_id, the resources)
returns the previous Request object unchanged.
"""

from __future__ import annotations

from typing import Any

from restcache.core.cache import MemoizedSelector, create_selector
from restcache.selectors.models import Request
from restcache.selectors.registry import register_selector, select_api_state
from restcache.state.descriptors import (
    ByCoordinates,
    ByName,
    RequestDescriptor,
    parse_descriptor,
)
from restcache.state.index import QueryIndex
from restcache.state.snapshot import PENDING_QUERY, NameBinding, QueryState

FACTORY_NAME = "select_request_raw"


def build_request(
    coordinates: NameBinding | ByCoordinates | None,
    query: QueryState | None,
) -> Request:
    """Combine coordinates and a stored QueryState into a Request."""
    if coordinates is None:
        # Unbound name: the minimal synthetic pending shape.
        pending = PENDING_QUERY
        return Request(status=pending.status, error=pending.error, data=pending.data)

    if query is None:
        pending = PENDING_QUERY
        return Request(
            status=pending.status,
            error=pending.error,
            data=pending.data,
            cache_id=coordinates.cache_id,
            page=coordinates.page,
        )

    return Request(
        status=query.status,
        error=query.error,
        data=query.data,
        operation=query.operation,
        request_at=query.request_at,
        cache_id=coordinates.cache_id,
        page=coordinates.page,
    )


def _build_raw_selector(descriptor: RequestDescriptor) -> MemoizedSelector[Request]:
    if isinstance(descriptor, ByName):
        name = descriptor.name

        def select_coordinates(state: Any) -> NameBinding | None:
            return select_api_state(state).binding(name)

        label = f"{FACTORY_NAME}[{name}]"
    else:

        def select_coordinates(state: Any) -> RequestDescriptor:
            return descriptor

        label = f"{FACTORY_NAME}[{descriptor.cache_id}#{descriptor.page}]"

    def select_query_state(state: Any) -> QueryState | None:
        return QueryIndex(select_api_state(state)).lookup(descriptor)

    return create_selector(
        select_coordinates,
        select_query_state,
        combiner=build_request,
        name=label,
    )


def select_request_raw(descriptor: Any = None) -> MemoizedSelector[Request]:
    """Selector returning the raw Request for ``descriptor``.

    Args:
        descriptor: A request name, a mapping with ``cacheID`` (and optional
            ``page``), or a parsed :class:`ByName` / :class:`ByCoordinates`.

    Raises:
        InvalidDescriptorError: if the descriptor identifies no request.
    """
    parsed = parse_descriptor(descriptor)
    return register_selector(FACTORY_NAME, parsed, lambda: _build_raw_selector(parsed))


__all__ = [
    "build_request",
    "select_request_raw",
]
