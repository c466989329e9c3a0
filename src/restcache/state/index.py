"""Two-level query lookup: name → coordinates, coordinates → QueryState.

A missing binding or a missing QueryState is not an error. Both resolve to
:data:`~restcache.state.snapshot.PENDING_QUERY`, the synthetic pending state
that models "nothing requested yet".
"""

from __future__ import annotations

from dataclasses import dataclass

from restcache.state.descriptors import ByCoordinates, ByName, RequestDescriptor
from restcache.state.snapshot import PENDING_QUERY, ApiState, NameBinding, QueryState


@dataclass(frozen=True, slots=True)
class ResolvedQuery:
    """Coordinates and state a descriptor resolved to.

    ``cache_id`` and ``page`` are ``None`` when a name has never been bound.
    ``exists`` is ``False`` when ``query_state`` is the synthetic default.
    """

    cache_id: str | None
    page: int | None
    query_state: QueryState
    exists: bool


class QueryIndex:
    """Resolves descriptors against one :class:`ApiState` snapshot."""

    __slots__ = ("_state",)

    def __init__(self, state: ApiState):
        self._state = state

    def coordinates(self, descriptor: RequestDescriptor) -> NameBinding | None:
        """Coordinates for a descriptor, ``None`` for an unbound name."""
        if isinstance(descriptor, ByName):
            return self._state.binding(descriptor.name)
        return NameBinding(descriptor.cache_id, descriptor.page)

    def lookup(self, descriptor: RequestDescriptor) -> QueryState | None:
        """The stored QueryState object for a descriptor, without defaults."""
        if isinstance(descriptor, ByCoordinates):
            return self._state.query_state(descriptor.cache_id, descriptor.page)
        binding = self._state.binding(descriptor.name)
        if binding is None:
            return None
        return self._state.query_state(binding.cache_id, binding.page)

    def resolve(self, descriptor: RequestDescriptor) -> ResolvedQuery:
        coordinates = self.coordinates(descriptor)
        if coordinates is None:
            return ResolvedQuery(None, None, PENDING_QUERY, exists=False)

        query = self._state.query_state(coordinates.cache_id, coordinates.page)
        if query is None:
            return ResolvedQuery(
                coordinates.cache_id, coordinates.page, PENDING_QUERY, exists=False
            )
        return ResolvedQuery(coordinates.cache_id, coordinates.page, query, exists=True)


__all__ = [
    "ResolvedQuery",
    "QueryIndex",
]
