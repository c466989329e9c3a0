"""
Immutable API state snapshots.

An :class:`ApiState` is the whole persisted state read by the selectors::

    resources:         tuple[EntityRecord, ...]                 # by position
    requests_by_name:  Mapping[str, NameBinding]
    requests_by_query: Mapping[cache_id, Mapping[page, QueryState]]

Snapshots are never mutated. Every ``with_*`` / ``set_*`` helper returns a
new snapshot that shares each untouched sub-tree by reference, which is what
lets the memoization layer decide "unchanged" with an identity check.

Manifesto:
    - **Frozen records:** QueryState, NameBinding and ApiState are frozen dataclasses
    - **Structural sharing:** Updating one coordinate copies one page map,
      one outer map, and nothing else
    - **Append-only history:** A new request replaces the QueryState object
      at its coordinate; the old object is never modified

Examples:
    >>> state = ApiState.empty()
    >>> state, positions = state.append_resources([{"id": 7, "title": "Hello"}])
    >>> positions
    (0,)
    >>> state2 = state.bind_name("latest", NameBinding("/wp/v2/posts"))
    >>> state2.resources is state.resources
    True

Tags:
    snapshot, immutable, structural-sharing, restcache

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Literal

from restcache.core.enums import RequestStatus
from restcache.core.errors import InvalidTransitionError

EntityRecord = Mapping[str, Any]
Positions = tuple[int, ...]


def _frozen_map(data: Mapping[Any, Any] | None = None) -> Mapping[Any, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True, slots=True)
class NameBinding:
    """Most recent coordinates used under a request name."""

    cache_id: str
    page: int = 1


@dataclass(frozen=True, slots=True)
class QueryState:
    """State of one query at one ``(cache_id, page)`` coordinate.

    Attributes:
        status: pending, resolved or error.
        error: ``False`` or the error payload stored by the write path, verbatim.
        request_at: Timestamp of the request that created this state.
        operation: Operation label (``"get"``, ``"create"``, ...).
        data: ``False`` or the store positions of the fetched entities,
            in fetch order.
    """

    status: RequestStatus = RequestStatus.PENDING
    error: Any = False
    request_at: float | None = None
    operation: str | None = None
    data: Positions | Literal[False] = False

    def __post_init__(self) -> None:
        if not isinstance(self.status, RequestStatus):
            object.__setattr__(self, "status", RequestStatus(self.status))
        if self.data is not False and not isinstance(self.data, tuple):
            object.__setattr__(self, "data", tuple(self.data))

    def resolve(self, positions: Iterable[int]) -> QueryState:
        """Return the resolved successor of this pending state."""
        self._require_pending(RequestStatus.RESOLVED)
        return replace(self, status=RequestStatus.RESOLVED, data=tuple(positions))

    def fail(self, error: Any) -> QueryState:
        """Return the errored successor of this pending state."""
        self._require_pending(RequestStatus.ERROR)
        return replace(self, status=RequestStatus.ERROR, error=error)

    def _require_pending(self, target: RequestStatus) -> None:
        if self.status is not RequestStatus.PENDING:
            raise InvalidTransitionError(
                f"cannot move query from {self.status.value} to {target.value}"
            )


# Synthetic default for a descriptor with no binding or no query yet.
PENDING_QUERY = QueryState()


@dataclass(frozen=True, slots=True)
class ApiState:
    """Immutable snapshot of everything the selectors read."""

    resources: tuple[EntityRecord, ...] = ()
    requests_by_name: Mapping[str, NameBinding] = field(default_factory=_frozen_map)
    requests_by_query: Mapping[str, Mapping[int, QueryState]] = field(
        default_factory=_frozen_map
    )

    @classmethod
    def empty(cls) -> ApiState:
        return cls()

    # -- lookups ------------------------------------------------------

    def binding(self, name: str) -> NameBinding | None:
        return self.requests_by_name.get(name)

    def query_state(self, cache_id: str, page: int = 1) -> QueryState | None:
        pages = self.requests_by_query.get(cache_id)
        if pages is None:
            return None
        return pages.get(page)

    # -- copy-on-write updates ----------------------------------------

    def set_resource(self, position: int, entity: EntityRecord) -> ApiState:
        """Overwrite the entity at ``position`` (or append at ``len``)."""
        resources = self.resources
        if position == len(resources):
            return replace(self, resources=resources + (entity,))
        if not 0 <= position < len(resources):
            raise IndexError(f"position {position} out of range")
        return replace(
            self,
            resources=resources[:position] + (entity,) + resources[position + 1:],
        )

    def append_resources(self, entities: Iterable[EntityRecord]) -> tuple[ApiState, Positions]:
        """Append entities and return the new snapshot with their positions."""
        added = tuple(entities)
        start = len(self.resources)
        positions = tuple(range(start, start + len(added)))
        if not added:
            return self, positions
        return replace(self, resources=self.resources + added), positions

    def bind_name(self, name: str, binding: NameBinding) -> ApiState:
        by_name = dict(self.requests_by_name)
        by_name[name] = binding
        return replace(self, requests_by_name=_frozen_map(by_name))

    def set_query(self, cache_id: str, page: int, query: QueryState) -> ApiState:
        pages = dict(self.requests_by_query.get(cache_id, {}))
        pages[page] = query
        by_query = dict(self.requests_by_query)
        by_query[cache_id] = _frozen_map(pages)
        return replace(self, requests_by_query=_frozen_map(by_query))

    # -- hydration ----------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ApiState:
        """Build a snapshot from a plain nested mapping.

        Accepts the persisted layout with either camelCase keys
        (``requestsByName``, ``cacheID``, ``requestAt``) or snake_case keys.
        Page keys may be strings, as produced by a JSON round trip.
        """
        by_name_raw = _pick(data, "requests_by_name", "requestsByName") or {}
        by_query_raw = _pick(data, "requests_by_query", "requestsByQuery") or {}

        by_name = {
            name: NameBinding(
                cache_id=_pick(raw, "cache_id", "cacheID"),
                page=int(raw.get("page", 1)),
            )
            for name, raw in by_name_raw.items()
        }
        by_query = {
            cache_id: _frozen_map(
                {int(page): _query_from_dict(raw) for page, raw in pages.items()}
            )
            for cache_id, pages in by_query_raw.items()
        }
        return cls(
            resources=tuple(data.get("resources") or ()),
            requests_by_name=_frozen_map(by_name),
            requests_by_query=_frozen_map(by_query),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase persisted layout."""
        return {
            "resources": [dict(entity) for entity in self.resources],
            "requestsByName": {
                name: {"cacheID": b.cache_id, "page": b.page}
                for name, b in self.requests_by_name.items()
            },
            "requestsByQuery": {
                cache_id: {
                    page: {
                        "status": q.status.value,
                        "error": q.error,
                        "requestAt": q.request_at,
                        "operation": q.operation,
                        "data": list(q.data) if q.data is not False else False,
                    }
                    for page, q in pages.items()
                }
                for cache_id, pages in self.requests_by_query.items()
            },
        }


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _query_from_dict(raw: Mapping[str, Any]) -> QueryState:
    data = raw.get("data", False)
    return QueryState(
        status=RequestStatus(raw.get("status", RequestStatus.PENDING.value)),
        error=raw.get("error", False),
        request_at=_pick(raw, "request_at", "requestAt"),
        operation=raw.get("operation"),
        data=False if data is False or data is None else tuple(data),
    )


__all__ = [
    "EntityRecord",
    "Positions",
    "NameBinding",
    "QueryState",
    "PENDING_QUERY",
    "ApiState",
]
