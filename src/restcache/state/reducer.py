"""
Snapshot reducer: the write-path transitions the selectors rely on.

Pure functions ``(ApiState, signal) -> ApiState``. Network I/O and payload
decoding happen elsewhere; these functions only record what happened.

Signals:
    ``request_issued``     pending QueryState at ``[uid][page]`` and
                           ``requests_by_name[name] = (uid, page)``,
                           in one new snapshot
    ``request_succeeded``  fetched entities normalized into ``resources``,
                           QueryState resolved with their positions
    ``request_failed``     QueryState moved to error, error kept verbatim

Normalization:
    Inline objects under an entity's ``_embedded`` map are stored first and
    replaced by their local ids (store positions). Entities whose
    ``_links.self`` href is already in the store overwrite that slot instead
    of being appended, so the store stays deduplicated and existing
    positions stay valid.

Stale completions:
    A completion whose ``request_at`` differs from the pending QueryState's
    belongs to a request that has since been re-issued; it is dropped and
    the snapshot returned unchanged.

Examples:
    >>> action = RequestAction(
    ...     RequestPayload(uid="/wp/v2/posts"),
    ...     RequestMeta(name="latest", aggregator="posts", request_at=1.0, operation="get"),
    ... )
    >>> state = request_issued(ApiState.empty(), action)
    >>> state = request_succeeded(state, action, [{"id": 7}])
    >>> state.query_state("/wp/v2/posts").data
    (0,)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from restcache.core.enums import SignalType
from restcache.core.errors import InvalidTransitionError
from restcache.core.logging import get_logger
from restcache.state.snapshot import ApiState, EntityRecord, NameBinding, QueryState

logger = get_logger(__name__)


# ------------------------------------------------------------------ #
# Signals
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class RequestPayload:
    uid: str
    page: int = 1


@dataclass(frozen=True, slots=True)
class RequestMeta:
    name: str
    aggregator: str
    request_at: float
    operation: str = "get"


@dataclass(frozen=True, slots=True)
class RequestAction:
    """Request-issued signal: ``{payload: {uid, page?}, meta: {...}}``."""

    payload: RequestPayload
    meta: RequestMeta

    @property
    def cache_id(self) -> str:
        return self.payload.uid

    @property
    def page(self) -> int:
        return self.payload.page

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RequestAction:
        """Build from the plain signal layout (camelCase ``requestAt`` accepted)."""
        payload = data["payload"]
        meta = data["meta"]
        return cls(
            payload=RequestPayload(uid=payload["uid"], page=int(payload.get("page") or 1)),
            meta=RequestMeta(
                name=meta["name"],
                aggregator=meta["aggregator"],
                request_at=meta.get("request_at", meta.get("requestAt")),
                operation=meta.get("operation", "get"),
            ),
        )


@dataclass(frozen=True, slots=True)
class Signal:
    """A write-path signal routed by :func:`reduce`."""

    type: SignalType
    action: RequestAction
    entities: tuple[EntityRecord, ...] = ()
    error: Any = False

    def __post_init__(self) -> None:
        if not isinstance(self.type, SignalType):
            object.__setattr__(self, "type", SignalType(self.type))
        if not isinstance(self.entities, tuple):
            object.__setattr__(self, "entities", tuple(self.entities))


# ------------------------------------------------------------------ #
# Transitions
# ------------------------------------------------------------------ #


def request_issued(state: ApiState, action: RequestAction) -> ApiState:
    """Record a new pending request and bind its name to its coordinates."""
    query = QueryState(
        request_at=action.meta.request_at,
        operation=action.meta.operation,
    )
    logger.debug(
        "request_issued",
        name=action.meta.name,
        cache_id=action.cache_id,
        page=action.page,
        operation=action.meta.operation,
    )
    return (
        state
        .set_query(action.cache_id, action.page, query)
        .bind_name(action.meta.name, NameBinding(action.cache_id, action.page))
    )


def _pending_query(state: ApiState, action: RequestAction) -> QueryState | None:
    query = state.query_state(action.cache_id, action.page)
    if query is None:
        raise InvalidTransitionError(
            "completion received for a request that was never issued"
        ).with_context(
            name=action.meta.name, cache_id=action.cache_id, page=action.page
        )
    if query.request_at != action.meta.request_at:
        logger.debug(
            "stale_completion_dropped",
            cache_id=action.cache_id,
            page=action.page,
            request_at=action.meta.request_at,
            current_request_at=query.request_at,
        )
        return None
    return query


def request_succeeded(
    state: ApiState,
    action: RequestAction,
    entities: Iterable[EntityRecord],
) -> ApiState:
    """Store fetched entities and resolve the query with their positions.

    Raises:
        InvalidTransitionError: if the request was never issued or its
            QueryState is no longer pending.
    """
    query = _pending_query(state, action)
    if query is None:
        return state

    normalizer = _Normalizer(state.resources)
    positions = tuple(normalizer.store(entity) for entity in entities)
    try:
        resolved = query.resolve(positions)
    except InvalidTransitionError as exc:
        exc.with_context(cache_id=action.cache_id, page=action.page)
        raise

    logger.debug(
        "request_succeeded",
        name=action.meta.name,
        cache_id=action.cache_id,
        page=action.page,
        count=len(positions),
    )
    next_state = state.set_query(action.cache_id, action.page, resolved)
    if normalizer.changed:
        next_state = replace(next_state, resources=normalizer.resources())
    return next_state


def request_failed(state: ApiState, action: RequestAction, error: Any) -> ApiState:
    """Move the query to ``error``, keeping ``error`` verbatim.

    Raises:
        InvalidTransitionError: if the request was never issued or its
            QueryState is no longer pending.
    """
    query = _pending_query(state, action)
    if query is None:
        return state
    try:
        failed = query.fail(error)
    except InvalidTransitionError as exc:
        exc.with_context(cache_id=action.cache_id, page=action.page)
        raise

    logger.debug(
        "request_failed",
        name=action.meta.name,
        cache_id=action.cache_id,
        page=action.page,
    )
    return state.set_query(action.cache_id, action.page, failed)


def reduce(state: ApiState, signal: Signal) -> ApiState:
    """Apply one write-path signal."""
    if signal.type is SignalType.REQUEST:
        return request_issued(state, signal.action)
    if signal.type is SignalType.REQUEST_SUCCEEDED:
        return request_succeeded(state, signal.action, signal.entities)
    return request_failed(state, signal.action, signal.error)


# ------------------------------------------------------------------ #
# Normalization
# ------------------------------------------------------------------ #


def self_href(entity: Any) -> str | None:
    """The ``_links.self`` href of an entity, if it declares one."""
    if not isinstance(entity, Mapping):
        return None
    links = entity.get("_links")
    if not isinstance(links, Mapping):
        return None
    link = links.get("self")
    if isinstance(link, Sequence) and not isinstance(link, (str, bytes)):
        link = link[0] if link else None
    if isinstance(link, Mapping):
        href = link.get("href")
        return href if isinstance(href, str) else None
    return None


class _Normalizer:
    """Accumulates store writes for one completion, then emits one tuple."""

    def __init__(self, resources: tuple[EntityRecord, ...]):
        self._original = resources
        self._resources: list[EntityRecord] = list(resources)
        self._by_href: dict[str, int] = {}
        for position, entity in enumerate(resources):
            href = self_href(entity)
            if href is not None:
                self._by_href[href] = position
        self.changed = False

    def store(self, entity: EntityRecord) -> int:
        record = dict(entity)
        embedded = record.get("_embedded")
        if isinstance(embedded, Mapping):
            record["_embedded"] = {
                relation: self._embed(value) for relation, value in embedded.items()
            }
        return self._write(record)

    def _embed(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self.store(value)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            refs: list[Any] = []
            for item in value:
                # WordPress wraps some embedded collections in an extra list
                if isinstance(item, Sequence) and not isinstance(item, (str, bytes)):
                    refs.extend(self._embed(sub) for sub in item)
                else:
                    refs.append(self._embed(item))
            return refs
        return value

    def _write(self, record: EntityRecord) -> int:
        self.changed = True
        href = self_href(record)
        if href is not None and href in self._by_href:
            position = self._by_href[href]
            self._resources[position] = record
            return position
        position = len(self._resources)
        self._resources.append(record)
        if href is not None:
            self._by_href[href] = position
        return position

    def resources(self) -> tuple[EntityRecord, ...]:
        return tuple(self._resources)


__all__ = [
    "RequestPayload",
    "RequestMeta",
    "RequestAction",
    "Signal",
    "request_issued",
    "request_succeeded",
    "request_failed",
    "reduce",
    "self_href",
]
