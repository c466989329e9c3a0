"""
Denormalizing selector: descriptor → Request with resolved entities.

Built over the raw selector and ``resources``. Each store position in
``data`` is replaced by the entity at that position, and each entity's
embedded relations are resolved one level deep.

Relation resolution:
    A relation is resolved when its name appears both in the entity's
    ``_links`` (link metadata) and in its ``_embedded`` map (relation name →
    local id, or a list of local ids). The target is looked up with
    :meth:`EntityStore.get_by_id` and attached under the relation name::

        {"id": 1, "_links": {"parent": {...}}, "_embedded": {"parent": 1}}
            → {"id": 1, ..., "parent": <entity at local id 1>}

    Targets that do not resolve are left out, never set to ``None``.
    Malformed ``_links`` / ``_embedded`` values are ignored.

Identity:
    An entity without a resolvable relation is returned as the very object
    held by the snapshot. An entity with relations is a shallow copy, built
    once per ``resources`` tuple and shared by every Request derived from
    that tuple. Deeper graphs are left to :func:`with_denormalize`.

    Sharing is bounded: the process keeps the resolved entities of the
    ``RESTCACHE_DENORMALIZER_CACHE_SIZE`` most recently used ``resources``
    tuples (default 8). Selecting from an older snapshot after that many
    others have been seen builds fresh copies for its entities; entities
    without relations are still the snapshot's own objects.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from restcache.core.cache import IdentityCache, MemoizedSelector, create_selector
from restcache.core.settings import get_settings
from restcache.selectors.models import Request
from restcache.selectors.raw import select_request_raw
from restcache.selectors.registry import register_selector, select_resources
from restcache.state.descriptors import parse_descriptor
from restcache.state.snapshot import EntityRecord
from restcache.state.store import EntityStore

FACTORY_NAME = "select_request"

LINKS_KEY = "_links"
EMBEDDED_KEY = "_embedded"


def _is_link(value: Any) -> bool:
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def embedded_relations(entity: Any) -> list[tuple[str, Any]]:
    """``(relation, local id reference)`` pairs declared by an entity."""
    if not isinstance(entity, Mapping):
        return []
    links = entity.get(LINKS_KEY)
    embedded = entity.get(EMBEDDED_KEY)
    if not isinstance(links, Mapping) or not isinstance(embedded, Mapping):
        return []
    return [
        (relation, reference)
        for relation, reference in embedded.items()
        if relation in links and _is_link(links[relation])
    ]


class Denormalizer:
    """Resolves local ids to entities for one ``resources`` tuple.

    Calling the instance resolves a local id, which makes it the
    ``denormalize`` function handed out by :func:`with_denormalize`.
    Resolved entities are cached per position.
    """

    __slots__ = ("store", "_resolved")

    def __init__(self, resources: Sequence[EntityRecord]):
        self.store = EntityStore(resources)
        self._resolved: dict[int, EntityRecord] = {}

    def __call__(self, local_id: Any) -> EntityRecord | None:
        return self._resolve(local_id, self.store.get_by_id(local_id))

    def entity_at(self, position: Any) -> EntityRecord | None:
        return self._resolve(position, self.store.get(position))

    def entities(self, positions: Sequence[Any]) -> tuple[EntityRecord, ...]:
        """Resolve positions in order, dropping the ones that do not resolve."""
        resolved = (self.entity_at(position) for position in positions)
        return tuple(entity for entity in resolved if entity is not None)

    def _resolve(self, address: Any, entity: EntityRecord | None) -> EntityRecord | None:
        if entity is None:
            return None
        cached = self._resolved.get(address)
        if cached is not None:
            return cached

        attached: dict[str, Any] = {}
        for relation, reference in embedded_relations(entity):
            target = self._target(reference)
            if target is not None:
                attached[relation] = target

        result = {**entity, **attached} if attached else entity
        self._resolved[address] = result
        return result

    def _target(self, reference: Any) -> Any:
        if isinstance(reference, Sequence) and not isinstance(reference, (str, bytes)):
            targets = tuple(
                target
                for target in (self.store.get_by_id(ref) for ref in reference)
                if target is not None
            )
            return targets or None
        return self.store.get_by_id(reference)


_denormalizers: IdentityCache[Denormalizer] | None = None


def _denormalizer_cache() -> IdentityCache[Denormalizer]:
    global _denormalizers
    if _denormalizers is None:
        _denormalizers = IdentityCache(max_size=get_settings().denormalizer_cache_size)
    return _denormalizers


def denormalizer_for(resources: Sequence[EntityRecord]) -> Denormalizer:
    """The shared :class:`Denormalizer` for a ``resources`` tuple."""
    return _denormalizer_cache().get_or_create(resources, lambda: Denormalizer(resources))


def clear_denormalizers() -> None:
    global _denormalizers
    _denormalizers = None


def denormalize_request(request: Request, resources: Sequence[EntityRecord]) -> Request:
    """Replace store positions in ``request.data`` with resolved entities."""
    if request.data is False:
        return request
    entities = denormalizer_for(resources).entities(request.data)
    return replace(request, data=entities)


def _build_selector(raw: MemoizedSelector[Request], label: str) -> MemoizedSelector[Request]:
    return create_selector(
        raw,
        select_resources,
        combiner=denormalize_request,
        name=label,
    )


def select_request(descriptor: Any = None) -> MemoizedSelector[Request]:
    """Selector returning the denormalized Request for ``descriptor``.

    Raises:
        InvalidDescriptorError: if the descriptor identifies no request.
    """
    parsed = parse_descriptor(descriptor)
    return register_selector(
        FACTORY_NAME,
        parsed,
        lambda: _build_selector(select_request_raw(parsed), f"{FACTORY_NAME}[{parsed!r}]"),
    )


__all__ = [
    "LINKS_KEY",
    "EMBEDDED_KEY",
    "Denormalizer",
    "embedded_relations",
    "denormalizer_for",
    "clear_denormalizers",
    "denormalize_request",
    "select_request",
]
