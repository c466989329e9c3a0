"""
Memoization primitives for snapshot selectors.

Selectors are pure functions of an immutable snapshot. Because snapshots
share every untouched sub-tree by reference, "did this input change?" is an
identity test, not an equality test. This module turns that observation into
three explicit caches.

Manifesto:
    Consumers compare selector outputs by reference to decide whether to
    re-render or re-derive. A selector that returns an equal-but-new object
    for an unchanged snapshot defeats every consumer downstream. Identity
    stability has to be a guarantee of the cache layer, not an accident of
    the call site.

    - **Identity-keyed:** Inputs compare with ``is``, never ``==``
    - **Explicit:** Caches are objects with a size, not closures
    - **Bounded:** Descriptor registries evict least recently used entries
    - **Observable:** Recomputations are counted and logged at debug

Architecture:
    ::

        create_selector(*inputs, combiner) → MemoizedSelector
            state ─┬─ input_1(state) ─┐
                   ├─ input_2(state) ─┼─ all ``is`` last? ─ yes → last result
                   └─ input_n(state) ─┘                   no  → combiner(...)

        SelectorRegistry  — LRU of selector instances keyed by descriptor
        IdentityCache     — LRU of values keyed by the identity of a referent

Examples:
    >>> from restcache.core.cache import create_selector
    >>> select_total = create_selector(
    ...     lambda state: state.resources,
    ...     combiner=len,
    ... )
    >>> select_total(state) is select_total(state)
    True
    >>> select_total.recomputations()
    1

Performance:
    - MemoizedSelector hit: one call per input selector plus n identity checks
    - SelectorRegistry / IdentityCache: O(1) get/set via OrderedDict

Guardrails:
    ❌ DON'T: Return freshly built containers from input selectors
    ✅ DO: Return sub-trees of the snapshot so identity checks can hit

Tags:
    memoization, selectors, identity, lru, restcache

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from restcache.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_UNSET = object()


class MemoizedSelector(Generic[T]):
    """Selector that recomputes only when an input changes by identity.

    Holds the last input tuple and the last result (cache size 1 per
    instance). Different selector instances never share results.

    Attributes:
        name: Label used in debug logs.
    """

    def __init__(
        self,
        input_selectors: tuple[Callable[[Any], Any], ...],
        combiner: Callable[..., T],
        *,
        name: str | None = None,
    ):
        self._input_selectors = input_selectors
        self._combiner = combiner
        self._last_args: tuple[Any, ...] | object = _UNSET
        self._last_result: T | object = _UNSET
        self._recomputations = 0
        self.name = name or getattr(combiner, "__name__", "selector")

    def __call__(self, state: Any) -> T:
        args = tuple(select(state) for select in self._input_selectors)
        last = self._last_args
        if last is not _UNSET and all(a is b for a, b in zip(args, last)):  # type: ignore[arg-type]
            return self._last_result  # type: ignore[return-value]

        result = self._combiner(*args)
        self._last_args = args
        self._last_result = result
        self._recomputations += 1
        logger.debug(
            "selector_recomputed",
            selector=self.name,
            recomputations=self._recomputations,
        )
        return result

    def recomputations(self) -> int:
        """Number of times the combiner ran."""
        return self._recomputations

    def reset_recomputations(self) -> None:
        self._recomputations = 0

    def __repr__(self) -> str:
        return f"MemoizedSelector({self.name!r}, recomputations={self._recomputations})"


def create_selector(
    *input_selectors: Callable[[Any], Any],
    combiner: Callable[..., T],
    name: str | None = None,
) -> MemoizedSelector[T]:
    """Build a :class:`MemoizedSelector` from input selectors and a combiner.

    Args:
        input_selectors: Functions of the state; their results are passed
            positionally to ``combiner``.
        combiner: Pure function computing the derived value.
        name: Optional label for debug logs.
    """
    if not input_selectors:
        raise ValueError("create_selector needs at least one input selector")
    return MemoizedSelector(tuple(input_selectors), combiner, name=name)


# ------------------------------------------------------------------ #
# Bounded registries
# ------------------------------------------------------------------ #


class SelectorRegistry:
    """Bounded LRU of selector instances keyed by a hashable key.

    Selector factories use this so that building a selector twice for the
    same descriptor hands back the same instance, and with it the same
    memoized output.

    Example:
        registry = SelectorRegistry(max_size=128)
        selector = registry.get_or_create(("select_request", descriptor), build)
    """

    def __init__(self, *, max_size: int = 256):
        self._store: OrderedDict[Hashable, Any] = OrderedDict()
        self._max_size = max_size

    def get(self, key: Hashable) -> Any | None:
        """Retrieve a selector by key, refreshing its LRU position."""
        if key not in self._store:
            return None
        self._store.move_to_end(key)
        return self._store[key]

    def set(self, key: Hashable, value: Any) -> None:
        """Store a selector, evicting the least recently used one at capacity."""
        if key not in self._store and len(self._store) >= self._max_size:
            evicted, _ = self._store.popitem(last=False)
            logger.debug("selector_evicted", key=repr(evicted))
        self._store[key] = value
        self._store.move_to_end(key)

    def get_or_create(self, key: Hashable, factory: Callable[[], T]) -> T:
        existing = self.get(key)
        if existing is not None:
            return existing
        created = factory()
        self.set(key, created)
        return created

    def resize(self, max_size: int) -> None:
        """Change capacity, evicting the oldest entries if needed."""
        self._max_size = max_size
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)

    def delete(self, key: Hashable) -> None:
        self._store.pop(key, None)

    def exists(self, key: Hashable) -> bool:
        return key in self._store

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)


class IdentityCache(Generic[T]):
    """Bounded LRU of values keyed by the identity of a referent.

    The referent is retained alongside the value, so its ``id()`` cannot be
    recycled while the entry lives and a lookup can confirm the hit with
    ``is``.

    Example:
        cache = IdentityCache(max_size=4)
        denormalizer = cache.get_or_create(resources, lambda: Denormalizer(resources))
    """

    def __init__(self, *, max_size: int = 8):
        self._store: OrderedDict[int, tuple[Any, T]] = OrderedDict()
        self._max_size = max_size

    def get(self, referent: Any) -> T | None:
        entry = self._store.get(id(referent))
        if entry is None or entry[0] is not referent:
            return None
        self._store.move_to_end(id(referent))
        return entry[1]

    def set(self, referent: Any, value: T) -> None:
        key = id(referent)
        if key not in self._store and len(self._store) >= self._max_size:
            self._store.popitem(last=False)
        self._store[key] = (referent, value)
        self._store.move_to_end(key)

    def get_or_create(self, referent: Any, factory: Callable[[], T]) -> T:
        existing = self.get(referent)
        if existing is not None:
            return existing
        created = factory()
        self.set(referent, created)
        return created

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)


__all__ = [
    "MemoizedSelector",
    "create_selector",
    "SelectorRegistry",
    "IdentityCache",
]
