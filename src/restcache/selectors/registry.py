"""Process-wide registry of selector instances and snapshot access helpers.

Selector factories register the instances they build here, keyed by
``(factory name, descriptor)``, so that building a selector twice for the
same descriptor returns the same memoized instance.

The registry is shared by every factory: ``select_request`` registers its
own instance and the ``select_request_raw`` instance it is built on, so
``RESTCACHE_SELECTOR_CACHE_SIZE`` bounds both kinds together.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from restcache.core.cache import SelectorRegistry
from restcache.core.settings import get_settings
from restcache.state.snapshot import ApiState

T = TypeVar("T")

_registry: SelectorRegistry | None = None


def selector_registry() -> SelectorRegistry:
    global _registry
    if _registry is None:
        _registry = SelectorRegistry(max_size=get_settings().selector_cache_size)
    return _registry


def register_selector(factory_name: str, descriptor: Any, build: Callable[[], T]) -> T:
    return selector_registry().get_or_create((factory_name, descriptor), build)


def clear_selector_registry() -> None:
    """Forget every registered selector (and with it all memoized outputs)."""
    global _registry
    _registry = None


def select_api_state(state: Any) -> ApiState:
    """The :class:`ApiState` for a root state.

    ``state`` is either the snapshot itself or a mapping holding it under
    the configured ``state_key`` (``"wp"`` by default).

    Raises:
        TypeError: if no ApiState can be found.
    """
    if isinstance(state, ApiState):
        return state
    if isinstance(state, Mapping):
        key = get_settings().state_key
        mounted = state.get(key)
        if isinstance(mounted, ApiState):
            return mounted
        raise TypeError(
            f"root state has no ApiState under {key!r}; "
            "hydrate plain data with ApiState.from_dict() first"
        )
    raise TypeError(f"expected ApiState or a root mapping, got {type(state).__name__}")


def select_resources(state: Any) -> tuple[Any, ...]:
    return select_api_state(state).resources


def select_requests_by_name(state: Any) -> Mapping[str, Any]:
    return select_api_state(state).requests_by_name


def select_requests_by_query(state: Any) -> Mapping[str, Any]:
    return select_api_state(state).requests_by_query


__all__ = [
    "selector_registry",
    "register_selector",
    "clear_selector_registry",
    "select_api_state",
    "select_resources",
    "select_requests_by_name",
    "select_requests_by_query",
]
