"""Selector combinators.

:func:`with_denormalize` lets callers write derived selectors that walk the
entity graph themselves (deeper than the one level :func:`select_request`
resolves) while reusing the store lookups and their identity guarantees::

    select_post_with_grandparent = with_denormalize(
        create_selector(
            lambda state: 0,
            combiner=lambda position: lambda denormalize: _walk(denormalize, position),
        )
    )

The wrapped selector returns a function of ``denormalize``; the combinator
calls it with the ``denormalize`` bound to the snapshot's ``resources``.
The same ``resources`` tuple always yields the same ``denormalize`` object.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from restcache.core.cache import MemoizedSelector, create_selector
from restcache.selectors.denormalize import Denormalizer, denormalizer_for
from restcache.selectors.registry import select_resources

T = TypeVar("T")

Denormalize = Callable[[Any], Any]


def select_denormalize(state: Any) -> Denormalizer:
    """The ``denormalize`` function bound to ``state``'s resources."""
    return denormalizer_for(select_resources(state))


def with_denormalize(
    selector: Callable[[Any], Callable[[Denormalize], T]],
) -> MemoizedSelector[T]:
    """Wrap ``selector`` so its inner computation receives ``denormalize``.

    Args:
        selector: ``state -> (denormalize -> result)``. Output identity
            across snapshots is this selector's responsibility.

    Returns:
        ``state -> result``, recomputed only when the inner function or the
        resources change by identity.
    """
    name = getattr(selector, "name", None) or getattr(selector, "__name__", "selector")

    def apply(inner: Callable[[Denormalize], T], denormalize: Denormalizer) -> T:
        return inner(denormalize)

    return create_selector(
        selector,
        select_denormalize,
        combiner=apply,
        name=f"with_denormalize[{name}]",
    )


__all__ = [
    "Denormalize",
    "select_denormalize",
    "with_denormalize",
]
