"""Deprecated selector entry points.

.. deprecated:: 0.2.0
    ``select_query`` is the historical name of :func:`select_request`.
"""

from __future__ import annotations

import warnings
from typing import Any

from restcache.core.cache import MemoizedSelector
from restcache.core.logging import get_logger
from restcache.selectors.denormalize import select_request
from restcache.selectors.models import Request

logger = get_logger(__name__)


def _warn_deprecated(old: str, new: str) -> None:
    warnings.warn(
        f"{old} is deprecated, use {new} instead.",
        DeprecationWarning,
        stacklevel=3,
    )
    logger.warning("deprecated_selector", selector=old, replacement=new)


def select_query(descriptor: Any = None) -> MemoizedSelector[Request]:
    """Deprecated alias of :func:`~restcache.selectors.select_request`.

    Every call issues a :class:`DeprecationWarning` and logs a
    ``deprecated_selector`` warning event. Whether repeated warnings from
    one call site are shown is up to the caller's :mod:`warnings` filters
    (the ``"default"`` action shows the first only); the log event is
    emitted on each call regardless.
    """
    _warn_deprecated("select_query", "select_request")
    return select_request(descriptor)


__all__ = ["select_query"]
