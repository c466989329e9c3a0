"""
Request descriptors: how a caller identifies a request.

A descriptor is a tagged union validated at the boundary:

- :class:`ByName` — the most recent coordinates used under a request name
- :class:`ByCoordinates` — an explicit ``(cache_id, page)`` pair

Callers may pass raw values instead; :func:`parse_descriptor` accepts

- a non-empty ``str`` → ``ByName``
- a mapping with a non-empty ``cacheID`` (or ``cache_id``) and an optional
  positive integer ``page`` → ``ByCoordinates``
- a :class:`~restcache.state.snapshot.NameBinding` → ``ByCoordinates``

and raises :class:`~restcache.core.errors.InvalidDescriptorError` for
anything else.

Examples:
    >>> parse_descriptor("latest-posts")
    ByName(name='latest-posts')
    >>> parse_descriptor({"cacheID": "/wp/v2/posts", "page": 2})
    ByCoordinates(cache_id='/wp/v2/posts', page=2)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from restcache.core.errors import InvalidDescriptorError
from restcache.core.logging import get_logger
from restcache.state.snapshot import NameBinding

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ByName:
    name: str


@dataclass(frozen=True, slots=True)
class ByCoordinates:
    cache_id: str
    page: int = 1


RequestDescriptor = Union[ByName, ByCoordinates]


def _invalid(reason: str, descriptor: Any) -> InvalidDescriptorError:
    error = InvalidDescriptorError(f"Request is not identifiable: {reason}")
    error.with_context(descriptor=descriptor)
    logger.warning("invalid_descriptor", reason=reason, descriptor=repr(descriptor))
    return error


def _parse_page(page: Any, descriptor: Any) -> int:
    if page is None:
        return 1
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise _invalid("page must be a positive integer", descriptor)
    return page


def parse_descriptor(descriptor: Any) -> RequestDescriptor:
    """Validate a raw descriptor and return its tagged form.

    Raises:
        InvalidDescriptorError: if ``descriptor`` is neither a non-empty
            name nor an object carrying a cacheID.
    """
    if isinstance(descriptor, ByName):
        if not descriptor.name:
            raise _invalid("empty request name", descriptor)
        return descriptor
    if isinstance(descriptor, ByCoordinates):
        if not descriptor.cache_id:
            raise _invalid("empty cacheID", descriptor)
        _parse_page(descriptor.page, descriptor)
        return descriptor
    if isinstance(descriptor, str):
        if not descriptor:
            raise _invalid("empty request name", descriptor)
        return ByName(descriptor)
    if isinstance(descriptor, NameBinding):
        return parse_descriptor(ByCoordinates(descriptor.cache_id, descriptor.page))
    if isinstance(descriptor, Mapping):
        cache_id = descriptor.get("cacheID", descriptor.get("cache_id"))
        if not isinstance(cache_id, str) or not cache_id:
            raise _invalid("descriptor has no cacheID", descriptor)
        return ByCoordinates(cache_id, _parse_page(descriptor.get("page"), descriptor))
    raise _invalid(f"unsupported descriptor type {type(descriptor).__name__}", descriptor)


__all__ = [
    "ByName",
    "ByCoordinates",
    "RequestDescriptor",
    "parse_descriptor",
]
