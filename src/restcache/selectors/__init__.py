"""Selectors over :class:`~restcache.state.ApiState` snapshots.

- :func:`select_request_raw` -- Request with store positions
- :func:`select_request` -- Request with resolved entities and relations
- :func:`with_denormalize` -- custom graph traversal over the store
- :func:`select_query` -- deprecated alias of ``select_request``
"""

from restcache.selectors.combinators import select_denormalize, with_denormalize
from restcache.selectors.compat import select_query
from restcache.selectors.denormalize import Denormalizer, denormalizer_for, select_request
from restcache.selectors.models import Request
from restcache.selectors.raw import select_request_raw
from restcache.selectors.registry import clear_selector_registry, select_api_state

__all__ = [
    "select_denormalize",
    "with_denormalize",
    "select_query",
    "Denormalizer",
    "denormalizer_for",
    "select_request",
    "Request",
    "select_request_raw",
    "clear_selector_registry",
    "select_api_state",
]
