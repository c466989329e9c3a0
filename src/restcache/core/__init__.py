"""restcache core -- errors, logging, settings and memoization primitives.

Architecture::

    errors.py      Structured error hierarchy (RestCacheError, InvalidDescriptorError)
    enums.py       RequestStatus, SignalType
    logging.py     Structured logging (structlog)
    settings.py    RestCacheSettings (pydantic-settings)
    cache.py       create_selector, SelectorRegistry, IdentityCache
"""

from restcache.core.cache import IdentityCache, MemoizedSelector, SelectorRegistry, create_selector
from restcache.core.enums import RequestStatus, SignalType
from restcache.core.errors import (
    ErrorCategory,
    ErrorContext,
    InvalidDescriptorError,
    InvalidTransitionError,
    RestCacheError,
)

__all__ = [
    "IdentityCache",
    "MemoizedSelector",
    "SelectorRegistry",
    "create_selector",
    "RequestStatus",
    "SignalType",
    "ErrorCategory",
    "ErrorContext",
    "InvalidDescriptorError",
    "InvalidTransitionError",
    "RestCacheError",
]
