"""
Structured error types for restcache.

Provides a small hierarchy of typed errors with rich metadata for error
categorization, reporting, and root cause analysis through error chaining.

The read path is total: a missing binding, a missing query, or an entity
that cannot be resolved is modeled as data, never raised. Errors are
reserved for caller mistakes that the cache cannot interpret (a malformed
request descriptor) and for write-path transitions that would break the
append-only history of a coordinate.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different failures
    - **Rich Context:** Errors carry the offending input for logging
    - **Error Chaining:** Preserve original exceptions while adding context
    - **Never retried:** Every error here is synchronous and local to one call

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     RestCacheError                           │
        │            (category, context, cause)                        │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  InvalidDescriptorError        InvalidTransitionError        │
        │  (VALIDATION)                  (STATE)                       │
        │                                                              │
        └─────────────────────────────────────────────────────────────┘

Examples:
    Raising on a bad descriptor:

    >>> error = InvalidDescriptorError("descriptor has no cacheID")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>

    Adding context to an error:

    >>> error = InvalidTransitionError("query already resolved")
    >>> error.with_context(cache_id="/wp/v2/posts", page=2)
    InvalidTransitionError('query already resolved', category=STATE)
    >>> error.context.cache_id
    '/wp/v2/posts'

Guardrails:
    ❌ DON'T: Raise for a request that simply has not been issued yet
    ✅ DO: Return the synthetic pending Request

    ❌ DON'T: Interpret ``QueryState.error`` contents
    ✅ DO: Pass it through verbatim

Tags:
    error-handling, exception-hierarchy, error-context, restcache

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        VALIDATION: Caller input could not be interpreted
        STATE: A snapshot transition would violate a state invariant
        INTERNAL: Bugs, unexpected state
    """

    VALIDATION = "VALIDATION"     # Malformed descriptors
    STATE = "STATE"               # Illegal QueryState transitions
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover the coordinates every restcache error can be tied
    to. Anything else goes into ``metadata``. ``to_dict()`` serializes all
    non-None fields for logging.

    Examples:
        >>> ctx = ErrorContext(name="latest-posts", cache_id="/wp/v2/posts")
        >>> ctx.to_dict()
        {'name': 'latest-posts', 'cache_id': '/wp/v2/posts'}

    Attributes:
        name: Request name involved in the failure
        cache_id: Cache coordinate involved in the failure
        page: Page coordinate involved in the failure
        descriptor: Raw descriptor as passed by the caller
        metadata: Additional key-value pairs
    """

    name: str | None = None
    cache_id: str | None = None
    page: int | None = None
    descriptor: Any = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["name", "cache_id", "page"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.descriptor is not None:
            result["descriptor"] = repr(self.descriptor)
        if self.metadata:
            result.update(self.metadata)
        return result


class RestCacheError(Exception):
    """
    Base exception for all restcache errors.

    All RestCacheError instances carry:
    - **category:** ErrorCategory enum for classification
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` to provide a sensible default.

    Examples:
        >>> error = RestCacheError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'RestCacheError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RestCacheError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidDescriptorError("empty name").with_context(
                descriptor=descriptor,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class InvalidDescriptorError(RestCacheError):
    """
    A request descriptor is neither a non-empty name nor carries a cacheID.

    Raised synchronously when a selector is built. Not recoverable by the
    cache: the caller must pass a valid descriptor.
    """

    default_category = ErrorCategory.VALIDATION


# =============================================================================
# STATE ERRORS
# =============================================================================


class InvalidTransitionError(RestCacheError):
    """
    A QueryState transition would break pending → resolved | error.

    Raised by the snapshot reducer when a completion signal arrives for a
    coordinate that is not pending.
    """

    default_category = ErrorCategory.STATE


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error, INTERNAL for foreign exceptions."""
    if isinstance(error, RestCacheError):
        return error.category
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RestCacheError",
    "InvalidDescriptorError",
    "InvalidTransitionError",
    "categorize_error",
]
