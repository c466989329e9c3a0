"""
Shared enums for restcache.

String enums so values compare equal to the plain strings the write path
stores (``"pending"``, ``"resolved"``, ``"error"``).
"""

from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    """
    Lifecycle status of a query at one cache coordinate.

    Transitions only PENDING → RESOLVED or PENDING → ERROR. A new request
    for the same coordinate creates a new PENDING QueryState.
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class SignalType(str, Enum):
    """Write-path signals understood by :func:`restcache.state.reducer.reduce`."""

    REQUEST = "restcache/request"
    REQUEST_SUCCEEDED = "restcache/request-succeeded"
    REQUEST_FAILED = "restcache/request-failed"


__all__ = [
    "RequestStatus",
    "SignalType",
]
