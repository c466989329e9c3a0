"""
Typed result objects returned by the selectors.

``Request`` is the output contract of both the raw and the denormalizing
selector. Optional coordinates stay ``None`` until a real binding or query
exists and are omitted from :meth:`Request.to_dict`, so the empty case
serializes to exactly ``{status, error, data}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from restcache.core.enums import RequestStatus


@dataclass(frozen=True, slots=True)
class Request:
    """View of one request.

    Attributes:
        status: Lifecycle status of the underlying query.
        error: ``False`` or the error payload, passed through verbatim.
        data: ``False``; store positions (raw selector); or resolved
            entities (denormalizing selector).
        operation: Operation label of the query, once one exists.
        request_at: Request timestamp, once a query exists.
        cache_id: Cache coordinate, once a binding or explicit coordinate exists.
        page: Page coordinate, alongside ``cache_id``.
    """

    status: RequestStatus
    error: Any
    data: tuple[Any, ...] | Literal[False]
    operation: str | None = None
    request_at: float | None = None
    cache_id: str | None = None
    page: int | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    @property
    def is_resolved(self) -> bool:
        return self.status is RequestStatus.RESOLVED

    @property
    def is_error(self) -> bool:
        return self.status is RequestStatus.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with only the fields that are present."""
        result: dict[str, Any] = {
            "status": self.status.value,
            "error": self.error,
            "data": self.data,
        }
        for key in ("operation", "request_at", "cache_id", "page"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


__all__ = ["Request"]
