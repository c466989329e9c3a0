"""restcache -- normalized client-side cache for paginated REST resources.

Manifesto:
    A paginated API returns the same entity on many pages, under many
    queries, embedded inside other entities. Storing it once and deriving
    every view from a flat store keeps the views consistent; deriving them
    through memoized selectors keeps them cheap and referentially stable.

    - **Flat store:** Entities addressed by insertion position
    - **Two-level index:** name → (cache_id, page) → QueryState
    - **Pure selectors:** Same snapshot in, same object out
    - **Immutable snapshots:** Structural sharing, no mutation

Architecture::

    core/        errors, enums, logging, settings, memoization
    state/       ApiState snapshot, EntityStore, QueryIndex, reducer
    selectors/   select_request_raw, select_request, with_denormalize

Examples:
    >>> from restcache import ApiState, select_request
    >>> select_request("latest-posts")(ApiState.empty()).to_dict()
    {'status': 'pending', 'error': False, 'data': False}
"""

from restcache.core import (
    InvalidDescriptorError,
    InvalidTransitionError,
    RequestStatus,
    RestCacheError,
    create_selector,
)
from restcache.selectors import (
    Request,
    select_query,
    select_request,
    select_request_raw,
    with_denormalize,
)
from restcache.state import ApiState, EntityStore, NameBinding, QueryState

__version__ = "0.2.0"

__all__ = [
    "InvalidDescriptorError",
    "InvalidTransitionError",
    "RequestStatus",
    "RestCacheError",
    "create_selector",
    "Request",
    "select_query",
    "select_request",
    "select_request_raw",
    "with_denormalize",
    "ApiState",
    "EntityStore",
    "NameBinding",
    "QueryState",
    "__version__",
]
