"""Immutable API state: snapshots, entity store, query index, reducer."""

from restcache.state.descriptors import ByCoordinates, ByName, RequestDescriptor, parse_descriptor
from restcache.state.index import QueryIndex, ResolvedQuery
from restcache.state.reducer import (
    RequestAction,
    RequestMeta,
    RequestPayload,
    Signal,
    reduce,
    request_failed,
    request_issued,
    request_succeeded,
)
from restcache.state.snapshot import PENDING_QUERY, ApiState, NameBinding, QueryState
from restcache.state.store import EntityStore

__all__ = [
    "ByCoordinates",
    "ByName",
    "RequestDescriptor",
    "parse_descriptor",
    "QueryIndex",
    "ResolvedQuery",
    "RequestAction",
    "RequestMeta",
    "RequestPayload",
    "Signal",
    "reduce",
    "request_failed",
    "request_issued",
    "request_succeeded",
    "PENDING_QUERY",
    "ApiState",
    "NameBinding",
    "QueryState",
    "EntityStore",
]
