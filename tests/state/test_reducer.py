"""
Tests for restcache.state.reducer module.

Covers:
- request_issued: pending QueryState + name binding in one snapshot
- request_succeeded: normalization, dedup by self href, positions in fetch order
- request_failed: error kept verbatim
- Stale completions and illegal transitions
- End to end: reducer output read back through the selectors
"""

import pytest

from restcache.core.enums import RequestStatus, SignalType
from restcache.core.errors import InvalidTransitionError
from restcache.selectors.denormalize import select_request
from restcache.selectors.raw import select_request_raw
from restcache.state.reducer import (
    RequestAction,
    RequestMeta,
    RequestPayload,
    Signal,
    reduce,
    request_failed,
    request_issued,
    request_succeeded,
    self_href,
)
from restcache.state.snapshot import ApiState, NameBinding


def make_action(uid="/namespace/any", page=1, name="test", request_at=1000.0):
    return RequestAction(
        payload=RequestPayload(uid=uid, page=page),
        meta=RequestMeta(name=name, aggregator="any", request_at=request_at, operation="get"),
    )


def post(remote_id, **fields):
    entity = {
        "id": remote_id,
        "_links": {"self": [{"href": f"http://example.com/wp/v2/posts/{remote_id}"}]},
    }
    entity.update(fields)
    return entity


class TestRequestAction:
    """Test signal parsing."""

    def test_from_dict(self):
        action = RequestAction.from_dict(
            {
                "payload": {"uid": "/namespace/any", "page": 1},
                "meta": {
                    "name": "test",
                    "aggregator": "any",
                    "requestAt": 123,
                    "operation": "get",
                },
            }
        )

        assert action.cache_id == "/namespace/any"
        assert action.page == 1
        assert action.meta.request_at == 123

    def test_page_defaults_to_one(self):
        action = RequestAction.from_dict(
            {
                "payload": {"uid": "/x"},
                "meta": {"name": "n", "aggregator": "a", "request_at": 1},
            }
        )
        assert action.page == 1
        assert action.meta.operation == "get"


class TestRequestIssued:
    """Test the request-issued transition."""

    def test_creates_pending_query_and_binding(self, empty_state):
        state = request_issued(empty_state, make_action())

        assert state.binding("test") == NameBinding("/namespace/any", 1)
        query = state.query_state("/namespace/any", 1)
        assert query.status is RequestStatus.PENDING
        assert query.request_at == 1000.0
        assert query.operation == "get"
        assert query.data is False

    def test_reissue_creates_new_query_object(self, empty_state):
        first = request_issued(empty_state, make_action())
        resolved = request_succeeded(first, make_action(), [post(1)])

        again = request_issued(resolved, make_action(request_at=2000.0))

        assert again.query_state("/namespace/any", 1).status is RequestStatus.PENDING
        assert resolved.query_state("/namespace/any", 1).status is RequestStatus.RESOLVED

    def test_does_not_touch_resources(self, empty_state):
        state, _ = empty_state.append_resources([{"id": 1}])
        assert request_issued(state, make_action()).resources is state.resources


class TestRequestSucceeded:
    """Test the completion transition and normalization."""

    def test_positions_in_fetch_order(self, empty_state):
        state = request_issued(empty_state, make_action())

        state = request_succeeded(state, make_action(), [post(3), post(1), post(2)])

        query = state.query_state("/namespace/any", 1)
        assert query.status is RequestStatus.RESOLVED
        assert query.data == (0, 1, 2)
        assert [e["id"] for e in state.resources] == [3, 1, 2]

    def test_dedup_by_self_href_overwrites_slot(self, empty_state):
        state = request_issued(empty_state, make_action())
        state = request_succeeded(state, make_action(), [post(1, title="old"), post(2)])

        page_two = make_action(page=2, request_at=2000.0)
        state = request_issued(state, page_two)
        state = request_succeeded(state, page_two, [post(2, title="new"), post(3)])

        assert len(state.resources) == 3
        assert state.resources[1]["title"] == "new"
        assert state.query_state("/namespace/any", 2).data == (1, 2)
        assert state.query_state("/namespace/any", 1).data == (0, 1)

    def test_inline_embedded_objects_are_stored(self, empty_state):
        author = {"id": 7, "name": "ann", "_links": {"self": [{"href": "http://x/users/7"}]}}
        entity = post(1, _embedded={"author": [author]})
        entity["_links"]["author"] = [{"href": "http://x/users/7", "embeddable": True}]
        state = request_issued(empty_state, make_action())

        state = request_succeeded(state, make_action(), [entity])

        stored_post = state.resources[state.query_state("/namespace/any", 1).data[0]]
        assert stored_post["_embedded"] == {"author": [0]}
        assert state.resources[0]["name"] == "ann"

        resolved = select_request("test")(state).data[0]
        assert resolved["author"] == (state.resources[0],)

    def test_nested_embedded_lists_are_flattened(self, empty_state):
        terms = [[{"id": 1, "name": "news"}], [{"id": 2, "name": "tag"}]]
        state = request_issued(empty_state, make_action())

        state = request_succeeded(state, make_action(), [post(9, _embedded={"wp:term": terms})])

        stored_post = state.resources[-1]
        assert stored_post["_embedded"]["wp:term"] == [0, 1]

    def test_fetched_entity_not_mutated(self, empty_state):
        entity = post(1, _embedded={"author": {"id": 7}})
        state = request_issued(empty_state, make_action())

        request_succeeded(state, make_action(), [entity])

        assert entity["_embedded"] == {"author": {"id": 7}}

    def test_empty_page_keeps_resources(self, empty_state):
        state = request_issued(empty_state, make_action())

        done = request_succeeded(state, make_action(), [])

        assert done.resources is state.resources
        assert done.query_state("/namespace/any", 1).data == ()

    def test_never_issued_raises(self, empty_state):
        with pytest.raises(InvalidTransitionError) as exc_info:
            request_succeeded(empty_state, make_action(), [])

        assert exc_info.value.context.cache_id == "/namespace/any"

    def test_already_resolved_raises(self, empty_state):
        state = request_issued(empty_state, make_action())
        state = request_succeeded(state, make_action(), [])

        with pytest.raises(InvalidTransitionError):
            request_succeeded(state, make_action(), [])

    def test_stale_completion_is_dropped(self, empty_state):
        state = request_issued(empty_state, make_action(request_at=1000.0))
        state = request_issued(state, make_action(request_at=2000.0))

        after = request_succeeded(state, make_action(request_at=1000.0), [post(1)])

        assert after is state


class TestRequestFailed:
    """Test the error transition."""

    def test_error_kept_verbatim(self, empty_state):
        error = {"code": "rest_no_route", "message": "No route"}
        state = request_issued(empty_state, make_action())

        state = request_failed(state, make_action(), error)

        query = state.query_state("/namespace/any", 1)
        assert query.status is RequestStatus.ERROR
        assert query.error is error

    def test_already_failed_raises(self, empty_state):
        state = request_failed(request_issued(empty_state, make_action()), make_action(), "x")

        with pytest.raises(InvalidTransitionError):
            request_failed(state, make_action(), "y")


class TestReduce:
    """Test signal dispatch and the read path end to end."""

    def test_full_lifecycle(self):
        action = make_action()
        state = ApiState.empty()

        state = reduce(state, Signal(SignalType.REQUEST, action))
        assert select_request_raw("test")(state).is_pending

        state = reduce(
            state,
            Signal(SignalType.REQUEST_SUCCEEDED, action, entities=[post(1), post(2)]),
        )
        request = select_request("test")(state)
        assert request.is_resolved
        assert [e["id"] for e in request.data] == [1, 2]

    def test_failed_signal(self, empty_state):
        action = make_action()
        state = reduce(empty_state, Signal("restcache/request", action))

        state = reduce(state, Signal(SignalType.REQUEST_FAILED, action, error="timeout"))

        assert select_request("test")(state).error == "timeout"


class TestSelfHref:
    """Test the dedup key helper."""

    @pytest.mark.parametrize(
        ("entity", "expected"),
        [
            ({"_links": {"self": [{"href": "a"}]}}, "a"),
            ({"_links": {"self": {"href": "b"}}}, "b"),
            ({"_links": {"self": []}}, None),
            ({"_links": {"self": [{"href": 3}]}}, None),
            ({"_links": "x"}, None),
            ({"id": 1}, None),
            ("not a mapping", None),
        ],
    )
    def test_self_href(self, entity, expected):
        assert self_href(entity) == expected
