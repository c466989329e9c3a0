#!/usr/bin/env python3
"""Selectors — Deriving Stable Views from a Normalized Snapshot.

================================================================================
WHY A NORMALIZED STORE?
================================================================================

A paginated WordPress-style API returns the same post on the front page, in
its category listing, and embedded as the ``parent`` of its child pages.
Caching each response verbatim stores the post three times and lets the
copies drift apart after an edit.

restcache stores every entity once, in a flat ``resources`` tuple, and keeps
two small indexes::

    requests_by_name:  "front-page" → ("/wp/v2/posts?sticky=1", page 1)
    requests_by_query: ("/wp/v2/posts?sticky=1", 1) → QueryState(data=(0, 3, 5))

Views are derived with selectors.


================================================================================
KEY DESIGN: IDENTITY IS THE CONTRACT
================================================================================

::

    select = select_request("front-page")
    select(state) is select(state)           # same snapshot → same object
    select(state_after_other_query) is ...   # untouched coordinates → same object

Consumers can compare results with ``is`` to skip re-rendering.


================================================================================
EXAMPLE USAGE
================================================================================

Run this example:
    python examples/01_selectors.py

See Also:
    - :mod:`restcache.selectors` — select_request_raw, select_request, with_denormalize
    - :mod:`restcache.state.reducer` — write-path transitions
"""

from restcache import ApiState, create_selector, select_request, select_request_raw, with_denormalize
from restcache.core.logging import configure_logging
from restcache.state.reducer import (
    RequestAction,
    RequestMeta,
    RequestPayload,
    request_issued,
    request_succeeded,
)


def fetch_front_page(state: ApiState) -> ApiState:
    action = RequestAction(
        RequestPayload(uid="/wp/v2/posts?sticky=1"),
        RequestMeta(name="front-page", aggregator="posts", request_at=1.0, operation="get"),
    )
    state = request_issued(state, action)
    print(f"Issued:   {select_request_raw('front-page')(state).to_dict()}")

    author = {"id": 3, "name": "ann", "_links": {"self": [{"href": "/wp/v2/users/3"}]}}
    posts = [
        {
            "id": 12,
            "title": "Hello world",
            "_links": {
                "self": [{"href": "/wp/v2/posts/12"}],
                "author": [{"href": "/wp/v2/users/3", "embeddable": True}],
            },
            "_embedded": {"author": [author]},
        },
        {"id": 14, "title": "Second post", "_links": {"self": [{"href": "/wp/v2/posts/14"}]}},
    ]
    return request_succeeded(state, action, posts)


def example_select_request():
    """Resolve a named request into entities with their authors."""
    print("=== select_request Example ===\n")

    state = fetch_front_page(ApiState.empty())

    raw = select_request_raw("front-page")(state)
    print(f"Raw data: {raw.data}")  # → store positions

    request = select_request("front-page")(state)
    for post in request.data:
        authors = [a["name"] for a in post.get("author", ())]
        print(f"  {post['title']!r} by {authors or 'unknown'}")

    print(f"\nSame snapshot, same object: {select_request('front-page')(state) is request}")


def example_with_denormalize():
    """Custom traversal with the store's denormalize function."""
    print("\n=== with_denormalize Example ===\n")

    state = fetch_front_page(ApiState.empty())

    select_titles = with_denormalize(
        create_selector(
            lambda state: tuple(range(len(state.resources))),
            combiner=lambda ids: lambda denormalize: [
                denormalize(i).get("title") or denormalize(i).get("name") for i in ids
            ],
        )
    )
    print(f"Everything in the store: {select_titles(state)}")


if __name__ == "__main__":
    configure_logging(level="INFO", json_format=False)
    example_select_request()
    example_with_denormalize()
