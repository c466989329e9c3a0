"""
Tests for restcache.core.cache module.

Covers:
- MemoizedSelector: identity-keyed recomputation
- SelectorRegistry: LRU eviction, get_or_create
- IdentityCache: hits only for the same referent
"""

import pytest

from restcache.core.cache import IdentityCache, SelectorRegistry, create_selector


class TestCreateSelector:
    """Test identity-keyed memoization."""

    def test_same_input_objects_hit(self):
        calls = []
        selector = create_selector(
            lambda state: state["items"],
            combiner=lambda items: calls.append(items) or len(items),
        )
        state = {"items": [1, 2, 3]}

        assert selector(state) == 3
        assert selector(state) == 3
        assert len(calls) == 1
        assert selector.recomputations() == 1

    def test_equal_but_new_input_misses(self):
        selector = create_selector(lambda state: state["items"], combiner=list)

        first = selector({"items": [1]})
        second = selector({"items": [1]})

        assert first == second
        assert first is not second
        assert selector.recomputations() == 2

    def test_unchanged_slices_keep_identity_across_states(self):
        """A different root with the same sub-tree reference hits the cache."""
        items = (1, 2)
        selector = create_selector(lambda state: state["items"], combiner=lambda i: {"n": len(i)})

        first = selector({"items": items, "other": 1})

        assert selector({"items": items, "other": 2}) is first

    def test_multiple_inputs(self):
        selector = create_selector(
            lambda state: state["a"],
            lambda state: state["b"],
            combiner=lambda a, b: (a, b),
        )
        a, b = object(), object()

        result = selector({"a": a, "b": b})

        assert selector({"a": a, "b": b}) is result
        assert selector({"a": a, "b": object()}) is not result

    def test_falsy_results_are_cached(self):
        selector = create_selector(lambda state: state, combiner=lambda s: False)
        state = object()
        selector(state)
        selector(state)
        assert selector.recomputations() == 1

    def test_reset_recomputations(self):
        selector = create_selector(lambda state: state, combiner=id)
        selector(object())
        selector.reset_recomputations()
        assert selector.recomputations() == 0

    def test_requires_inputs(self):
        with pytest.raises(ValueError):
            create_selector(combiner=lambda: None)

    def test_selectors_compose(self):
        inner = create_selector(lambda state: state["x"], combiner=lambda x: [x])
        outer = create_selector(inner, combiner=lambda xs: tuple(xs))
        state = {"x": 1}

        assert outer(state) is outer(state)
        assert outer.recomputations() == 1


class TestSelectorRegistry:
    """Test bounded selector registry."""

    def test_get_or_create_reuses(self):
        registry = SelectorRegistry(max_size=4)
        built = []

        def build():
            built.append(object())
            return built[-1]

        first = registry.get_or_create(("f", "a"), build)
        assert registry.get_or_create(("f", "a"), build) is first
        assert len(built) == 1

    def test_lru_eviction(self):
        registry = SelectorRegistry(max_size=2)
        registry.set("k1", 1)
        registry.set("k2", 2)
        registry.get("k1")
        registry.set("k3", 3)

        assert registry.exists("k1")
        assert not registry.exists("k2")
        assert registry.exists("k3")
        assert registry.size() == 2

    def test_resize_evicts_oldest(self):
        registry = SelectorRegistry(max_size=3)
        for key in ("a", "b", "c"):
            registry.set(key, key)

        registry.resize(1)

        assert registry.size() == 1
        assert registry.exists("c")

    def test_delete_and_clear(self):
        registry = SelectorRegistry()
        registry.set("a", 1)
        registry.set("b", 2)
        registry.delete("a")
        assert registry.get("a") is None
        registry.clear()
        assert registry.size() == 0


class TestIdentityCache:
    """Test referent-identity cache."""

    def test_hit_only_for_same_referent(self):
        cache = IdentityCache(max_size=4)
        key = (1, 2)
        cache.set(key, "value")

        assert cache.get(key) == "value"
        assert cache.get(tuple([1, 2])) is None

    def test_referent_is_retained(self):
        cache = IdentityCache(max_size=4)
        cache.set([1], "value")
        assert cache.size() == 1

    def test_eviction(self):
        cache = IdentityCache(max_size=1)
        a, b = object(), object()
        cache.set(a, "a")
        cache.set(b, "b")
        assert cache.get(a) is None
        assert cache.get(b) == "b"

    def test_get_or_create(self):
        cache = IdentityCache()
        referent = object()
        first = cache.get_or_create(referent, dict)
        assert cache.get_or_create(referent, dict) is first
