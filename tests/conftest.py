"""
Shared pytest fixtures for restcache tests.

This module provides:
- Registry and settings cleanup for test isolation
- Environment override helper for settings tests
- Sample WordPress-style entities with ``_links`` / ``_embedded``

Snapshot builders live in ``tests._support``.
"""

import os
from typing import Any, Generator

import pytest
import structlog

from restcache.core.settings import reset_settings
from restcache.selectors.denormalize import clear_denormalizers
from restcache.selectors.registry import clear_selector_registry
from restcache.state.snapshot import ApiState


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "unit" not in markers:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_selector_caches() -> Generator[None, None, None]:
    """
    Clear selector registry, shared denormalizers, cached settings and any
    structlog configuration left behind by a test.

    Selector instances are registered process-wide per descriptor; without
    this, recomputation counts would leak between tests.
    """
    clear_selector_registry()
    clear_denormalizers()
    reset_settings()
    structlog.reset_defaults()
    yield
    clear_selector_registry()
    clear_denormalizers()
    reset_settings()
    structlog.reset_defaults()


@pytest.fixture
def restcache_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch, None, None]:
    """Clear RESTCACHE_* env vars; set overrides via the returned monkeypatch."""
    for key in list(os.environ):
        if key.startswith("RESTCACHE_"):
            monkeypatch.delenv(key)
    yield monkeypatch
    reset_settings()


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def empty_state() -> ApiState:
    return ApiState.empty()


@pytest.fixture
def resource() -> dict[str, Any]:
    return {"id": 1, "title": "lol"}


@pytest.fixture
def related_resources() -> list[dict[str, Any]]:
    """Post at position 0 whose ``parent`` relation points at local id 1."""
    return [
        {
            "id": 1,
            "title": "lol",
            "_links": {"parent": {"url": "http://dumb.com/test/2"}},
            "_embedded": {"parent": 1},
        },
        {"id": 2, "title": "lol 2"},
    ]
