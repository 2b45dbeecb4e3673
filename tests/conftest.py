"""
Shared pytest fixtures and configuration for peering-spine tests.

This module provides:
- Environment isolation (no PEERINGDB_* variables, fresh settings cache)
- An in-memory ``FakeBackend`` that records every call
- A recording ``sleep`` for the bulk processor
- Registry and dispatcher fixtures

Usage:
    Fixtures are auto-discovered by pytest.

    @pytest.mark.asyncio
    async def test_something(dispatcher, fake_backend):
        await dispatcher.dispatch("net", "create", {...})
        assert fake_backend.calls
"""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from peering_spine.core.errors import PeeringError
from peering_spine.core.settings import get_settings
from peering_spine.dispatch import OperationDispatcher
from peering_spine.registry import TypeRegistry, default_registry


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Strip PEERINGDB_* variables and run from an empty directory (no .env)."""
    for key in list(os.environ):
        if key.startswith("PEERINGDB_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Fakes
# =============================================================================


class FakeBackend:
    """In-memory backend recording each call as a tuple.

    ``fail_with`` makes every write raise the given error; ``responses`` maps
    ``(method, endpoint)`` to a canned response.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.fail_with: PeeringError | None = None
        self.responses: dict[tuple[str, str], Any] = {}
        self._next_id = 1000

    def _respond(self, method: str, endpoint: str, default: Any) -> Any:
        return self.responses.get((method, endpoint), default)

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        self.calls.append(("get", endpoint, params))
        return self._respond("get", endpoint, {"data": [], "meta": {}})

    async def get_by_id(self, endpoint: str, instance_id: str | int, params: dict[str, Any] | None = None) -> Any:
        self.calls.append(("get_by_id", endpoint, instance_id, params))
        return self._respond("get_by_id", endpoint, {"data": [{"id": instance_id}], "meta": {}})

    async def create(self, endpoint: str, payload: dict[str, Any]) -> Any:
        self.calls.append(("create", endpoint, payload))
        if self.fail_with is not None:
            raise self.fail_with
        self._next_id += 1
        return self._respond("create", endpoint, {"data": [{"id": self._next_id, **payload}], "meta": {}})

    async def full_update(self, endpoint: str, instance_id: str | int, payload: dict[str, Any]) -> Any:
        self.calls.append(("full_update", endpoint, instance_id, payload))
        if self.fail_with is not None:
            raise self.fail_with
        return self._respond("full_update", endpoint, {"data": [{"id": instance_id, **payload}], "meta": {}})

    async def partial_update(self, endpoint: str, instance_id: str | int, payload: dict[str, Any]) -> Any:
        self.calls.append(("partial_update", endpoint, instance_id, payload))
        if self.fail_with is not None:
            raise self.fail_with
        return self._respond("partial_update", endpoint, {"data": [{"id": instance_id, **payload}], "meta": {}})

    async def delete(self, endpoint: str, instance_id: str | int) -> Any:
        self.calls.append(("delete", endpoint, instance_id))
        if self.fail_with is not None:
            raise self.fail_with
        return self._respond("delete", endpoint, None)


class RecordingSleep:
    """Drop-in for ``asyncio.sleep`` that records instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry() -> TypeRegistry:
    return default_registry()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def dispatcher(registry: TypeRegistry, fake_backend: FakeBackend) -> OperationDispatcher:
    return OperationDispatcher(registry, fake_backend)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def valid_net() -> dict[str, Any]:
    return {
        "name": "Acme Networks",
        "org_id": 42,
        "asn": 64500,
        "website": "https://www.acme-networks.net",
        "info_prefixes4": True,
        "policy_general": "Open",
    }
