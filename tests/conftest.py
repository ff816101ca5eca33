"""Shared fixtures for formwire tests."""

from __future__ import annotations

from typing import Any, Callable, Generator, List, Optional

import pytest

from formwire.lib import settings as settings_module
from formwire.lib.adapters import ElementRegistry, ValueAdapter


class SpyAdapter(ValueAdapter):
    """ValueAdapter that records every programmatic write."""

    def __init__(self, value: Any = None, log: Optional[List[str]] = None) -> None:
        super().__init__(value)
        self.writes: List[Any] = []
        self.log = log if log is not None else []

    def write_value(self, value: Any) -> None:
        self.writes.append(value)
        self.log.append(f"write:{value!r}")
        super().write_value(value)


class EchoAdapter(ValueAdapter):
    """Adapter that reports its own programmatic writes, like many widgets do."""

    def __init__(self, value: Any = None) -> None:
        super().__init__(value)
        self.writes: List[Any] = []

    def write_value(self, value: Any) -> None:
        self.writes.append(value)
        self.user_input(value)


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Drop cached settings so environment changes in one test don't leak."""
    settings_module._settings = None
    yield
    settings_module._settings = None


@pytest.fixture
def registry() -> ElementRegistry:
    """A fresh element registry."""
    return ElementRegistry()


@pytest.fixture
def spy_adapter() -> SpyAdapter:
    return SpyAdapter()


@pytest.fixture
def make_spy() -> Callable[..., SpyAdapter]:
    """Factory for SpyAdapters sharing an optional event log."""

    def factory(value: Any = None, log: Optional[List[str]] = None) -> SpyAdapter:
        return SpyAdapter(value, log)

    return factory


@pytest.fixture
def login_registry(registry: ElementRegistry) -> ElementRegistry:
    """Registry with '#u' and '#p' elements, as on a login page."""
    registry.register(ValueAdapter(), id="u", name="username", classes=["credential"])
    registry.register(ValueAdapter(), id="p", name="password", classes=["credential"])
    return registry
