"""
Factoria Testing - Pytest Fixtures.

Registered automatically through the ``pytest11`` entry point once the
package is installed. Fixtures can also be imported into a ``conftest.py``::

    from factoria.testing import factory_registry  # noqa: F401

    def test_admin(factory_registry):
        factory_registry.define(User, "admin", make_admin)
        assert factory_registry.build(User, "admin").to_one().role == "admin"
"""

from __future__ import annotations

from typing import Iterator

import pytest

from .config import FactoryConfig
from .core import FactoryRegistry, get_default_registry


@pytest.fixture(scope="session")
def factoria_config() -> FactoryConfig:
    """Settings loaded from ``factoria.yaml`` and ``FACTORIA_*`` variables."""
    return FactoryConfig.load()


@pytest.fixture
def factory_registry(factoria_config: FactoryConfig) -> Iterator[FactoryRegistry]:
    """
    A fresh registry with the configured factory modules loaded.

    Reset at teardown so nothing leaks into the next test.
    """
    registry = FactoryRegistry(config=factoria_config)
    if factoria_config.modules:
        registry.load(*factoria_config.modules)
    yield registry
    registry.reset()


@pytest.fixture
def default_registry() -> Iterator[FactoryRegistry]:
    """The process-wide default registry, reset before and after the test."""
    registry = get_default_registry()
    registry.reset()
    yield registry
    registry.reset()
