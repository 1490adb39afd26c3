"""
Shared test fixtures and helpers for the Factoria test suite.
"""

import pytest

from factoria import FactoryConfig, FactoryRegistry, Supply, set_config, set_default_registry

# Import fixtures so pytest can discover them without the installed plugin
from factoria.testing import (  # noqa: F401
    factoria_config,
    factory_registry,
    default_registry,
)

from tests.models import Address, Role, User


@pytest.fixture(autouse=True)
def _isolated_config():
    """Pin default settings so FACTORIA_* variables never leak into tests."""
    set_config(FactoryConfig())
    yield
    set_config(None)
    set_default_registry(None)


# ============================================================================
# Blueprint Helpers
# ============================================================================


def define_user_blueprints(registry: FactoryRegistry) -> FactoryRegistry:
    """The user/address blueprints most build tests start from."""

    def default_user(u):
        u.last_name = "Scott"
        u.name = "Malcom"
        u.role = Role.USER

    def admin_user(u):
        u.last_name = "John"
        u.name = "Malcom"
        u.role = Role.ADMIN

    def user_with_address():
        u = registry.build(User).to_one()
        address = Address()
        address.city = "MTL"
        address.street = "prince street"
        u.addr = address
        return u

    def user_with_fr_address(u):
        u.last_name = "Scott"
        u.name = "Malcom"
        u.role = Role.USER
        u.addr = registry.build(Address, "address_in_fr").to_one()

    def address_in_fr(a):
        a.city = "Paris"
        a.street = "rue d'avignon"
        a.country = "France"

    registry.define(User, default_user)
    registry.define(User, "admin_user", admin_user)
    registry.define(User, "user_with_address", Supply(user_with_address))
    registry.define(User, "user_with_fr_address", user_with_fr_address)
    registry.define(Address, "address_in_fr", address_in_fr)
    return registry


@pytest.fixture
def registry():
    """A registry with the standard user/address blueprints."""
    reg = FactoryRegistry(config=FactoryConfig())
    define_user_blueprints(reg)
    yield reg
    reg.reset()
