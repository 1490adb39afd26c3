"""
Testing helpers (testing.py) and the module-level default registry.
"""

import pytest

import factoria
from factoria import (
    DefinitionNotFoundError,
    FactoryConfig,
    FactoryRegistry,
    get_default_registry,
)

from tests.models import Address, Role, User


# ============================================================================
# Pytest fixtures
# ============================================================================

class TestFixtures:

    def test_factory_registry_is_fresh(self, factory_registry):
        assert isinstance(factory_registry, FactoryRegistry)
        assert len(factory_registry) == 0

    def test_factory_registry_usable(self, factory_registry):
        factory_registry.define(User, "admin", lambda u: setattr(u, "role", Role.ADMIN))
        assert factory_registry.build(User, "admin").to_one().role == Role.ADMIN

    def test_factory_registry_is_not_shared(self, factory_registry):
        assert not factory_registry.is_defined(User, "admin")

    def test_default_registry_fixture(self, default_registry):
        assert default_registry is get_default_registry()
        assert len(default_registry) == 0


class TestFixturesWithConfiguredModules:

    @pytest.fixture
    def factoria_config(self):
        return FactoryConfig(modules=["tests.factories"])

    def test_configured_modules_are_loaded(self, factory_registry):
        assert factory_registry.is_defined(User)
        assert factory_registry.is_defined(Address, "address_in_fr")

    def test_builds_from_configured_modules(self, factory_registry):
        user = factory_registry.build(User, "user_with_fr_address").to_one()
        assert user.addr.city == "Paris"
        assert user.name == "Malcom"


# ============================================================================
# Module-level API
# ============================================================================

class TestModuleLevelApi:

    def test_define_and_build(self, default_registry):
        factoria.define(User, lambda u: setattr(u, "name", "Malcom"))
        factoria.define(User, "admin", lambda u: setattr(u, "role", Role.ADMIN))

        assert factoria.build(User).to_one().name == "Malcom"
        assert factoria.build(User, "admin").to_one().role == Role.ADMIN
        assert factoria.resolve(User, "admin").variant == "admin"

    def test_override_and_times(self, default_registry):
        factoria.define(Address, lambda a: setattr(a, "city", "MTL"))
        addresses = factoria.build(Address, city="Paris").times(2).to_list()
        assert [a.city for a in addresses] == ["Paris", "Paris"]

    def test_reset(self, default_registry):
        factoria.define(User, lambda u: None)
        factoria.reset()
        with pytest.raises(DefinitionNotFoundError):
            factoria.build(User).to_one()

    def test_load(self, default_registry):
        loaded = factoria.load("tests.factories.addresses")
        assert [cls.__name__ for cls in loaded] == ["AddressFactory"]
        assert factoria.build(Address, "address_in_us").to_one().city == "New York"

    def test_decorator(self, default_registry):
        @factoria.define(User, "named")
        def named(u):
            u.name = "Ada"

        assert factoria.build(User, "named").to_one().name == "Ada"

    def test_set_default_registry(self):
        custom = FactoryRegistry()
        factoria.set_default_registry(custom)
        assert get_default_registry() is custom
