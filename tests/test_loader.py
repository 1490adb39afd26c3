"""
Factory module loader (loader.py)

Tests loading FactoryModule classes, modules and packages.
"""

import types

import pytest

from factoria import FactoryConfig, FactoryLoadError, FactoryModule, FactoryRegistry
from factoria.diagnostics import FactoryEventType, RecordingDiagnosticListener

from tests.factories.addresses import AddressFactory
from tests.factories.users import UserFactory
from tests.models import Address, Role, User


def _registry() -> FactoryRegistry:
    return FactoryRegistry(config=FactoryConfig())


class TestLoadClasses:

    def test_load_class(self):
        reg = _registry()
        loaded = reg.load(AddressFactory)

        assert loaded == [AddressFactory]
        assert reg.build(Address, "address_in_fr").to_one().city == "Paris"
        assert reg.build(Address, "address_in_us").to_one().country == "United States"

    def test_loaded_modules_compose(self):
        reg = _registry()
        reg.load(AddressFactory, UserFactory)

        user = reg.build(User, "user_with_fr_address").to_one()
        assert user.role == Role.USER
        assert user.addr.street == "rue d'avignon"

    def test_same_class_loaded_once_per_call(self):
        calls = []

        class Counting(FactoryModule):
            def define(self, registry):
                calls.append(registry)

        reg = _registry()
        assert reg.load(Counting, Counting) == [Counting]
        assert len(calls) == 1

    def test_non_module_class_rejected(self):
        with pytest.raises(FactoryLoadError, match="not a FactoryModule"):
            _registry().load(User)

    def test_unsupported_source_rejected(self):
        with pytest.raises(FactoryLoadError, match="expected"):
            _registry().load(42)


class TestLoadByName:

    def test_load_module_name(self):
        reg = _registry()
        loaded = reg.load("tests.factories.addresses")
        assert loaded == [AddressFactory]
        assert reg.is_defined(Address, "address_in_fr")

    def test_load_package_walks_submodules(self):
        reg = _registry()
        loaded = reg.load("tests.factories")

        names = {cls.__name__ for cls in loaded}
        assert names == {"AddressFactory", "UserFactory", "_HelperFactory"}
        assert reg.build(User, "user_with_fr_address").to_one().addr.city == "Paris"
        assert reg.build(User, "nobody").to_one().name == "nobody"

    def test_load_module_object(self):
        import tests.factories.users as users_module

        reg = _registry()
        assert reg.load(users_module) == [UserFactory, users_module._HelperFactory]

    def test_imported_classes_are_not_rediscovered(self):
        module = types.ModuleType("fake_factories")
        module.AddressFactory = AddressFactory

        assert _registry().load(module) == []

    def test_missing_module(self):
        with pytest.raises(FactoryLoadError, match="no such module"):
            _registry().load("tests.factories.does_not_exist")

    def test_missing_top_level_package(self):
        with pytest.raises(FactoryLoadError, match="no such module"):
            _registry().load("no_such_package.factories")


class TestLoadDiagnostics:

    def test_load_event_emitted(self):
        reg = _registry()
        listener = RecordingDiagnosticListener()
        reg.diagnostics.add_listener(listener)

        reg.load(AddressFactory)

        events = listener.of_type(FactoryEventType.LOAD)
        assert len(events) == 1
        assert events[0].metadata["module"].endswith("AddressFactory")
        assert len(listener.of_type(FactoryEventType.DEFINE)) == 2
