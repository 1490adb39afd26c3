"""
Factory module loader.

Groups of related ``define`` calls live in ``FactoryModule`` subclasses::

    class AddressFactory(FactoryModule):
        def define(self, registry):
            registry.define(Address, "address_in_fr", set_paris)

Sources accepted by ``FactoryLoader.load``:
- ``FactoryModule`` subclasses (already imported)
- Importable module names (``"tests.factories.addresses"``)
- Package names, walked recursively (``"tests.factories"``)
"""

from typing import Any, List, TYPE_CHECKING
from types import ModuleType
import importlib
import importlib.util
import inspect
import logging
import pkgutil

from .diagnostics import FactoryEventType
from .errors import FactoryLoadError

if TYPE_CHECKING:
    from .core import FactoryRegistry

logger = logging.getLogger("factoria.loader")


class FactoryModule:
    """Base class for a group of blueprint definitions."""

    def define(self, registry: "FactoryRegistry") -> None:
        raise NotImplementedError


class FactoryLoader:
    """Instantiates factory modules and lets them define into a registry."""

    def __init__(self, registry: "FactoryRegistry"):
        self.registry = registry

    def load(self, *sources: Any) -> List[type]:
        loaded: List[type] = []
        for source in sources:
            for module_cls in self._resolve_source(source):
                if module_cls in loaded:
                    continue
                module_cls().define(self.registry)
                loaded.append(module_cls)
                origin = f"{module_cls.__module__}.{module_cls.__qualname__}"
                logger.debug("Loaded factory module %s", origin)
                self.registry.diagnostics.emit(
                    FactoryEventType.LOAD, metadata={"module": origin}
                )
        return loaded

    def _resolve_source(self, source: Any) -> List[type]:
        if isinstance(source, type):
            if not issubclass(source, FactoryModule):
                raise FactoryLoadError(source, "class is not a FactoryModule subclass")
            return [source]

        if isinstance(source, ModuleType):
            return self._discover(source)

        if isinstance(source, str):
            # Import errors inside the module itself propagate unchanged
            try:
                spec = importlib.util.find_spec(source)
            except ModuleNotFoundError:
                spec = None
            if spec is None:
                raise FactoryLoadError(source, "no such module")
            return self._discover(importlib.import_module(source))

        raise FactoryLoadError(source, "expected a FactoryModule subclass or module name")

    def _discover(self, module: ModuleType) -> List[type]:
        found = self._module_classes(module)

        # Packages: walk submodules in a stable order
        if hasattr(module, "__path__"):
            for info in sorted(
                pkgutil.walk_packages(module.__path__, prefix=f"{module.__name__}."),
                key=lambda i: i.name,
            ):
                submodule = importlib.import_module(info.name)
                for cls in self._module_classes(submodule):
                    if cls not in found:
                        found.append(cls)

        return found

    def _module_classes(self, module: ModuleType) -> List[type]:
        """Concrete FactoryModule subclasses defined in (not imported into) module."""
        return [
            obj for _, obj in inspect.getmembers(module, inspect.isclass)
            if issubclass(obj, FactoryModule)
            and obj is not FactoryModule
            and obj.__module__ == module.__name__
            and not inspect.isabstract(obj)
        ]
