"""
Factoria - declarative test-fixture factories.

Define named blueprints per type, build fully populated objects on demand:
- Primary blueprints and named variants per type
- Per-call overrides that always apply after the blueprint
- Composition: blueprints that build other blueprints
- Deterministic generators for ids, name pools and formatted values
- Factory modules loadable by module or package name
- Pytest fixtures with per-test registry isolation

Example:
    from factoria import FactoryRegistry, Generators

    registry = FactoryRegistry()
    ids = Generators.sequence()

    @registry.define(User)
    def user(u):
        u.id = ids.next_value()
        u.name = "Malcom"

    users = registry.build(User).times(3).to_list()
"""

__version__ = "1.0.0"

from .core import (
    BlueprintDefinition,
    FactoryRegistry,
    Mutate,
    Supply,
    as_step,
    get_default_registry,
    set_default_registry,
    define,
    build,
    resolve,
    reset,
    load,
)

from .pipeline import (
    BuildRequest,
    BuildResult,
    current_build_stack,
)

from .generators import (
    ExhaustionPolicy,
    ValueGenerator,
    ValuesGenerator,
    SequenceGenerator,
    DerivedGenerator,
    Generators,
)

from .loader import (
    FactoryModule,
    FactoryLoader,
)

from .config import (
    FactoryConfig,
    get_config,
    set_config,
)

from .diagnostics import (
    FactoryDiagnostics,
    FactoryEvent,
    FactoryEventType,
    LoggingDiagnosticListener,
    RecordingDiagnosticListener,
)

from .errors import (
    FactoryError,
    DefinitionNotFoundError,
    CardinalityMismatchError,
    GeneratorExhaustedError,
    BuildDepthExceededError,
    InvalidDefinitionError,
    FactoryLoadError,
    ConfigError,
)

__all__ = [
    # Core
    "BlueprintDefinition",
    "FactoryRegistry",
    "Mutate",
    "Supply",
    "as_step",
    "get_default_registry",
    "set_default_registry",
    "define",
    "build",
    "resolve",
    "reset",
    "load",
    # Build
    "BuildRequest",
    "BuildResult",
    "current_build_stack",
    # Generators
    "ExhaustionPolicy",
    "ValueGenerator",
    "ValuesGenerator",
    "SequenceGenerator",
    "DerivedGenerator",
    "Generators",
    # Loader
    "FactoryModule",
    "FactoryLoader",
    # Config
    "FactoryConfig",
    "get_config",
    "set_config",
    # Diagnostics
    "FactoryDiagnostics",
    "FactoryEvent",
    "FactoryEventType",
    "LoggingDiagnosticListener",
    "RecordingDiagnosticListener",
    # Errors
    "FactoryError",
    "DefinitionNotFoundError",
    "CardinalityMismatchError",
    "GeneratorExhaustedError",
    "BuildDepthExceededError",
    "InvalidDefinitionError",
    "FactoryLoadError",
    "ConfigError",
]
