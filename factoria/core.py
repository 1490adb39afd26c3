"""
Core factory types and the definition registry.

A blueprint is stored under its ``(entity_type, variant)`` key. The mutation
routine is classified once, at definition time, into one of two steps:

- ``Mutate(fn)``: ``fn(instance)`` configures a blank instance in place
- ``Supply(fn)``: ``fn()`` returns the fully formed instance itself
"""

from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)
from dataclasses import dataclass
import inspect
import logging

from .config import FactoryConfig, get_config
from .diagnostics import FactoryDiagnostics, FactoryEventType, LoggingDiagnosticListener
from .errors import DefinitionNotFoundError, InvalidDefinitionError, type_name

logger = logging.getLogger("factoria.registry")

T = TypeVar("T")

Key = Tuple[Any, Optional[str]]


# ============================================================================
# Mutation steps
# ============================================================================

@dataclass(frozen=True, slots=True)
class Mutate:
    """Configures a given instance in place; the return value is ignored."""
    fn: Callable[[Any], Any]

    def apply(self, instance: Any) -> None:
        self.fn(instance)


@dataclass(frozen=True, slots=True)
class Supply:
    """Produces the instance itself, typically by delegating to another build."""
    fn: Callable[[], Any]

    def produce(self) -> Any:
        return self.fn()


Step = Union[Mutate, Supply]


def as_step(mutation: Any) -> Step:
    """
    Classify a mutation routine by the number of required positional
    parameters: none -> Supply, one -> Mutate.

    Raises:
        InvalidDefinitionError: Not callable, uninspectable or wrong arity
    """
    if isinstance(mutation, (Mutate, Supply)):
        return mutation

    if not callable(mutation):
        raise InvalidDefinitionError(
            f"Blueprint mutation must be callable, got {type(mutation).__name__}"
        )

    try:
        sig = inspect.signature(mutation)
    except (TypeError, ValueError):
        raise InvalidDefinitionError(
            f"Cannot inspect signature of {mutation!r}; "
            f"wrap it explicitly in Mutate(...) or Supply(...)"
        ) from None

    required = [
        p for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]

    if len(required) == 0:
        return Supply(mutation)
    if len(required) == 1:
        return Mutate(mutation)

    raise InvalidDefinitionError(
        f"Blueprint mutation {getattr(mutation, '__qualname__', mutation)!r} takes "
        f"{len(required)} required arguments; expected (instance) or ()"
    )


# ============================================================================
# BlueprintDefinition
# ============================================================================

@dataclass(frozen=True, slots=True)
class BlueprintDefinition:
    """
    A named recipe for one type of object.

    ``constructor`` produces the blank instance handed to a ``Mutate`` step;
    it is unused for ``Supply`` steps.
    """
    entity_type: Any
    variant: Optional[str]
    step: Step
    constructor: Optional[Callable[[], Any]] = None

    @property
    def key(self) -> Key:
        return (self.entity_type, self.variant)

    @property
    def supplies_instance(self) -> bool:
        return isinstance(self.step, Supply)

    @property
    def label(self) -> str:
        name = type_name(self.entity_type)
        return f"{name}#{self.variant}" if self.variant is not None else name


# ============================================================================
# FactoryRegistry
# ============================================================================

class FactoryRegistry:
    """
    Store of blueprint definitions keyed by ``(entity_type, variant)``.

    Construct one per test session (or use the module-level default) and
    call ``reset()`` between independent test setups.

    Example:
        registry = FactoryRegistry()
        registry.define(User, lambda u: setattr(u, "name", "Malcom"))
        registry.define(User, "admin", make_admin)
        admin = registry.build(User, "admin").to_one()
    """

    def __init__(
        self,
        config: Optional[FactoryConfig] = None,
        diagnostics: Optional[FactoryDiagnostics] = None,
    ):
        self._definitions: Dict[Key, BlueprintDefinition] = {}
        self._config = config or get_config()
        self._diagnostics = diagnostics or FactoryDiagnostics()
        if self._config.debug:
            self._diagnostics.add_listener(LoggingDiagnosticListener())

    @property
    def config(self) -> FactoryConfig:
        return self._config

    @property
    def diagnostics(self) -> FactoryDiagnostics:
        return self._diagnostics

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    def define(
        self,
        entity_type: Type[T] | Any,
        variant: Optional[str] | Callable = None,
        mutation: Optional[Callable] = None,
        *,
        constructor: Optional[Callable[[], T]] = None,
    ):
        """
        Register or replace the blueprint for ``(entity_type, variant)``.

        The variant may be omitted: ``define(User, fn)``. When ``mutation``
        is omitted the call returns a decorator::

            @registry.define(User, "admin")
            def admin(u):
                u.role = Role.ADMIN

        Args:
            entity_type: Domain type produced by the blueprint
            variant: Variant name, ``None`` for the primary blueprint
            mutation: ``fn(instance)``, ``fn()``, ``Mutate`` or ``Supply``
            constructor: Zero-argument factory for blank instances
                (defaults to ``entity_type``)

        Returns:
            The stored definition, or a decorator returning the routine
        """
        if mutation is None and (callable(variant) or isinstance(variant, (Mutate, Supply))):
            variant, mutation = None, variant

        if variant is not None and not isinstance(variant, str):
            raise InvalidDefinitionError(
                f"Variant name must be a string, got {type(variant).__name__}"
            )

        if mutation is None:
            def decorator(fn: Callable) -> Callable:
                self.define(entity_type, variant, fn, constructor=constructor)
                return fn
            return decorator

        step = as_step(mutation)

        if constructor is None and isinstance(step, Mutate):
            if not callable(entity_type):
                raise InvalidDefinitionError(
                    f"{type_name(entity_type)} is not callable; "
                    f"pass constructor= to produce blank instances"
                )
            constructor = entity_type

        definition = BlueprintDefinition(
            entity_type=entity_type,
            variant=variant,
            step=step,
            constructor=constructor,
        )

        replaced = definition.key in self._definitions
        self._definitions[definition.key] = definition

        logger.debug(
            "%s blueprint %s (%s)",
            "Replaced" if replaced else "Defined",
            definition.label,
            type(step).__name__,
        )
        self._diagnostics.emit(
            FactoryEventType.DEFINE,
            entity_type=entity_type,
            variant=variant,
            metadata={"replaced": replaced, "step": type(step).__name__},
        )
        return definition

    def reset(self) -> None:
        """Clear every definition. Generators are left untouched."""
        cleared = len(self._definitions)
        self._definitions.clear()
        logger.debug("Registry reset: %d definition(s) cleared", cleared)
        self._diagnostics.emit(FactoryEventType.RESET, metadata={"cleared": cleared})

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, entity_type: Any, variant: Optional[str] = None) -> BlueprintDefinition:
        """
        Return the definition for the exact key.

        Raises:
            DefinitionNotFoundError: No definition for ``(entity_type, variant)``;
                never falls back from a variant to the primary blueprint
        """
        definition = self._definitions.get((entity_type, variant))
        if definition is None:
            raise DefinitionNotFoundError(
                entity_type,
                variant,
                candidates=self.variants(entity_type),
            )
        return definition

    def is_defined(self, entity_type: Any, variant: Optional[str] = None) -> bool:
        return (entity_type, variant) in self._definitions

    def variants(self, entity_type: Any) -> List[Optional[str]]:
        """Variant names defined for a type; ``None`` stands for the primary."""
        names = [v for (t, v) in self._definitions if t is entity_type or t == entity_type]
        return sorted(names, key=lambda v: (v is not None, v or ""))

    def definitions(self) -> List[BlueprintDefinition]:
        """Snapshot of all definitions."""
        return list(self._definitions.values())

    def __contains__(self, key: Key) -> bool:
        return key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[BlueprintDefinition]:
        return iter(self.definitions())

    # ------------------------------------------------------------------
    # Building & loading
    # ------------------------------------------------------------------

    def build(
        self,
        entity_type: Type[T] | Any,
        variant: Optional[str] | Callable = None,
        override: Optional[Callable] = None,
        /,
        **attrs: Any,
    ) -> "BuildResult":
        """
        Request a build of ``(entity_type, variant)``.

        ``override`` runs on the instance after the blueprint; keyword
        ``attrs`` are then set as attributes. Both win over the blueprint.
        A callable in the ``variant`` position is taken as the override.
        The leading parameters are positional-only, so ``variant=...`` or
        ``override=...`` set attributes of those names on the instance.

        Returns:
            A lazy ``BuildResult``; call ``to_one()``, or ``times(n).to_list()``
        """
        from .pipeline import BuildRequest, BuildResult

        if override is None and (callable(variant) or isinstance(variant, Mutate)):
            variant, override = None, variant

        request = BuildRequest(self, entity_type, variant, override, attrs)
        return BuildResult(request)

    def load(self, *sources: Any) -> List[type]:
        """
        Load ``FactoryModule`` classes, modules or packages into this registry.

        Returns:
            The factory module classes that were loaded
        """
        from .loader import FactoryLoader
        return FactoryLoader(self).load(*sources)

    def __repr__(self) -> str:
        return f"FactoryRegistry(definitions={len(self._definitions)})"


# ============================================================================
# Default registry
# ============================================================================

_default_registry: Optional[FactoryRegistry] = None


def get_default_registry() -> FactoryRegistry:
    """Process-wide registry backing the module-level helpers."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FactoryRegistry()
    return _default_registry


def set_default_registry(registry: Optional[FactoryRegistry]) -> None:
    """Swap the default registry; ``None`` recreates it on next use."""
    global _default_registry
    _default_registry = registry


def define(entity_type: Any, variant: Any = None, mutation: Optional[Callable] = None, *, constructor=None):
    return get_default_registry().define(entity_type, variant, mutation, constructor=constructor)


def build(entity_type: Any, variant: Any = None, override: Optional[Callable] = None, /, **attrs: Any):
    return get_default_registry().build(entity_type, variant, override, **attrs)


def resolve(entity_type: Any, variant: Optional[str] = None) -> BlueprintDefinition:
    return get_default_registry().resolve(entity_type, variant)


def reset() -> None:
    get_default_registry().reset()


def load(*sources: Any) -> List[type]:
    return get_default_registry().load(*sources)
