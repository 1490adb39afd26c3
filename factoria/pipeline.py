"""
Build pipeline - turns a build request into configured instances.

Per instance, strictly in this order:
1. Resolve the blueprint for the exact ``(entity_type, variant)`` key
2. Supply step: call it for the instance; Mutate step: construct a blank
   instance and configure it in place
3. Apply the caller's override routine
4. Apply keyword attribute overrides

Nested builds issued from inside a mutation are independent requests. The
active build stack lives in a ContextVar so that runaway recursion is caught
and the stack is always unwound.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING
from contextvars import ContextVar
import logging

from .core import Mutate, Supply, as_step
from .errors import (
    BuildDepthExceededError,
    CardinalityMismatchError,
    InvalidDefinitionError,
    type_name,
)

if TYPE_CHECKING:
    from .core import FactoryRegistry

logger = logging.getLogger("factoria.build")

_build_stack: ContextVar[Tuple[str, ...]] = ContextVar("factoria_build_stack", default=())


def current_build_stack() -> Tuple[str, ...]:
    """Labels of the blueprints currently being built, outermost first."""
    return _build_stack.get()


class BuildRequest:
    """
    A resolved-on-demand request for one instance of ``(entity_type, variant)``.

    The override is validated eagerly so misuse fails at the ``build`` call.
    """

    __slots__ = ("registry", "entity_type", "variant", "override", "attrs")

    def __init__(
        self,
        registry: "FactoryRegistry",
        entity_type: Any,
        variant: Optional[str] = None,
        override: Optional[Callable] = None,
        attrs: Optional[Dict[str, Any]] = None,
    ):
        if variant is not None and not isinstance(variant, str):
            raise InvalidDefinitionError(
                f"Variant name must be a string, got {type(variant).__name__}"
            )

        if override is not None:
            step = as_step(override)
            if isinstance(step, Supply):
                raise InvalidDefinitionError(
                    "Override must accept the instance it configures"
                )
            override = step

        self.registry = registry
        self.entity_type = entity_type
        self.variant = variant
        self.override: Optional[Mutate] = override
        self.attrs: Dict[str, Any] = dict(attrs or {})

    def execute(self) -> Any:
        """Produce one configured instance."""
        definition = self.registry.resolve(self.entity_type, self.variant)

        stack = _build_stack.get()
        max_depth = self.registry.config.max_depth
        if len(stack) >= max_depth:
            raise BuildDepthExceededError(list(stack) + [definition.label], max_depth)

        token = _build_stack.set(stack + (definition.label,))
        try:
            with self.registry.diagnostics.measure(
                entity_type=self.entity_type,
                variant=self.variant,
                depth=len(stack),
            ):
                if isinstance(definition.step, Supply):
                    instance = definition.step.produce()
                else:
                    instance = definition.constructor()
                    definition.step.apply(instance)

                if self.override is not None:
                    self.override.apply(instance)

                for name, value in self.attrs.items():
                    setattr(instance, name, value)

                return instance
        finally:
            _build_stack.reset(token)

    def __repr__(self) -> str:
        return f"BuildRequest({type_name(self.entity_type)}, variant={self.variant!r})"


class BuildResult:
    """
    Lazy view over the instances of a build request.

    Instances are produced on the first ``to_one()``/``to_list()`` call and
    the same instances are returned afterwards.
    """

    __slots__ = ("_request", "_count", "_instances")

    def __init__(self, request: BuildRequest, count: Optional[int] = None):
        if count is not None and count < 0:
            raise ValueError(f"times() expects a non-negative count, got {count}")
        self._request = request
        self._count = count
        self._instances: Optional[List[Any]] = None

    @property
    def request(self) -> BuildRequest:
        return self._request

    @property
    def is_multiple(self) -> bool:
        return self._count is not None

    def times(self, n: int) -> "BuildResult":
        """Same request, repeated ``n`` times independently and in order."""
        return BuildResult(self._request, n)

    def to_one(self) -> Any:
        """
        The single built instance.

        Raises:
            CardinalityMismatchError: Built with ``times(n)`` where ``n != 1``
        """
        if self._count is not None and self._count != 1:
            raise CardinalityMismatchError("one", self._count)
        return self._materialize()[0]

    def to_list(self) -> List[Any]:
        """
        The ordered list of built instances.

        Raises:
            CardinalityMismatchError: Not built with ``times(n)``
        """
        if self._count is None:
            raise CardinalityMismatchError("list", None)
        return list(self._materialize())

    def _materialize(self) -> List[Any]:
        if self._instances is None:
            count = 1 if self._count is None else self._count
            logger.debug("Materializing %r x%d", self._request, count)
            self._instances = [self._request.execute() for _ in range(count)]
        return self._instances

    def __repr__(self) -> str:
        state = "built" if self._instances is not None else "pending"
        return f"BuildResult({self._request!r}, count={self._count}, {state})"
