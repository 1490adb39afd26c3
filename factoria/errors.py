"""
Factoria error types with rich diagnostics.
"""

from typing import Any, List, Optional


def type_name(entity_type: Any) -> str:
    """Readable name for an entity type used in messages and keys."""
    if isinstance(entity_type, type):
        return f"{entity_type.__module__}.{entity_type.__qualname__}"
    return str(entity_type)


class FactoryError(Exception):
    """Base exception for factory errors."""
    pass


class DefinitionNotFoundError(FactoryError):
    """No blueprint registered for the requested (type, variant) key."""

    def __init__(
        self,
        entity_type: Any,
        variant: Optional[str] = None,
        candidates: Optional[List[Optional[str]]] = None,
    ):
        self.entity_type = entity_type
        self.variant = variant
        self.candidates = candidates or []

        msg = f"No blueprint defined for {type_name(entity_type)}"
        if variant is not None:
            msg += f" (variant={variant!r})"
        else:
            msg += " (primary)"

        if self.candidates:
            msg += "\n\nDefined variants for this type:"
            for candidate in self.candidates:
                label = "<primary>" if candidate is None else repr(candidate)
                msg += f"\n  - {label}"
            msg += "\n\nSuggested fixes:"
            msg += "\n  - Check the variant name for typos"
            msg += "\n  - Define the blueprint before building it"
        else:
            msg += "\n\nSuggested fixes:"
            msg += "\n  - Define a blueprint for this type"
            msg += "\n  - Load the FactoryModule that defines it"

        super().__init__(msg)


class CardinalityMismatchError(FactoryError):
    """to_one()/to_list() called on a result of the wrong shape."""

    def __init__(self, requested: str, count: Optional[int]):
        self.requested = requested
        self.count = count

        if requested == "one":
            msg = (
                f"to_one() called on a result built with times({count}); "
                f"use to_list() instead"
            )
        else:
            msg = (
                "to_list() called on a single-instance result; "
                "use times(n).to_list() or to_one()"
            )
        super().__init__(msg)


class GeneratorExhaustedError(FactoryError):
    """A finite value pool has no more values under its policy."""

    def __init__(self, size: int):
        self.size = size
        if size == 0:
            msg = "Value pool is empty"
        else:
            msg = (
                f"Value pool of {size} value(s) is exhausted"
                f"\n\nSuggested fixes:"
                f"\n  - Use ExhaustionPolicy.CYCLE to wrap around"
                f"\n  - Add more values to the pool"
                f"\n  - Call reset() on the generator between builds"
            )
        super().__init__(msg)


class BuildDepthExceededError(FactoryError):
    """Nested builds went deeper than the configured limit."""

    def __init__(self, stack: List[str], max_depth: int):
        self.stack = stack
        self.max_depth = max_depth

        msg = f"Nested build depth exceeded max_depth={max_depth}:"
        for i, key in enumerate(stack[-8:]):
            arrow = " -> " if i < len(stack[-8:]) - 1 else ""
            msg += f"\n  {key}{arrow}"
        if len(stack) > 8:
            msg += f"\n  ({len(stack) - 8} earlier frame(s) omitted)"

        msg += "\n\nSuggested fixes:"
        msg += "\n  - Check for a blueprint that builds itself unconditionally"
        msg += "\n  - Raise max_depth if the object graph is legitimately deep"

        super().__init__(msg)


class InvalidDefinitionError(FactoryError):
    """A blueprint mutation does not match either accepted shape."""
    pass


class FactoryLoadError(FactoryError):
    """A load source could not be turned into factory modules."""

    def __init__(self, source: Any, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load factories from {source!r}: {reason}")


class ConfigError(FactoryError):
    """Raised when configuration validation fails."""
    pass
