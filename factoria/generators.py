"""
Value generators - deterministic, stateful value sources.

Generators are owned by whoever creates them. A registry reset never touches
them, so a generator shared by several blueprints keeps one advancing cursor
across all of them until its owner calls ``reset()``.

Example:
    ids = Generators.sequence()
    names = Generators.values("Scott", "John", "Malcom")

    @registry.define(User)
    def user(u):
        u.id = ids.next_value()
        u.name = names.next_value()
"""

from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar
from enum import Enum
import logging

from .errors import GeneratorExhaustedError

logger = logging.getLogger("factoria.generators")

T = TypeVar("T")


class ExhaustionPolicy(str, Enum):
    """What a finite pool does once every value has been handed out."""
    CYCLE = "cycle"  # Wrap around to the first value
    FAIL = "fail"    # Raise GeneratorExhaustedError


class ValueGenerator(Generic[T]):
    """
    Base class for value generators.

    Subclasses implement ``_produce`` and ``reset``. Generators are also
    plain iterators, so ``next(gen)`` works.
    """

    def next_value(self) -> T:
        """Advance the cursor and return the next value."""
        return self._produce()

    def _produce(self) -> T:
        raise NotImplementedError

    def reset(self) -> None:
        """Rewind to the starting state."""
        raise NotImplementedError

    def __iter__(self) -> "ValueGenerator[T]":
        return self

    def __next__(self) -> T:
        return self.next_value()


class ValuesGenerator(ValueGenerator[T]):
    """
    Finite ordered pool consumed position by position.

    Behaviour past the end of the pool follows ``policy``. An empty pool
    fails on the first call under either policy.
    """

    def __init__(
        self,
        values: Iterable[T],
        policy: ExhaustionPolicy = ExhaustionPolicy.CYCLE,
    ):
        self._values: tuple = tuple(values)
        self._policy = ExhaustionPolicy(policy)
        self._position = 0

    @property
    def policy(self) -> ExhaustionPolicy:
        return self._policy

    @property
    def position(self) -> int:
        """Number of values handed out since the last reset."""
        return self._position

    def __len__(self) -> int:
        return len(self._values)

    def _produce(self) -> T:
        size = len(self._values)
        if size == 0:
            raise GeneratorExhaustedError(0)

        if self._position >= size and self._policy is ExhaustionPolicy.FAIL:
            raise GeneratorExhaustedError(size)

        value = self._values[self._position % size]
        self._position += 1
        if self._position % size == 0 and self._policy is ExhaustionPolicy.CYCLE:
            logger.debug("Value pool of %d wrapped around", size)
        return value

    def reset(self) -> None:
        self._position = 0

    def __repr__(self) -> str:
        return (
            f"ValuesGenerator(size={len(self._values)}, "
            f"position={self._position}, policy={self._policy.value})"
        )


class SequenceGenerator(ValueGenerator[int]):
    """Unbounded counter: start, start + step, start + 2*step, ..."""

    def __init__(self, start: int = 1, step: int = 1):
        if step == 0:
            raise ValueError("step must not be 0")
        self._start = start
        self._step = step
        self._current = start

    @property
    def current(self) -> int:
        """The value the next call will return."""
        return self._current

    def _produce(self) -> int:
        value = self._current
        self._current += self._step
        return value

    def reset(self) -> None:
        self._current = self._start

    def __repr__(self) -> str:
        return f"SequenceGenerator(start={self._start}, step={self._step}, next={self._current})"


class DerivedGenerator(ValueGenerator[T]):
    """Applies ``fn`` to an internal counter, e.g. ``lambda n: f"user-{n}"``."""

    def __init__(self, fn: Callable[[int], T], start: int = 1, step: int = 1):
        self._fn = fn
        self._counter = SequenceGenerator(start, step)

    def _produce(self) -> T:
        return self._fn(self._counter.next_value())

    def reset(self) -> None:
        self._counter.reset()


class Generators:
    """
    Helper namespace for creating generators.

    Mirrors the shorthand used in factory modules::

        ids = Generators.sequence(start=100)
        emails = Generators.formatted("user{n}@example.com")
    """

    @staticmethod
    def values(
        *values: Any,
        policy: Optional[ExhaustionPolicy] = None,
    ) -> ValuesGenerator:
        """Finite pool over ``values``; defaults to the configured policy."""
        if policy is None:
            from .config import get_config
            policy = get_config().default_policy
        return ValuesGenerator(values, policy=policy)

    @staticmethod
    def sequence(start: int = 1, step: int = 1) -> SequenceGenerator:
        return SequenceGenerator(start, step)

    @staticmethod
    def derived(fn: Callable[[int], T], start: int = 1, step: int = 1) -> DerivedGenerator:
        return DerivedGenerator(fn, start, step)

    @staticmethod
    def formatted(template: str, start: int = 1, step: int = 1) -> DerivedGenerator:
        """Strings from a ``str.format`` template with an ``{n}`` field."""
        return DerivedGenerator(lambda n: template.format(n=n), start, step)


__all__: List[str] = [
    "ExhaustionPolicy",
    "ValueGenerator",
    "ValuesGenerator",
    "SequenceGenerator",
    "DerivedGenerator",
    "Generators",
]
