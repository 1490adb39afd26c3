"""
Factory Diagnostics - Observability and event tracking for registries.
"""

import time
from typing import Any, Dict, List, Optional, Protocol
from enum import Enum
import dataclasses
import logging

logger = logging.getLogger("factoria.diagnostics")


class FactoryEventType(Enum):
    """Types of factory events."""
    DEFINE = "define"
    RESET = "reset"
    LOAD = "load"
    BUILD_START = "build_start"
    BUILD_SUCCESS = "build_success"
    BUILD_FAILURE = "build_failure"


@dataclasses.dataclass
class FactoryEvent:
    """A diagnostic event in the factory system."""
    type: FactoryEventType
    timestamp: float = dataclasses.field(default_factory=time.time)
    entity_type: Optional[Any] = None
    variant: Optional[str] = None
    depth: int = 0
    duration: Optional[float] = None
    error: Optional[BaseException] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)


class DiagnosticListener(Protocol):
    """Interface for factory diagnostic listeners."""
    def on_event(self, event: FactoryEvent) -> None:
        """Called when a factory event occurs."""
        ...


class LoggingDiagnosticListener:
    """Renders events to the ``factoria.diagnostics`` logger."""

    def __init__(self, log_level: int = logging.DEBUG):
        self.log_level = log_level

    def on_event(self, event: FactoryEvent) -> None:
        name = getattr(event.entity_type, "__name__", event.entity_type)
        label = f"{name}[{event.variant}]" if event.variant else f"{name}"

        if event.type == FactoryEventType.DEFINE:
            logger.log(self.log_level, "Defined blueprint %s", label)
        elif event.type == FactoryEventType.RESET:
            logger.log(self.log_level, "Registry reset (%d definition(s) cleared)",
                       event.metadata.get("cleared", 0))
        elif event.type == FactoryEventType.LOAD:
            logger.log(self.log_level, "Loaded factory module %s", event.metadata.get("module"))
        elif event.type == FactoryEventType.BUILD_START:
            logger.log(self.log_level, "%sBuilding %s...", "  " * event.depth, label)
        elif event.type == FactoryEventType.BUILD_SUCCESS:
            logger.log(self.log_level, "%s✓ Built %s in %.4fs", "  " * event.depth, label, event.duration)
        elif event.type == FactoryEventType.BUILD_FAILURE:
            logger.log(logging.ERROR, "%s✗ Failed to build %s: %s", "  " * event.depth, label, event.error)


class RecordingDiagnosticListener:
    """Keeps every event in memory; handy for assertions in tests."""

    def __init__(self):
        self.events: List[FactoryEvent] = []

    def on_event(self, event: FactoryEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: FactoryEventType) -> List[FactoryEvent]:
        return [e for e in self.events if e.type == event_type]

    def clear(self) -> None:
        self.events.clear()


class FactoryDiagnostics:
    """Coordinator for factory diagnostic listeners."""

    def __init__(self):
        self._listeners: List[DiagnosticListener] = []

    @property
    def enabled(self) -> bool:
        return bool(self._listeners)

    def add_listener(self, listener: DiagnosticListener) -> None:
        """Add a diagnostic listener."""
        self._listeners.append(listener)

    def remove_listener(self, listener: DiagnosticListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: FactoryEventType, **kwargs) -> None:
        """Emit a diagnostic event to all listeners."""
        if not self._listeners:
            return
        event = FactoryEvent(type=event_type, **kwargs)
        for listener in self._listeners:
            try:
                listener.on_event(event)
            except Exception as e:
                # Diagnostics never break a build
                logger.error("Diagnostic listener error: %s", e)

    def measure(self, **kwargs):
        """Context manager that emits start and success/failure events."""
        return _DiagnosticMeasure(self, **kwargs)


class _DiagnosticMeasure:
    def __init__(self, diagnostics: FactoryDiagnostics, **kwargs):
        self.diagnostics = diagnostics
        self.kwargs = kwargs
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.diagnostics.emit(FactoryEventType.BUILD_START, **self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self.start_time
        if exc_type:
            self.diagnostics.emit(
                FactoryEventType.BUILD_FAILURE,
                duration=duration,
                error=exc_val,
                **self.kwargs
            )
        else:
            self.diagnostics.emit(
                FactoryEventType.BUILD_SUCCESS,
                duration=duration,
                **self.kwargs
            )
        return False
