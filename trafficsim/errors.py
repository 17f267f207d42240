"""Error kinds raised by the simulator, and a Result type for boundary calls.

Scenario errors come in two flavours:

  malformed: the text could not be parsed, or a builder rejected a field
  invalid:   the event parsed, but executing it contradicts the world
             (duplicate id, unknown junction, no road between two junctions)

The kernel wraps whatever stopped a tick in a TickError before handing it to
listeners; the original error is kept as ``__cause__``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


class SimulatorError(Exception):
    """Base class for every error the simulator reports."""


class ScenarioMalformedError(SimulatorError):
    """Scenario text could not be parsed into events."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ScenarioInvalidError(SimulatorError):
    """A well-formed event cannot be applied to the current road map."""


class ReportWriteError(SimulatorError):
    """The report sink rejected a write."""

    def __init__(self, object_id: str, tick: int):
        self.object_id = object_id
        self.tick = tick
        super().__init__(f"could not write report of '{object_id}' at tick {tick}")


class TickError(SimulatorError):
    """Failure of a single tick, carrying the tick it happened at."""

    def __init__(self, tick: int, cause: Exception):
        self.tick = tick
        super().__init__(f"Error at tick {tick}: {cause}")


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result: TypeAlias = Union[Ok[T], Err[E]]
