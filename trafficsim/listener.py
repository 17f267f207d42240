"""Observer protocol between the kernel and a user interface.

Listeners subclass ``SimulatorListener`` and override the callbacks they
care about. Every callback receives an ``UpdateEvent`` snapshot taken at the
moment of notification. The road map inside it is the kernel's live object:
read it, never mutate it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import SimulatorError
    from .events import Event
    from .roadmap import RoadMap

# Hands a callback to the UI thread; notifications run inline without one.
Dispatch = Callable[[Callable[[], None]], None]


class EventType(Enum):
    REGISTERED = "registered"
    RESET = "reset"
    NEW_EVENT = "new_event"
    ADVANCED = "advanced"
    ERROR = "error"


@dataclass(frozen=True)
class UpdateEvent:
    type: EventType
    current_tick: int
    road_map: RoadMap
    pending_events: tuple[Event, ...]
    """Events with ``time >= current_tick``, in execution order."""


class SimulatorListener:
    def registered(self, update: UpdateEvent) -> None:
        pass

    def reset(self, update: UpdateEvent) -> None:
        pass

    def new_event(self, update: UpdateEvent) -> None:
        pass

    def advanced(self, update: UpdateEvent) -> None:
        pass

    def error(self, update: UpdateEvent, error: SimulatorError) -> None:
        pass
