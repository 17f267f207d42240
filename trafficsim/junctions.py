"""Junctions and their traffic-light policies.

A junction keeps one ``IncomingRoad`` per road that ends at it, in the order
the roads were created. Each advance:

  1. the green road (if any) lets its first queued vehicle through,
  2. every queued faulty vehicle counts down one tick,
  3. vehicles that joined a queue during this tick become releasable,
  4. the policy picks the next green road.

Policies:

  Junction               round-robin, one tick per road
  MostCrowdedJunction    the longest queue, ties to the earliest road
  TimeSliceJunction      round-robin with per-road slices that grow when
                         fully used and shrink when unused
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from .errors import ScenarioInvalidError
from .ini import IniSection
from .simobject import SimulatedObject

if TYPE_CHECKING:
    from .roads import Road
    from .vehicles import Vehicle

logger = logging.getLogger(__name__)


class IncomingRoad:
    """Traffic light and FIFO of waiting vehicles for one incoming road."""

    def __init__(self, road: Road):
        self.road = road
        self.green = False
        self.queue: deque[Vehicle] = deque()
        self._arrivals = 0

    def enter(self, vehicle: Vehicle) -> None:
        self.queue.append(vehicle)
        self._arrivals += 1

    def settle(self) -> None:
        self._arrivals = 0

    @property
    def releasable(self) -> int:
        return len(self.queue) - self._arrivals

    def turn_green(self) -> None:
        self.green = True

    def turn_red(self) -> None:
        self.green = False

    def advance_first_vehicle(self) -> bool:
        """Release the head of the queue; False when nothing could go."""
        if self.releasable <= 0 or self.queue[0].is_faulty:
            return False
        # the head stays queued if it has nowhere to go
        self.queue[0].move_to_next_road()
        self.queue.popleft()
        return True

    def count_down_faults(self) -> None:
        for v in self.queue:
            v.count_down_fault()

    def light_label(self) -> str:
        return "green" if self.green else "red"

    def queue_label(self) -> str:
        return "[" + ",".join(v.id for v in self.queue) + "]"

    def report_entry(self) -> str:
        return f"({self.road.id},{self.light_label()},{self.queue_label()})"


class Junction(SimulatedObject):
    """Round-robin junction: green moves to the next road every tick."""

    REPORT_TAG = "junction_report"

    def __init__(self, id: str):
        super().__init__(id)
        self._incoming: dict[Road, IncomingRoad] = {}
        self._outgoing: dict[Junction, Road] = {}
        self.current: IncomingRoad | None = None

    @property
    def incoming_roads(self) -> list[IncomingRoad]:
        return list(self._incoming.values())

    def incoming(self, road: Road) -> IncomingRoad:
        return self._incoming[road]

    def create_incoming_road(self, road: Road) -> IncomingRoad:
        return IncomingRoad(road)

    def add_incoming_road(self, road: Road) -> None:
        self._incoming[road] = self.create_incoming_road(road)

    def add_outgoing_road(self, road: Road, destination: Junction) -> None:
        self._outgoing[destination] = road

    def road_to(self, destination: Junction) -> Road | None:
        return self._outgoing.get(destination)

    def is_green(self, road: Road) -> bool:
        return self._incoming[road].green

    def enter(self, vehicle: Vehicle) -> None:
        if vehicle.road is None or vehicle.road not in self._incoming:
            raise ScenarioInvalidError(
                f"junction '{self.id}': vehicle '{vehicle.id}' did not come from an incoming road"
            )
        self._incoming[vehicle.road].enter(vehicle)
        vehicle.wait_at(self)

    def _release(self) -> None:
        if self.current is not None:
            self.current.advance_first_vehicle()

    def _end_of_queue_tick(self) -> None:
        for ir in self._incoming.values():
            ir.count_down_faults()
            ir.settle()

    def advance(self) -> None:
        if not self._incoming:
            return
        self._release()
        self._end_of_queue_tick()
        self.switch_lights()

    def next_green(self) -> IncomingRoad:
        roads = self.incoming_roads
        if self.current is None:
            return roads[0]
        return roads[(roads.index(self.current) + 1) % len(roads)]

    def switch_lights(self) -> None:
        nxt = self.next_green()
        if self.current is not None:
            self.current.turn_red()
        nxt.turn_green()
        self.current = nxt

    def fill_report_details(self, sec: IniSection) -> None:
        sec["queues"] = ",".join(ir.report_entry() for ir in self._incoming.values())

    def describe(self) -> dict[str, str]:
        out = super().describe()
        green = [ir.report_entry() for ir in self._incoming.values() if ir.green]
        red = [ir.report_entry() for ir in self._incoming.values() if not ir.green]
        out["Green"] = "[" + ",".join(green) + "]"
        out["Red"] = "[" + ",".join(red) + "]"
        return out


class MostCrowdedJunction(Junction):
    def next_green(self) -> IncomingRoad:
        # max() keeps the first of equal queues, i.e. the earliest road
        return max(self.incoming_roads, key=lambda ir: len(ir.queue))


class TimeSliceIncomingRoad(IncomingRoad):
    """Incoming road holding green for ``interval`` ticks at a time."""

    def __init__(self, road: Road, interval: int):
        super().__init__(road)
        self.interval = interval
        self.time_spent = 0
        self.used = False
        self.completely_used = False

    def turn_green(self) -> None:
        super().turn_green()
        self.completely_used = True
        self.used = False
        self.time_spent = 0

    def advance_first_vehicle(self) -> bool:
        self.time_spent += 1
        released = super().advance_first_vehicle()
        self.completely_used = released and self.completely_used
        self.used = self.used or self.completely_used
        return released

    @property
    def time_is_over(self) -> bool:
        return self.time_spent >= self.interval

    @property
    def remaining(self) -> int:
        return self.interval - self.time_spent

    def reallocate(self, max_slice: int, min_slice: int) -> None:
        if self.completely_used and self.interval < max_slice:
            self.interval += 1
        elif not self.used and self.interval > min_slice:
            self.interval -= 1

    def report_entry(self) -> str:
        if not self.green:
            return super().report_entry()
        return f"({self.road.id},green:{self.remaining},{self.queue_label()})"


class TimeSliceJunction(Junction):
    """Round-robin over incoming roads, each green for its own time slice.

    A slice starts at ``initial_time_slice`` (the ``time_slice`` scenario
    key; ``max_time_slice`` when not given). When a road gives up green its
    slice for the next turn is recomputed: one tick longer if every green
    tick let a vehicle through, one tick shorter if no tick did, clamped to
    ``[min_time_slice, max_time_slice]``.
    """

    def __init__(
        self,
        id: str,
        max_time_slice: int,
        min_time_slice: int,
        initial_time_slice: int | None = None,
    ):
        super().__init__(id)
        if not 1 <= min_time_slice <= max_time_slice:
            raise ScenarioInvalidError(
                f"junction '{id}': need 1 <= min_time_slice <= max_time_slice"
            )
        self.max_time_slice = max_time_slice
        self.min_time_slice = min_time_slice
        self.initial_time_slice = (
            max_time_slice if initial_time_slice is None else initial_time_slice
        )
        self.current: TimeSliceIncomingRoad | None = None

    def create_incoming_road(self, road: Road) -> TimeSliceIncomingRoad:
        return TimeSliceIncomingRoad(road, self.initial_time_slice)

    def incoming(self, road: Road) -> TimeSliceIncomingRoad:
        ir = super().incoming(road)
        assert isinstance(ir, TimeSliceIncomingRoad)
        return ir

    def advance(self) -> None:
        if not self._incoming:
            return
        self._release()
        self._end_of_queue_tick()
        if self.current is None or self.current.time_is_over:
            if self.current is not None:
                self.current.reallocate(self.max_time_slice, self.min_time_slice)
                logger.debug(
                    "junction %s: %s gets %d ticks next turn",
                    self.id,
                    self.current.road.id,
                    self.current.interval,
                )
            self.switch_lights()
