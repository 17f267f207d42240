"""Vehicles: things that follow an itinerary of junctions.

A vehicle is always in exactly one of three places:

  on a road       -- ``road`` is set, ``location`` is its distance from the start
  in a queue      -- ``waiting_at`` is the junction it is queued at
  arrived         -- ``arrived`` is True; it never moves again

Roads decide how fast their vehicles go (``move``), junctions decide when a
queued vehicle may continue (``move_to_next_road``).
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .errors import ScenarioInvalidError
from .ini import IniSection
from .simobject import SimulatedObject

if TYPE_CHECKING:
    from .junctions import Junction
    from .roads import Road

logger = logging.getLogger(__name__)


class Vehicle(SimulatedObject):
    REPORT_TAG = "vehicle_report"

    def __init__(self, id: str, max_speed: int, itinerary: Sequence[Junction]):
        super().__init__(id)
        if max_speed < 1:
            raise ScenarioInvalidError(f"vehicle '{id}': max_speed must be >= 1")
        if len(itinerary) < 2:
            raise ScenarioInvalidError(
                f"vehicle '{id}': itinerary needs at least two junctions"
            )
        self.max_speed = max_speed
        self.itinerary: tuple[Junction, ...] = tuple(itinerary)
        self.speed = 0
        self.location = 0
        self.kilometrage = 0
        self.faulty = 0
        self.arrived = False
        self.road: Road | None = None
        self.waiting_at: Junction | None = None
        self.lane = 0
        self._index = 0

    @property
    def is_faulty(self) -> bool:
        return self.faulty > 0

    @property
    def current_junction(self) -> Junction:
        """Junction the vehicle last left (or is queued at, once released)."""
        return self.itinerary[self._index]

    def _road_to(self, index: int) -> Road:
        here, there = self.itinerary[index], self.itinerary[index + 1]
        road = here.road_to(there)
        if road is None:
            raise ScenarioInvalidError(
                f"vehicle '{self.id}': no road from '{here.id}' to '{there.id}'"
            )
        return road

    def depart(self) -> None:
        """Place the vehicle at the start of its first road."""
        self._road_to(0).enter(self)

    def make_faulty(self, duration: int) -> None:
        if duration > 0:
            self.faulty += duration

    def count_down_fault(self) -> None:
        if self.faulty > 0:
            self.faulty -= 1

    def check_fault(self) -> None:
        """Called by the road before it works out speeds for the tick."""

    def move(self, speed: int) -> bool:
        """Move along the current road; True when the end of the road is reached."""
        if self.road is None or self.waiting_at is not None or self.arrived:
            raise RuntimeError(f"vehicle '{self.id}' is not on a road")
        if self.is_faulty:
            self.speed = 0
            self.count_down_fault()
            return False
        self.speed = speed
        step = min(speed, self.road.length - self.location)
        self.location += step
        self.kilometrage += step
        return self.location >= self.road.length

    def wait_at(self, junction: Junction) -> None:
        self.waiting_at = junction
        self.speed = 0

    def move_to_next_road(self) -> None:
        nxt = self._index + 1
        if nxt == len(self.itinerary) - 1:
            self._index = nxt
            self.arrived = True
            self.road = None
            self.waiting_at = None
            self.speed = 0
            self.location = 0
            logger.debug("vehicle %s arrived at %s", self.id, self.current_junction.id)
            return
        road = self._road_to(nxt)
        self._index = nxt
        self.waiting_at = None
        road.enter(self)

    def location_label(self) -> str:
        if self.arrived:
            return "arrived"
        if self.waiting_at is not None:
            return f"(waiting,{self.waiting_at.id})"
        assert self.road is not None
        return f"({self.road.id},{self.location})"

    def fill_report_details(self, sec: IniSection) -> None:
        sec["speed"] = self.speed
        sec["kilometrage"] = self.kilometrage
        sec["faulty"] = self.faulty
        sec["location"] = self.location_label()

    def describe(self) -> dict[str, str]:
        out = super().describe()
        if self.arrived:
            out["Road"] = "arrived"
        elif self.waiting_at is not None:
            out["Road"] = f"waiting at {self.waiting_at.id}"
        else:
            out["Road"] = self.road.id if self.road else ""
        out["Location"] = str(self.location)
        out["Speed"] = str(self.speed)
        out["Km"] = str(self.kilometrage)
        out["Faulty units"] = str(self.faulty)
        out["Itinerary"] = "[" + ",".join(j.id for j in self.itinerary) + "]"
        return out


class Bike(Vehicle):
    """Only breaks down when going faster than half its top speed."""

    REPORT_TYPE = "bike"

    def make_faulty(self, duration: int) -> None:
        if self.speed * 2 > self.max_speed:
            super().make_faulty(duration)


class Car(Vehicle):
    """A vehicle that breaks down on its own.

    Once it has covered more than ``resistance`` units since its last fault,
    each tick it fails with probability ``fault_probability`` for a random
    number of ticks in ``[1, max_fault_duration]``. All draws come from a
    private generator seeded with ``seed``, so runs are reproducible.
    """

    REPORT_TYPE = "car"

    def __init__(
        self,
        id: str,
        max_speed: int,
        itinerary: Sequence[Junction],
        resistance: int,
        fault_probability: float,
        max_fault_duration: int,
        seed: int,
    ):
        super().__init__(id, max_speed, itinerary)
        self.resistance = resistance
        self.fault_probability = fault_probability
        self.max_fault_duration = max_fault_duration
        self._rng = random.Random(seed)
        self._last_fault_km = 0

    def make_faulty(self, duration: int) -> None:
        super().make_faulty(duration)
        if self.is_faulty:
            self._last_fault_km = self.kilometrage

    def check_fault(self) -> None:
        if self.is_faulty or self.kilometrage - self._last_fault_km <= self.resistance:
            return
        if self._rng.random() < self.fault_probability:
            duration = self._rng.randint(1, self.max_fault_duration)
            logger.debug("car %s broke down for %d ticks", self.id, duration)
            self.make_faulty(duration)
