"""Roads: one-way links between two junctions that move vehicles along."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import ScenarioInvalidError
from .ini import IniSection
from .simobject import SimulatedObject

if TYPE_CHECKING:
    from .junctions import Junction
    from .vehicles import Vehicle

logger = logging.getLogger(__name__)


class Road(SimulatedObject):
    """A road from ``source`` to ``destination``.

    Each advance, every vehicle goes ``min(max_speed, vehicle.max_speed)``,
    halved when a faulty vehicle sits at or ahead of it. Speeds are worked
    out from the state before anyone moves, so the order vehicles are stored
    in never changes how fast they go.
    """

    REPORT_TAG = "road_report"

    def __init__(
        self,
        id: str,
        length: int,
        max_speed: int,
        source: Junction,
        destination: Junction,
    ):
        super().__init__(id)
        if length < 1 or max_speed < 1:
            raise ScenarioInvalidError(
                f"road '{id}': length and max_speed must be >= 1"
            )
        self.length = length
        self.max_speed = max_speed
        self.source = source
        self.destination = destination
        self.vehicles: list[Vehicle] = []

    def enter(self, vehicle: Vehicle) -> None:
        vehicle.road = self
        vehicle.location = 0
        self.vehicles.append(vehicle)

    def exit(self, vehicle: Vehicle) -> None:
        self.vehicles.remove(vehicle)

    def base_speed(self, vehicle: Vehicle) -> int:
        return min(self.max_speed, vehicle.max_speed)

    def reduce_speed(self, base: int, faulty_ahead: int) -> int:
        return base // 2 if faulty_ahead else base

    def groups(self) -> list[list[Vehicle]]:
        """Sets of vehicles that slow each other down."""
        return [self.vehicles]

    def _speeds(self) -> dict[Vehicle, int]:
        speeds: dict[Vehicle, int] = {}
        for group in self.groups():
            for v in group:
                if v.is_faulty:
                    speeds[v] = 0
                    continue
                ahead = sum(
                    1
                    for other in group
                    if other is not v and other.is_faulty and other.location >= v.location
                )
                speeds[v] = self.reduce_speed(self.base_speed(v), ahead)
        return speeds

    def advance(self) -> None:
        for v in self.vehicles:
            v.check_fault()
        speeds = self._speeds()
        for v in list(self.vehicles):
            if v.move(speeds[v]):
                self.exit(v)
                logger.debug("vehicle %s reached the end of %s", v.id, self.id)
                self.destination.enter(v)

    def fill_report_details(self, sec: IniSection) -> None:
        by_location = sorted(self.vehicles, key=lambda v: v.location)
        sec["state"] = ",".join(f"({v.id},{v.location})" for v in by_location)

    def describe(self) -> dict[str, str]:
        out = super().describe()
        out["Source"] = self.source.id
        out["Target"] = self.destination.id
        out["Length"] = str(self.length)
        out["Max Speed"] = str(self.max_speed)
        out["Vehicles"] = "[" + ",".join(v.id for v in self.vehicles) + "]"
        return out


class LaneRoad(Road):
    """A road split into ``lanes`` lanes; faults only slow their own lane."""

    def __init__(
        self,
        id: str,
        length: int,
        max_speed: int,
        source: Junction,
        destination: Junction,
        lanes: int,
    ):
        super().__init__(id, length, max_speed, source, destination)
        if lanes < 1:
            raise ScenarioInvalidError(f"road '{id}': lanes must be >= 1")
        self.lanes = lanes

    def _load(self) -> list[int]:
        load = [0] * self.lanes
        for v in self.vehicles:
            load[v.lane] += 1
        return load

    def enter(self, vehicle: Vehicle) -> None:
        load = self._load()
        vehicle.lane = load.index(min(load))
        super().enter(vehicle)

    def groups(self) -> list[list[Vehicle]]:
        lanes: list[list[Vehicle]] = [[] for _ in range(self.lanes)]
        for v in self.vehicles:
            lanes[v.lane].append(v)
        return lanes

    def describe(self) -> dict[str, str]:
        out = super().describe()
        out["Lanes"] = str(self.lanes)
        return out


class DirtRoad(Road):
    """Every faulty vehicle ahead divides the speed further."""

    REPORT_TYPE = "dirt"

    def reduce_speed(self, base: int, faulty_ahead: int) -> int:
        return base // (1 + faulty_ahead)
