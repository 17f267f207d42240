"""Scheduled scenario edits.

Every event is an immutable value carrying the tick it is due at and its own
payload. ``execute`` applies it to a RoadMap; ``to_section`` turns it back
into the scenario section it was parsed from.

Event variants:

  NewJunctionEvent              [new_junction]
  NewMostCrowdedJunctionEvent   [new_junction] type = mc
  NewTimeSliceJunctionEvent     [new_junction] type = rr
  NewRoadEvent                  [new_road]
  NewLaneRoadEvent              [new_road] type = lanes
  NewDirtRoadEvent              [new_road] type = dirt
  NewVehicleEvent               [new_vehicle]
  NewBikeEvent                  [new_vehicle] type = bike
  NewCarEvent                   [new_vehicle] type = car
  MakeVehicleFaultyEvent        [make_vehicle_faulty]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .ini import IniSection
from .junctions import Junction, MostCrowdedJunction, TimeSliceJunction
from .roadmap import RoadMap
from .roads import DirtRoad, LaneRoad, Road
from .vehicles import Bike, Car, Vehicle


@dataclass(frozen=True)
class Event:
    time: int

    TAG: ClassVar[str] = ""
    TYPE: ClassVar[str | None] = None

    def execute(self, road_map: RoadMap) -> None:
        raise NotImplementedError

    def summary(self) -> str:
        raise NotImplementedError

    def describe(self) -> dict[str, str]:
        return {"Time": str(self.time), "Type": self.summary()}

    def to_section(self) -> IniSection:
        sec = IniSection(self.TAG)
        sec["time"] = self.time
        if self.TYPE is not None:
            sec["type"] = self.TYPE
        self.fill_section(sec)
        return sec

    def fill_section(self, sec: IniSection) -> None:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Junctions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NewJunctionEvent(Event):
    id: str

    TAG = "new_junction"

    def make_junction(self) -> Junction:
        return Junction(self.id)

    def execute(self, road_map: RoadMap) -> None:
        road_map.add_junction(self.make_junction())

    def summary(self) -> str:
        return f"New junction {self.id}"

    def fill_section(self, sec: IniSection) -> None:
        sec["id"] = self.id


@dataclass(frozen=True)
class NewMostCrowdedJunctionEvent(NewJunctionEvent):
    TYPE = "mc"

    def make_junction(self) -> Junction:
        return MostCrowdedJunction(self.id)

    def summary(self) -> str:
        return f"New most crowded junction {self.id}"


@dataclass(frozen=True)
class NewTimeSliceJunctionEvent(NewJunctionEvent):
    max_time_slice: int
    min_time_slice: int
    time_slice: int | None = None

    TYPE = "rr"

    def make_junction(self) -> Junction:
        return TimeSliceJunction(
            self.id, self.max_time_slice, self.min_time_slice, self.time_slice
        )

    def summary(self) -> str:
        return f"New round robin junction {self.id}"

    def fill_section(self, sec: IniSection) -> None:
        super().fill_section(sec)
        sec["max_time_slice"] = self.max_time_slice
        sec["min_time_slice"] = self.min_time_slice
        if self.time_slice is not None:
            sec["time_slice"] = self.time_slice


# ---------------------------------------------------------------------------
# Roads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NewRoadEvent(Event):
    id: str
    src: str
    dest: str
    max_speed: int
    length: int

    TAG = "new_road"

    def make_road(self, source: Junction, destination: Junction) -> Road:
        return Road(self.id, self.length, self.max_speed, source, destination)

    def execute(self, road_map: RoadMap) -> None:
        source = road_map.get_junction(self.src)
        destination = road_map.get_junction(self.dest)
        road_map.add_road(self.make_road(source, destination))

    def summary(self) -> str:
        return f"New road {self.id}"

    def fill_section(self, sec: IniSection) -> None:
        sec["id"] = self.id
        sec["src"] = self.src
        sec["dest"] = self.dest
        sec["max_speed"] = self.max_speed
        sec["length"] = self.length


@dataclass(frozen=True)
class NewLaneRoadEvent(NewRoadEvent):
    lanes: int

    TYPE = "lanes"

    def make_road(self, source: Junction, destination: Junction) -> Road:
        return LaneRoad(
            self.id, self.length, self.max_speed, source, destination, self.lanes
        )

    def summary(self) -> str:
        return f"New lanes road {self.id}"

    def fill_section(self, sec: IniSection) -> None:
        super().fill_section(sec)
        sec["lanes"] = self.lanes


@dataclass(frozen=True)
class NewDirtRoadEvent(NewRoadEvent):
    TYPE = "dirt"

    def make_road(self, source: Junction, destination: Junction) -> Road:
        return DirtRoad(self.id, self.length, self.max_speed, source, destination)

    def summary(self) -> str:
        return f"New dirt road {self.id}"


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NewVehicleEvent(Event):
    id: str
    max_speed: int
    itinerary: tuple[str, ...]

    TAG = "new_vehicle"

    def make_vehicle(self, itinerary: list[Junction]) -> Vehicle:
        return Vehicle(self.id, self.max_speed, itinerary)

    def execute(self, road_map: RoadMap) -> None:
        itinerary = road_map.get_itinerary(self.itinerary)
        road_map.add_vehicle(self.make_vehicle(itinerary))

    def summary(self) -> str:
        return f"New vehicle {self.id}"

    def fill_section(self, sec: IniSection) -> None:
        sec["id"] = self.id
        sec["max_speed"] = self.max_speed
        sec["itinerary"] = ",".join(self.itinerary)


@dataclass(frozen=True)
class NewBikeEvent(NewVehicleEvent):
    TYPE = "bike"

    def make_vehicle(self, itinerary: list[Junction]) -> Vehicle:
        return Bike(self.id, self.max_speed, itinerary)

    def summary(self) -> str:
        return f"New bike {self.id}"


@dataclass(frozen=True)
class NewCarEvent(NewVehicleEvent):
    resistance: int
    fault_probability: float
    max_fault_duration: int
    seed: int

    TYPE = "car"

    def make_vehicle(self, itinerary: list[Junction]) -> Vehicle:
        return Car(
            self.id,
            self.max_speed,
            itinerary,
            resistance=self.resistance,
            fault_probability=self.fault_probability,
            max_fault_duration=self.max_fault_duration,
            seed=self.seed,
        )

    def summary(self) -> str:
        return f"New car {self.id}"

    def fill_section(self, sec: IniSection) -> None:
        super().fill_section(sec)
        sec["resistance"] = self.resistance
        sec["fault_probability"] = self.fault_probability
        sec["max_fault_duration"] = self.max_fault_duration
        sec["seed"] = self.seed


@dataclass(frozen=True)
class MakeVehicleFaultyEvent(Event):
    vehicles: tuple[str, ...]
    duration: int

    TAG = "make_vehicle_faulty"

    def execute(self, road_map: RoadMap) -> None:
        # resolve every id first so an unknown one breaks nothing
        targets = [road_map.get_vehicle(v) for v in self.vehicles]
        for v in targets:
            v.make_faulty(self.duration)

    def summary(self) -> str:
        return "Break vehicles [" + ",".join(self.vehicles) + "]"

    def fill_section(self, sec: IniSection) -> None:
        sec["vehicles"] = ",".join(self.vehicles)
        sec["duration"] = self.duration
