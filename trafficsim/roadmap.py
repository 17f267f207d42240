"""The world: every junction, road and vehicle, in creation order."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import ScenarioInvalidError
from .junctions import Junction
from .roads import Road
from .vehicles import Vehicle


class RoadMap:
    """Insertion-ordered registries of the simulated objects.

    Creation order is the order objects advance in and the order their
    reports are written, so it must never depend on anything but the order
    events were executed in.
    """

    def __init__(self) -> None:
        self._junctions: dict[str, Junction] = {}
        self._roads: dict[str, Road] = {}
        self._vehicles: dict[str, Vehicle] = {}

    @property
    def junctions(self) -> list[Junction]:
        return list(self._junctions.values())

    @property
    def roads(self) -> list[Road]:
        return list(self._roads.values())

    @property
    def vehicles(self) -> list[Vehicle]:
        return list(self._vehicles.values())

    def get_junction(self, id: str) -> Junction:
        try:
            return self._junctions[id]
        except KeyError:
            raise ScenarioInvalidError(f"unknown junction '{id}'") from None

    def get_road(self, id: str) -> Road:
        try:
            return self._roads[id]
        except KeyError:
            raise ScenarioInvalidError(f"unknown road '{id}'") from None

    def get_vehicle(self, id: str) -> Vehicle:
        try:
            return self._vehicles[id]
        except KeyError:
            raise ScenarioInvalidError(f"unknown vehicle '{id}'") from None

    def get_itinerary(self, ids: Sequence[str]) -> list[Junction]:
        return [self.get_junction(i) for i in ids]

    def has_junction(self, id: str) -> bool:
        return id in self._junctions

    def has_road(self, id: str) -> bool:
        return id in self._roads

    def has_vehicle(self, id: str) -> bool:
        return id in self._vehicles

    def add_junction(self, junction: Junction) -> None:
        if junction.id in self._junctions:
            raise ScenarioInvalidError(f"junction '{junction.id}' already exists")
        self._junctions[junction.id] = junction

    def add_road(self, road: Road) -> None:
        if road.id in self._roads:
            raise ScenarioInvalidError(f"road '{road.id}' already exists")
        road.source.add_outgoing_road(road, road.destination)
        road.destination.add_incoming_road(road)
        self._roads[road.id] = road

    def add_vehicle(self, vehicle: Vehicle) -> None:
        if vehicle.id in self._vehicles:
            raise ScenarioInvalidError(f"vehicle '{vehicle.id}' already exists")
        vehicle.depart()
        self._vehicles[vehicle.id] = vehicle

    def __len__(self) -> int:
        return len(self._junctions) + len(self._roads) + len(self._vehicles)
