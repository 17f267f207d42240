"""trafficsim: a discrete-time traffic simulator driven by scenario events."""

from .builders import (
    Builder,
    default_builders,
    events_to_text,
    parse_double,
    parse_event,
    parse_events,
    parse_id,
    parse_id_list,
    parse_int,
)
from .config import SimulatorConfig
from .errors import (
    Err,
    Ok,
    ReportWriteError,
    Result,
    ScenarioInvalidError,
    ScenarioMalformedError,
    SimulatorError,
    TickError,
)
from .events import (
    Event,
    MakeVehicleFaultyEvent,
    NewBikeEvent,
    NewCarEvent,
    NewDirtRoadEvent,
    NewJunctionEvent,
    NewLaneRoadEvent,
    NewMostCrowdedJunctionEvent,
    NewRoadEvent,
    NewTimeSliceJunctionEvent,
    NewVehicleEvent,
)
from .ini import IniSection, dumps, loads
from .junctions import (
    IncomingRoad,
    Junction,
    MostCrowdedJunction,
    TimeSliceIncomingRoad,
    TimeSliceJunction,
)
from .listener import EventType, SimulatorListener, UpdateEvent
from .multimap import MultiTreeMap
from .roadmap import RoadMap
from .roads import DirtRoad, LaneRoad, Road
from .simulator import TrafficSimulator
from .vehicles import Bike, Car, Vehicle

__all__ = [
    # Codec
    "IniSection", "dumps", "loads",
    # Schedule
    "MultiTreeMap",
    # Model
    "Junction", "MostCrowdedJunction", "TimeSliceJunction",
    "IncomingRoad", "TimeSliceIncomingRoad",
    "Road", "LaneRoad", "DirtRoad",
    "Vehicle", "Bike", "Car",
    "RoadMap",
    # Events
    "Event", "NewJunctionEvent", "NewMostCrowdedJunctionEvent",
    "NewTimeSliceJunctionEvent", "NewRoadEvent", "NewLaneRoadEvent",
    "NewDirtRoadEvent", "NewVehicleEvent", "NewBikeEvent", "NewCarEvent",
    "MakeVehicleFaultyEvent",
    # Builders
    "Builder", "default_builders", "parse_event", "parse_events",
    "events_to_text", "parse_id", "parse_int", "parse_double", "parse_id_list",
    # Kernel
    "TrafficSimulator", "SimulatorConfig",
    # Listeners
    "EventType", "SimulatorListener", "UpdateEvent",
    # Errors
    "SimulatorError", "ScenarioMalformedError", "ScenarioInvalidError",
    "ReportWriteError", "TickError",
    # Result
    "Ok", "Err", "Result",
]
