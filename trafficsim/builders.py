"""Turning scenario sections into events.

A builder recognises one kind of section by its tag and a selector over its
keys (usually ``type``), then validates the fields. The registry tries its
builders in order and takes the first one that accepts the section, so more
specific builders (``type = car``) must come before catch-alls
(plain ``new_vehicle``).

Every field error raises ScenarioMalformedError naming the key and the
offending value.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .config import SimulatorConfig
from .errors import ScenarioMalformedError
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
from .ini import IniSection, dumps, iter_sections

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"[A-Za-z0-9_]+")
_LIST_SPLIT_RE = re.compile(r"[,\s]+")


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def _require(sec: IniSection, key: str) -> str:
    value = sec.get(key)
    if value is None or value == "":
        raise ScenarioMalformedError(f"[{sec.tag}]: no {key} provided")
    return value


def parse_id(sec: IniSection, key: str) -> str:
    value = _require(sec, key)
    if not _ID_RE.fullmatch(value):
        raise ScenarioMalformedError(f"[{sec.tag}]: {value!r} is not a valid {key}")
    return value


def parse_int(
    sec: IniSection, key: str, min_value: int, default: int | None = None
) -> int:
    raw = sec.get(key)
    if raw is None or raw == "":
        if default is not None:
            return default
        raise ScenarioMalformedError(f"[{sec.tag}]: no {key} provided")
    try:
        value = int(raw)
    except ValueError:
        raise ScenarioMalformedError(
            f"[{sec.tag}]: {raw!r} is not a valid {key}, expected an integer"
        ) from None
    if value < min_value:
        raise ScenarioMalformedError(
            f"[{sec.tag}]: {value} is not a valid {key}, it must be >= {min_value}"
        )
    return value


def parse_double(sec: IniSection, key: str, min_value: float, max_value: float) -> float:
    raw = _require(sec, key)
    try:
        value = float(raw)
    except ValueError:
        raise ScenarioMalformedError(
            f"[{sec.tag}]: {raw!r} is not a valid {key}, expected a number"
        ) from None
    if not min_value <= value <= max_value:
        raise ScenarioMalformedError(
            f"[{sec.tag}]: {value} is not a valid {key}, "
            f"it must be in [{min_value},{max_value}]"
        )
    return value


def parse_id_list(sec: IniSection, key: str) -> tuple[str, ...]:
    raw = _require(sec, key)
    ids = tuple(i for i in _LIST_SPLIT_RE.split(raw) if i)
    for i in ids:
        if not _ID_RE.fullmatch(i):
            raise ScenarioMalformedError(
                f"[{sec.tag}]: {i!r} is not a valid id in the list {key}"
            )
    return ids


def parse_seed(sec: IniSection, key: str) -> int:
    """A non-negative integer, or the current time in milliseconds if absent."""
    if sec.get(key) in (None, ""):
        return int(time.time() * 1000)
    return parse_int(sec, key, 0)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _type_is(value: str | None) -> Callable[[IniSection], bool]:
    return lambda sec: sec.get("type") == value


def _always(sec: IniSection) -> bool:
    return True


@dataclass(frozen=True)
class Builder:
    """Recognises sections tagged ``tag`` for which ``selector`` holds."""

    name: str
    tag: str
    selector: Callable[[IniSection], bool]
    parse: Callable[[IniSection], Event]

    def build(self, sec: IniSection) -> Event | None:
        if sec.tag != self.tag or not self.selector(sec):
            return None
        return self.parse(sec)


def _road_fields(sec: IniSection) -> dict[str, object]:
    return dict(
        time=parse_int(sec, "time", 0),
        id=parse_id(sec, "id"),
        src=parse_id(sec, "src"),
        dest=parse_id(sec, "dest"),
        max_speed=parse_int(sec, "max_speed", 1),
        length=parse_int(sec, "length", 1),
    )


def _vehicle_fields(sec: IniSection) -> dict[str, object]:
    itinerary = parse_id_list(sec, "itinerary")
    if len(itinerary) < 2:
        raise ScenarioMalformedError(
            f"[{sec.tag}]: itinerary {sec.get('itinerary')!r} needs at least two junctions"
        )
    return dict(
        time=parse_int(sec, "time", 0),
        id=parse_id(sec, "id"),
        max_speed=parse_int(sec, "max_speed", 1),
        itinerary=itinerary,
    )


def _time_slice_junction(config: SimulatorConfig) -> Callable[[IniSection], Event]:
    def parse(sec: IniSection) -> Event:
        max_slice = parse_int(sec, "max_time_slice", 1, config.default_time_slice_max)
        min_slice = parse_int(sec, "min_time_slice", 1, config.default_time_slice_min)
        if min_slice > max_slice:
            raise ScenarioMalformedError(
                f"[{sec.tag}]: min_time_slice {min_slice} is greater than "
                f"max_time_slice {max_slice}"
            )
        initial = None
        if sec.get("time_slice") not in (None, ""):
            initial = parse_int(sec, "time_slice", min_slice)
            if initial > max_slice:
                raise ScenarioMalformedError(
                    f"[{sec.tag}]: time_slice {initial} is greater than "
                    f"max_time_slice {max_slice}"
                )
        return NewTimeSliceJunctionEvent(
            time=parse_int(sec, "time", 0),
            id=parse_id(sec, "id"),
            max_time_slice=max_slice,
            min_time_slice=min_slice,
            time_slice=initial,
        )

    return parse


def default_builders(config: SimulatorConfig | None = None) -> tuple[Builder, ...]:
    """Every event kind the simulator understands, in matching order."""
    config = config or SimulatorConfig()
    return (
        Builder(
            "junction",
            "new_junction",
            _type_is(None),
            lambda sec: NewJunctionEvent(parse_int(sec, "time", 0), parse_id(sec, "id")),
        ),
        Builder(
            "most_crowded_junction",
            "new_junction",
            _type_is("mc"),
            lambda sec: NewMostCrowdedJunctionEvent(
                parse_int(sec, "time", 0), parse_id(sec, "id")
            ),
        ),
        Builder(
            "time_slice_junction",
            "new_junction",
            _type_is("rr"),
            _time_slice_junction(config),
        ),
        Builder(
            "road",
            "new_road",
            _type_is(None),
            lambda sec: NewRoadEvent(**_road_fields(sec)),  # type: ignore[arg-type]
        ),
        Builder(
            "lane_road",
            "new_road",
            _type_is("lanes"),
            lambda sec: NewLaneRoadEvent(
                **_road_fields(sec), lanes=parse_int(sec, "lanes", 1)  # type: ignore[arg-type]
            ),
        ),
        Builder(
            "dirt_road",
            "new_road",
            _type_is("dirt"),
            lambda sec: NewDirtRoadEvent(**_road_fields(sec)),  # type: ignore[arg-type]
        ),
        Builder(
            "bike",
            "new_vehicle",
            _type_is("bike"),
            lambda sec: NewBikeEvent(**_vehicle_fields(sec)),  # type: ignore[arg-type]
        ),
        Builder(
            "car",
            "new_vehicle",
            _type_is("car"),
            lambda sec: NewCarEvent(
                **_vehicle_fields(sec),  # type: ignore[arg-type]
                resistance=parse_int(sec, "resistance", 0),
                fault_probability=parse_double(sec, "fault_probability", 0.0, 1.0),
                max_fault_duration=parse_int(sec, "max_fault_duration", 1),
                seed=parse_seed(sec, "seed"),
            ),
        ),
        Builder(
            "vehicle",
            "new_vehicle",
            _always,
            lambda sec: NewVehicleEvent(**_vehicle_fields(sec)),  # type: ignore[arg-type]
        ),
        Builder(
            "faulty",
            "make_vehicle_faulty",
            _always,
            lambda sec: MakeVehicleFaultyEvent(
                time=parse_int(sec, "time", 0),
                vehicles=parse_id_list(sec, "vehicles"),
                duration=parse_int(sec, "duration", 1),
            ),
        ),
    )


def parse_event(sec: IniSection, builders: Sequence[Builder]) -> Event:
    for b in builders:
        event = b.build(sec)
        if event is not None:
            logger.debug("section [%s] parsed by %s builder", sec.tag, b.name)
            return event
    raise ScenarioMalformedError(f"unknown section [{sec.tag}]")


def parse_events(
    text: str, builders: Sequence[Builder] | None = None
) -> list[Event]:
    """Parse a whole scenario; raises ScenarioMalformedError on the first bad section."""
    builders = builders if builders is not None else default_builders()
    return [parse_event(sec, builders) for sec in iter_sections(text)]


def events_to_text(events: Iterable[Event]) -> str:
    """Scenario text for ``events``, loadable again with ``parse_events``."""
    return dumps(e.to_section() for e in events)
