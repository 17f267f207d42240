"""Tests for section → event parsing."""

from __future__ import annotations

import pytest

from trafficsim.builders import (
    default_builders,
    events_to_text,
    parse_event,
    parse_events,
    parse_id_list,
)
from trafficsim.config import SimulatorConfig
from trafficsim.errors import ScenarioMalformedError
from trafficsim.events import (
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
from trafficsim.ini import IniSection, loads


def _section(tag: str, **values: object) -> IniSection:
    sec = IniSection(tag)
    for k, v in values.items():
        sec[k] = v
    return sec


def _parse(tag: str, **values: object):
    return parse_event(_section(tag, **values), default_builders())


class TestJunctions:
    def test_default(self) -> None:
        assert _parse("new_junction", time=0, id="j1") == NewJunctionEvent(0, "j1")

    def test_most_crowded(self) -> None:
        event = _parse("new_junction", time=2, id="j1", type="mc")
        assert event == NewMostCrowdedJunctionEvent(2, "j1")

    def test_time_slice(self) -> None:
        event = _parse(
            "new_junction", time=0, id="j1", type="rr", max_time_slice=5, min_time_slice=2
        )
        assert event == NewTimeSliceJunctionEvent(0, "j1", 5, 2)

    def test_time_slice_defaults_from_config(self) -> None:
        sec = _section("new_junction", time=0, id="j1", type="rr")
        event = parse_event(sec, default_builders(SimulatorConfig(7, 2)))
        assert event == NewTimeSliceJunctionEvent(0, "j1", 7, 2)

    def test_time_slice_initial(self) -> None:
        event = _parse("new_junction", time=0, id="j1", type="rr", time_slice=2)
        assert event == NewTimeSliceJunctionEvent(0, "j1", 10, 1, 2)

    def test_time_slice_initial_above_max(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="time_slice 6 is greater"):
            _parse("new_junction", time=0, id="j", type="rr", max_time_slice=5, time_slice=6)

    def test_time_slice_initial_below_min(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="1 is not a valid time_slice"):
            _parse("new_junction", time=0, id="j", type="rr", min_time_slice=2, time_slice=1)

    def test_time_slice_min_above_max(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="min_time_slice"):
            _parse("new_junction", time=0, id="j", type="rr", max_time_slice=2, min_time_slice=3)

    def test_unknown_type(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="unknown section"):
            _parse("new_junction", time=0, id="j1", type="zz")


class TestRoads:
    FIELDS = dict(time=1, id="r1", src="j1", dest="j2", max_speed=30, length=100)

    def test_default(self) -> None:
        assert _parse("new_road", **self.FIELDS) == NewRoadEvent(1, "r1", "j1", "j2", 30, 100)

    def test_lanes(self) -> None:
        event = _parse("new_road", type="lanes", lanes=3, **self.FIELDS)
        assert event == NewLaneRoadEvent(1, "r1", "j1", "j2", 30, 100, 3)

    def test_dirt(self) -> None:
        event = _parse("new_road", type="dirt", **self.FIELDS)
        assert event == NewDirtRoadEvent(1, "r1", "j1", "j2", 30, 100)

    def test_zero_length(self) -> None:
        fields = {**self.FIELDS, "length": 0}
        with pytest.raises(ScenarioMalformedError, match="length"):
            _parse("new_road", **fields)

    def test_zero_lanes(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="lanes"):
            _parse("new_road", type="lanes", lanes=0, **self.FIELDS)


class TestVehicles:
    def test_plain(self) -> None:
        event = _parse("new_vehicle", time=0, id="v1", max_speed=10, itinerary="j1,j2")
        assert event == NewVehicleEvent(0, "v1", 10, ("j1", "j2"))

    def test_itinerary_commas_and_spaces(self) -> None:
        event = _parse("new_vehicle", time=0, id="v1", max_speed=10, itinerary="j1, j2 j3")
        assert event.itinerary == ("j1", "j2", "j3")

    def test_itinerary_too_short(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="at least two"):
            _parse("new_vehicle", time=0, id="v1", max_speed=10, itinerary="j1")

    def test_unknown_type_is_a_plain_vehicle(self) -> None:
        event = _parse("new_vehicle", time=0, id="v1", max_speed=10, itinerary="a,b", type="van")
        assert type(event) is NewVehicleEvent

    def test_bike(self) -> None:
        event = _parse("new_vehicle", time=0, id="b1", max_speed=5, itinerary="a,b", type="bike")
        assert event == NewBikeEvent(0, "b1", 5, ("a", "b"))

    def test_car(self) -> None:
        event = _parse(
            "new_vehicle",
            time=0,
            id="c1",
            max_speed=20,
            itinerary="a,b",
            type="car",
            resistance=50,
            fault_probability=0.25,
            max_fault_duration=3,
            seed=42,
        )
        assert event == NewCarEvent(0, "c1", 20, ("a", "b"), 50, 0.25, 3, 42)

    def test_car_without_seed(self) -> None:
        event = _parse(
            "new_vehicle", time=0, id="c1", max_speed=20, itinerary="a,b", type="car",
            resistance=50, fault_probability=0.5, max_fault_duration=3,
        )
        assert isinstance(event, NewCarEvent)
        assert event.seed >= 0

    def test_car_probability_out_of_range(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="fault_probability"):
            _parse(
                "new_vehicle", time=0, id="c1", max_speed=20, itinerary="a,b", type="car",
                resistance=50, fault_probability=1.5, max_fault_duration=3, seed=1,
            )


class TestFaulty:
    def test_parse(self) -> None:
        event = _parse("make_vehicle_faulty", time=4, vehicles="v1, v2", duration=2)
        assert event == MakeVehicleFaultyEvent(4, ("v1", "v2"), 2)

    def test_zero_duration_rejected(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="duration"):
            _parse("make_vehicle_faulty", time=4, vehicles="v1", duration=0)


class TestFieldErrors:
    def test_invalid_id_names_key_and_value(self) -> None:
        with pytest.raises(ScenarioMalformedError) as exc:
            _parse("new_junction", time=0, id="j-1")
        assert "'j-1'" in str(exc.value)
        assert "id" in str(exc.value)

    def test_missing_time(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="no time provided"):
            _parse("new_junction", id="j1")

    def test_negative_time(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="-1 is not a valid time"):
            _parse("new_junction", time=-1, id="j1")

    def test_non_integer(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="'ten' is not a valid max_speed"):
            _parse("new_vehicle", time=0, id="v1", max_speed="ten", itinerary="a,b")

    def test_bad_id_in_list(self) -> None:
        with pytest.raises(ScenarioMalformedError, match="'v.2' is not a valid id"):
            parse_id_list(_section("make_vehicle_faulty", vehicles="v1,v.2"), "vehicles")

    def test_unknown_tag(self) -> None:
        with pytest.raises(ScenarioMalformedError, match=r"unknown section \[new_bridge\]"):
            _parse("new_bridge", time=0, id="b1")


def test_parse_events_keeps_file_order() -> None:
    text = """\
[new_junction]
time = 3
id = late

[new_junction]
time = 0
id = early
"""
    events = parse_events(text)
    assert [e.id for e in events] == ["late", "early"]


def test_events_to_text_parses_back() -> None:
    events = [
        NewJunctionEvent(0, "j1"),
        NewMostCrowdedJunctionEvent(0, "j2"),
        NewTimeSliceJunctionEvent(0, "j3", 4, 1),
        NewTimeSliceJunctionEvent(0, "j4", 4, 1, 2),
        NewLaneRoadEvent(0, "r1", "j1", "j2", 10, 50, 2),
        NewCarEvent(1, "c1", 20, ("j1", "j2"), 30, 0.5, 2, 7),
        MakeVehicleFaultyEvent(2, ("c1",), 3),
    ]
    text = events_to_text(events)
    assert [s.tag for s in loads(text)][:2] == ["new_junction", "new_junction"]
    assert parse_events(text) == events
