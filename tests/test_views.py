from __future__ import annotations

import pytest

from trafficsim.events import NewJunctionEvent
from trafficsim.listener import SimulatorListener, UpdateEvent
from trafficsim.simulator import TrafficSimulator
from trafficsim.views import (
    EVENT_COLUMNS,
    JUNCTION_COLUMNS,
    VEHICLE_COLUMNS,
    Table,
    render_tables,
    rows,
    tables,
)

SCENARIO = """\
[new_junction]
time = 0
id = j1

[new_junction]
time = 0
id = j2

[new_road]
time = 0
id = r1
src = j1
dest = j2
max_speed = 10
length = 50

[new_vehicle]
time = 0
id = v1
max_speed = 10
itinerary = j1,j2

[make_vehicle_faulty]
time = 5
vehicles = v1
duration = 2
"""


class Last(SimulatorListener):
    def __init__(self) -> None:
        self.update: UpdateEvent | None = None

    def advanced(self, update: UpdateEvent) -> None:
        self.update = update


class TestTables:
    @pytest.fixture(autouse=True)
    def setup(self) -> None:
        sim = TrafficSimulator()
        sim.load_events(SCENARIO)
        self.last = Last()
        sim.add_listener(self.last)
        sim.run(2)
        assert self.last.update is not None
        self.update = self.last.update

    def test_four_tables(self) -> None:
        assert [t.title for t in tables(self.update)] == [
            "Events",
            "Vehicles",
            "Roads",
            "Junctions",
        ]

    def test_event_rows_only_pending(self) -> None:
        events = tables(self.update)[0]
        assert events.rows == (("0", "5", "Break vehicles [v1]"),)

    def test_vehicle_row(self) -> None:
        vehicles = tables(self.update)[1]
        assert vehicles.rows == (("v1", "r1", "20", "10", "20", "0", "[j1,j2]"),)

    def test_junction_rows(self) -> None:
        junctions = tables(self.update)[3]
        assert junctions.rows == (("j1", "[]", "[]"), ("j2", "[(r1,green,[])]", "[]"))

    def test_render(self) -> None:
        text = render_tables(self.update)
        assert text.startswith("Simulation state at tick 2")
        assert "== Vehicles (1) ==" in text
        assert "== Events (1) ==" in text
        assert "Break vehicles [v1]" in text
        header = next(line for line in text.splitlines() if line.startswith("ID | Road"))
        assert header.split(" | ")[0] == "ID"


def test_rows_number_objects() -> None:
    events = [NewJunctionEvent(0, "a"), NewJunctionEvent(1, "b")]
    assert rows(events, EVENT_COLUMNS) == (
        ("0", "0", "New junction a"),
        ("1", "1", "New junction b"),
    )


def test_missing_column_is_blank() -> None:
    assert rows([NewJunctionEvent(0, "a")], ("Time", "Nope")) == (("0", ""),)


def test_widths_fit_longest_cell() -> None:
    table = Table("T", ("ID", "Green", "Red"), (("junction7", "[]", "[(r,red,[])]"),))
    assert table.widths == [9, 5, 12]
    assert len(VEHICLE_COLUMNS) == 7
    assert JUNCTION_COLUMNS == ("ID", "Green", "Red")
