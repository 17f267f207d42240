"""Table view model for user interfaces.

Each simulated object and event describes itself as a ``{column: text}``
mapping; this module fixes the column sets, builds rows from a snapshot and
renders the four tables (events, vehicles, roads, junctions) as plain text
with Jinja2.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import jinja2

from .events import Event
from .listener import UpdateEvent
from .simobject import SimulatedObject

EVENT_COLUMNS = ("#", "Time", "Type")
VEHICLE_COLUMNS = ("ID", "Road", "Location", "Speed", "Km", "Faulty units", "Itinerary")
ROAD_COLUMNS = ("ID", "Source", "Target", "Length", "Max Speed", "Vehicles")
JUNCTION_COLUMNS = ("ID", "Green", "Red")

_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
_ENV = jinja2.Environment(
    loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class Table:
    title: str
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    @property
    def widths(self) -> list[int]:
        return [
            max([len(c)] + [len(row[i]) for row in self.rows])
            for i, c in enumerate(self.columns)
        ]


def rows(
    objects: Iterable[SimulatedObject | Event], columns: Sequence[str]
) -> tuple[tuple[str, ...], ...]:
    """One row per object; ``#`` is filled with the object's position."""
    out = []
    for i, obj in enumerate(objects):
        described = obj.describe()
        described.setdefault("#", str(i))
        out.append(tuple(described.get(c, "") for c in columns))
    return tuple(out)


def tables(update: UpdateEvent) -> list[Table]:
    rm = update.road_map
    return [
        Table("Events", EVENT_COLUMNS, rows(update.pending_events, EVENT_COLUMNS)),
        Table("Vehicles", VEHICLE_COLUMNS, rows(rm.vehicles, VEHICLE_COLUMNS)),
        Table("Roads", ROAD_COLUMNS, rows(rm.roads, ROAD_COLUMNS)),
        Table("Junctions", JUNCTION_COLUMNS, rows(rm.junctions, JUNCTION_COLUMNS)),
    ]


def render(template_name: str, **kwargs: Any) -> str:
    return _ENV.get_template(template_name).render(**kwargs)


def render_tables(update: UpdateEvent) -> str:
    return render("tables.txt.j2", tick=update.current_tick, tables=tables(update))
