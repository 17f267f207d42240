"""Common base of junctions, roads and vehicles."""

from __future__ import annotations

from typing import ClassVar

from .ini import IniSection


class SimulatedObject:
    """Something that lives in the road map and reports its state every tick.

    Subclasses set ``REPORT_TAG`` and fill in their own report keys after the
    shared ``id`` and ``time`` keys.
    """

    REPORT_TAG: ClassVar[str] = ""
    REPORT_TYPE: ClassVar[str | None] = None

    def __init__(self, id: str):
        self.id = id

    def generate_report(self, time: int) -> IniSection:
        sec = IniSection(self.REPORT_TAG)
        sec["id"] = self.id
        sec["time"] = time
        if self.REPORT_TYPE is not None:
            sec["type"] = self.REPORT_TYPE
        self.fill_report_details(sec)
        return sec

    def fill_report_details(self, sec: IniSection) -> None:
        raise NotImplementedError

    def describe(self) -> dict[str, str]:
        return {"ID": self.id}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"
