"""Sectioned key/value text, the format of both scenarios and reports.

A document is a sequence of sections:

    [new_road]
    time = 0
    id = r1
    src = j1

A section starts with ``[tag]`` on its own line and holds ``key = value``
lines until a blank line, the next ``[tag]`` line, or end of input. Keys are
unique within a section and keep their insertion order. Lines starting with
``#`` or ``;`` are comments.

Round-trip: dumps(loads(text)) == text for any text dumps() produced.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .errors import ScenarioMalformedError

_TAG_RE = re.compile(r"^\[([A-Za-z0-9_]+)\]$")
_COMMENT_PREFIXES = ("#", ";")


@dataclass
class IniSection:
    """A tagged, ordered set of key/value pairs."""

    tag: str
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.values.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __setitem__(self, key: str, value: object) -> None:
        self.values[key] = str(value)

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def keys(self) -> list[str]:
        return list(self.values)

    def dumps(self) -> str:
        lines = [f"[{self.tag}]"]
        lines.extend(f"{k} = {v}".rstrip() for k, v in self.values.items())
        return "\n".join(lines) + "\n"


def iter_sections(text: str) -> Iterator[IniSection]:
    """Yield sections lazily; raises ScenarioMalformedError on bad lines."""
    current: IniSection | None = None
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            if current is not None:
                yield current
                current = None
            continue
        if line.startswith(_COMMENT_PREFIXES):
            continue

        m = _TAG_RE.match(line)
        if m:
            if current is not None:
                yield current
            current = IniSection(m.group(1))
            continue
        if line.startswith("["):
            raise ScenarioMalformedError(f"invalid section header {line!r}", lineno)

        if current is None:
            raise ScenarioMalformedError(f"{line!r} is outside any section", lineno)
        if "=" not in line:
            raise ScenarioMalformedError(f"expected 'key = value', got {line!r}", lineno)
        key, value = (part.strip() for part in line.split("=", 1))
        if not key:
            raise ScenarioMalformedError(f"missing key in {line!r}", lineno)
        if key in current:
            raise ScenarioMalformedError(
                f"duplicate key '{key}' in section [{current.tag}]", lineno
            )
        current[key] = value

    if current is not None:
        yield current


def loads(text: str) -> list[IniSection]:
    return list(iter_sections(text))


def dumps(sections: Iterable[IniSection]) -> str:
    return "".join(s.dumps() + "\n" for s in sections)
