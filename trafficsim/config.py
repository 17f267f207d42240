"""Simulator configuration knobs.

Only the time-slice defaults are configurable. They apply to ``[new_junction]
type = rr`` sections that leave ``max_time_slice`` / ``min_time_slice`` out.
The kernel never reads the environment; the command line builds a config
with ``SimulatorConfig.from_env()`` and hands it to the builders.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .errors import Err, Ok, Result

ENV_TIME_SLICE_MAX = "TRAFFICSIM_TIME_SLICE_MAX"
ENV_TIME_SLICE_MIN = "TRAFFICSIM_TIME_SLICE_MIN"


@dataclass(frozen=True)
class SimulatorConfig:
    default_time_slice_max: int = 10
    default_time_slice_min: int = 1

    def validate(self) -> Result[SimulatorConfig, ValueError]:
        if self.default_time_slice_min < 1:
            return Err(ValueError("default_time_slice_min must be >= 1"))
        if self.default_time_slice_max < self.default_time_slice_min:
            return Err(
                ValueError("default_time_slice_max must be >= default_time_slice_min")
            )
        return Ok(self)

    @classmethod
    def from_env(cls) -> Result[SimulatorConfig, ValueError]:
        """Read the knobs from the environment (and a ``.env`` file, if any)."""
        load_dotenv()
        defaults = cls()
        values: dict[str, int] = {}
        for field_name, var, default in (
            ("default_time_slice_max", ENV_TIME_SLICE_MAX, defaults.default_time_slice_max),
            ("default_time_slice_min", ENV_TIME_SLICE_MIN, defaults.default_time_slice_min),
        ):
            raw = os.getenv(var)
            match raw:
                case None:
                    values[field_name] = default
                case str(s) if s.strip().lstrip("-").isdigit():
                    values[field_name] = int(s.strip())
                case _:
                    return Err(ValueError(f"{var} must be an integer, got {raw!r}"))
        return cls(**values).validate()
