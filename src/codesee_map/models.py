from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Step(str, Enum):
    """Named selection of which part of the pipeline to run."""

    MAP = "map"
    MAP_UPLOAD = "mapUpload"
    INSIGHTS = "insights"
    LEGACY = "legacy"


class InsightsDecision(str, Enum):
    NEEDED = "needed"
    NOT_NEEDED = "not_needed"
    DISABLED = "Insights Disabled"


@dataclass(frozen=True)
class CommandResult:
    args: list[str]
    returncode: int
    timed_out: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out
