"""Common result model shared by every report input shape."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import PurePosixPath


PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"
ERROR = "error"

FAILURE_STATUSES = {FAILED, ERROR}

_STATUS_ALIASES = {
    "pass": PASSED,
    "passed": PASSED,
    "fail": FAILED,
    "failed": FAILED,
    "skip": SKIPPED,
    "skipped": SKIPPED,
    "pending": SKIPPED,
    "todo": SKIPPED,
    "disabled": SKIPPED,
    "error": ERROR,
    "broken": ERROR,
}


def normalize_status(raw: object) -> str:
    s = str(raw or "").strip().lower()
    return _STATUS_ALIASES.get(s, s or SKIPPED)


@dataclass(frozen=True)
class TestRecord:
    __test__ = False  # keep pytest from collecting this class

    name: str
    full_name: str
    status: str
    duration_ms: float = 0.0
    file: str = "Unknown file"
    ancestors: tuple[str, ...] = ()
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status in FAILURE_STATUSES

    @property
    def file_name(self) -> str:
        """Basename of the originating file, with either separator style stripped."""
        return PurePosixPath(self.file.replace("\\", "/")).name or self.file

    @property
    def rounded_duration(self) -> int:
        # Half-up rounding; bankers' rounding from round() would turn 0.5 into 0.
        d = float(self.duration_ms or 0.0)
        if not math.isfinite(d) or d < 0:
            return 0
        return int(math.floor(d + 0.5))

    def category(self, depth: int = 2, separator: str = " > ") -> str:
        return separator.join(self.ancestors[:depth])


@dataclass(frozen=True)
class RunSummary:
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    records: tuple[TestRecord, ...] = field(default_factory=tuple)

    @property
    def totals_consistent(self) -> bool:
        return self.total == self.passed + self.failed + self.skipped
