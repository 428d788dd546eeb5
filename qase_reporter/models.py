# qase_reporter/models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Union


class ResultStatus(str, Enum):
    # Values are the Qase result vocabulary
    PASSED = "passed"
    FAILED = "failed"


class SchemaVersion(Enum):
    """Robot Framework output.xml timestamp convention."""

    LEGACY = 6  # starttime / endtime
    CURRENT = 7  # start / elapsed


@dataclass(frozen=True)
class NormalizedTestResult:
    case_id: int
    status: ResultStatus
    start_time: datetime
    duration_ms: int
    package: str = ""

    def as_dict(self) -> Dict[str, Union[int, str]]:
        return {
            "case_id": self.case_id,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "duration_ms": self.duration_ms,
            "package": self.package,
        }
