from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    """Issue severity levels, most severe first"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: str) -> "Severity":
        return cls(str(value).strip().lower())


_SEVERITY_RANK = {
    Severity.CRITICAL: 5,
    Severity.HIGH: 4,
    Severity.MEDIUM: 3,
    Severity.LOW: 2,
    Severity.INFO: 1,
}


class Status(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class Location:
    file: str
    line: int

    @property
    def targetable(self) -> bool:
        """Only locations pointing at a real line can be suppressed by path or line"""
        return self.line >= 1


@dataclass(frozen=True)
class Issue:
    """A single finding reported by an analyzer"""

    message: str
    location: Optional[Location]
    severity: Severity
    recommendation: str = ""

    @property
    def targetable(self) -> bool:
        return self.location is not None and self.location.targetable


@dataclass(frozen=True)
class AnalysisResult:
    """One analyzer's outcome for one run"""

    analyzer_id: str
    status: Status
    message: str
    issues: tuple[Issue, ...] = ()
    execution_time: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def with_issues(
        self,
        issues: tuple[Issue, ...],
        status: Status | None = None,
        message: str | None = None,
    ) -> "AnalysisResult":
        return replace(
            self,
            issues=tuple(issues),
            status=self.status if status is None else status,
            message=self.message if message is None else message,
            metadata=dict(self.metadata),
        )


@dataclass(frozen=True)
class ValidationWarning:
    """Non-blocking problem found while loading rules, baselines or settings"""

    source: str  # 'ignore_errors', 'baseline', 'config'
    message: str
    analyzer_id: str | None = None

    def __str__(self) -> str:
        if self.analyzer_id:
            return f"[{self.source}] {self.analyzer_id}: {self.message}"
        return f"[{self.source}] {self.message}"
