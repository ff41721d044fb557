import math
from dataclasses import dataclass
from typing import Iterable

from .models import AnalysisResult, Status


@dataclass(frozen=True)
class AnalysisReport:
    """Aggregate view over one run's results"""

    results: tuple[AnalysisResult, ...]

    @classmethod
    def of(cls, results: Iterable[AnalysisResult]) -> "AnalysisReport":
        return cls(tuple(results))

    def with_status(self, status: Status) -> list[AnalysisResult]:
        return [result for result in self.results if result.status == status]

    def passed(self) -> list[AnalysisResult]:
        return self.with_status(Status.PASSED)

    def failed(self) -> list[AnalysisResult]:
        return self.with_status(Status.FAILED)

    def warnings(self) -> list[AnalysisResult]:
        return self.with_status(Status.WARNING)

    def skipped(self) -> list[AnalysisResult]:
        return self.with_status(Status.SKIPPED)

    def errors(self) -> list[AnalysisResult]:
        return self.with_status(Status.ERROR)

    def score(self) -> int:
        """Percentage of passed results, rounded half up; 100 for an empty run"""
        total = len(self.results)
        if total == 0:
            return 100
        return math.floor(len(self.passed()) / total * 100 + 0.5)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "passed": len(self.passed()),
            "failed": len(self.failed()),
            "warnings": len(self.warnings()),
            "skipped": len(self.skipped()),
            "errors": len(self.errors()),
            "score": self.score(),
        }
