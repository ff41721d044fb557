"""
Failure policy: decide whether a filtered run should fail the build.

The decision runs in a fixed order:

1. ``fail_on = never`` always succeeds.
2. A configured ``fail_threshold`` fails the run when the score is below it,
   regardless of the denylist.
3. Failed results (minus denylisted analyzers) fail the run when any issue is at
   or above the severity implied by ``fail_on``.
4. For ``low`` and ``medium`` warning results are inspected as well: ``low``
   fails on any warning issue, ``medium`` only on a medium-severity one.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .models import AnalysisResult, Issue, Severity
from .report import AnalysisReport

logger = logging.getLogger(__name__)


class FailOn(str, Enum):
    NEVER = "never"
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def threshold(self) -> Optional[Severity]:
        if self is FailOn.NEVER:
            return None
        if self is FailOn.LOW:
            # 'low' fails on anything, informational issues included
            return Severity.INFO
        return Severity(self.value)


@dataclass(frozen=True)
class FailurePolicy:
    fail_on: FailOn = FailOn.CRITICAL
    fail_threshold: Optional[int] = None
    denylist: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Verdict:
    failed: bool
    reasons: tuple[str, ...] = ()

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


def evaluate(results: Iterable[AnalysisResult], policy: FailurePolicy) -> Verdict:
    """Compute the pass/fail verdict for a fully filtered result collection."""
    if policy.fail_on is FailOn.NEVER:
        return Verdict(failed=False)

    report = AnalysisReport.of(results)

    if policy.fail_threshold:
        score = report.score()
        if score < policy.fail_threshold:
            reason = f"Score {score} is below the fail threshold of {policy.fail_threshold}"
            logger.debug("%s", reason)
            return Verdict(failed=True, reasons=(reason,))

    threshold = policy.fail_on.threshold
    reasons = []

    for result in _considered(report.failed(), policy.denylist):
        worst = _worst(result.issues)
        if worst is not None and worst.rank >= threshold.rank:
            reasons.append(f"{result.analyzer_id} failed with a {worst.value} severity issue")

    if policy.fail_on in (FailOn.LOW, FailOn.MEDIUM):
        for result in _considered(report.warnings(), policy.denylist):
            if policy.fail_on is FailOn.LOW and result.issues:
                reasons.append(f"{result.analyzer_id} reported warnings")
            elif any(issue.severity is Severity.MEDIUM for issue in result.issues):
                reasons.append(f"{result.analyzer_id} reported a medium severity warning")

    for reason in reasons:
        logger.debug("%s", reason)
    return Verdict(failed=bool(reasons), reasons=tuple(reasons))


def _considered(results: list[AnalysisResult], denylist: frozenset[str]) -> list[AnalysisResult]:
    return [result for result in results if result.analyzer_id not in denylist]


def _worst(issues: Iterable[Issue]) -> Optional[Severity]:
    return max((issue.severity for issue in issues), key=lambda s: s.rank, default=None)
