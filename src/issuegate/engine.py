import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from .baseline import Baseline
from .filters import BaseFilter, BaselineFilter, ConfigRuleFilter, InlineSuppressionFilter
from .filters.inline import DEFAULT_MARKER
from .models import AnalysisResult, ValidationWarning
from .policy import FailOn, FailurePolicy, Verdict, evaluate
from .report import AnalysisReport
from .validation import load_ignore_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Everything the pipeline needs, assembled once at the entry point"""

    ignore_errors: Any = None
    dont_report: tuple[str, ...] = ()
    fail_on: FailOn = FailOn.CRITICAL
    fail_threshold: Optional[int] = None
    use_baseline: bool = False
    baseline: Optional[Baseline] = None
    baseline_warnings: tuple[ValidationWarning, ...] = ()
    marker: str = DEFAULT_MARKER
    base_path: Optional[Path] = None

    def denylist(self) -> frozenset[str]:
        names = list(self.dont_report)
        if self.use_baseline and self.baseline is not None:
            names.extend(self.baseline.dont_report)
        return frozenset(names)

    def failure_policy(self) -> FailurePolicy:
        return FailurePolicy(
            fail_on=self.fail_on,
            fail_threshold=self.fail_threshold,
            denylist=self.denylist(),
        )


@dataclass(frozen=True)
class PipelineOutcome:
    results: list[AnalysisResult]
    verdict: Verdict
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def report(self) -> AnalysisReport:
        return AnalysisReport.of(self.results)


class FilterPipeline:
    """Runs the suppression layers in order, then decides the verdict"""

    def __init__(self, config: PipelineConfig):
        self.config = config

    def build_filters(
        self, results: list[AnalysisResult], warnings: list[ValidationWarning]
    ) -> list[BaseFilter]:
        known_ids = {result.analyzer_id for result in results}
        rule_sets, rule_warnings = load_ignore_rules(self.config.ignore_errors, known_ids)
        warnings.extend(rule_warnings)

        filters: list[BaseFilter] = [
            ConfigRuleFilter(rule_sets),
            InlineSuppressionFilter(self.config.marker, self.config.base_path),
        ]

        if self.config.use_baseline:
            warnings.extend(self.config.baseline_warnings)
            if self.config.baseline is not None:
                filters.append(BaselineFilter(self.config.baseline))
            elif not self.config.baseline_warnings:
                warnings.append(ValidationWarning("baseline", "Baseline mode is on but no baseline was loaded"))

        return filters

    def run(self, results: Iterable[AnalysisResult]) -> PipelineOutcome:
        current = list(results)
        warnings: list[ValidationWarning] = []

        for stage in self.build_filters(current, warnings):
            current = stage.apply(current)
            logger.debug("After %s filter: %d issue(s) remain", stage.name, sum(len(r.issues) for r in current))

        verdict = evaluate(current, self.config.failure_policy())
        logger.info("Verdict: %s", "failure" if verdict.failed else "success")
        return PipelineOutcome(results=current, verdict=verdict, warnings=warnings)
