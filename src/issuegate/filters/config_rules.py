import logging

from ..matching import RuleSet
from ..messages import IGNORED_VIA_CONFIG, recompute
from ..models import AnalysisResult
from .base import BaseFilter

logger = logging.getLogger(__name__)


class ConfigRuleFilter(BaseFilter):
    """Drops issues matching the project's ignore_errors rules"""

    def __init__(self, rule_sets: dict[str, RuleSet]):
        self.rule_sets = rule_sets

    @property
    def name(self) -> str:
        return "config"

    def apply(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        return [self._filter_result(result) for result in results]

    def _filter_result(self, result: AnalysisResult) -> AnalysisResult:
        rules = self.rule_sets.get(result.analyzer_id)
        if not rules:
            return result

        kept = [issue for issue in result.issues if not rules.matches(issue)]
        removed = len(result.issues) - len(kept)
        if removed:
            logger.debug("%s: ignored %d issue(s) via configuration", result.analyzer_id, removed)

        return recompute(result, kept, IGNORED_VIA_CONFIG)
