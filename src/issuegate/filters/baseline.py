import logging

from ..baseline import Baseline
from ..messages import IN_BASELINE, recompute
from ..models import AnalysisResult
from .base import BaseFilter

logger = logging.getLogger(__name__)


class BaselineFilter(BaseFilter):
    """Drops issues already accepted in a baseline snapshot"""

    def __init__(self, baseline: Baseline):
        self.baseline = baseline

    @property
    def name(self) -> str:
        return "baseline"

    def apply(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        filtered = []
        for result in results:
            if not self.baseline.entries_for(result.analyzer_id):
                filtered.append(result)
                continue
            kept = [issue for issue in result.issues if not self.baseline.contains(result.analyzer_id, issue)]
            if len(kept) != len(result.issues):
                logger.debug(
                    "%s: %d issue(s) already in baseline",
                    result.analyzer_id,
                    len(result.issues) - len(kept),
                )
            filtered.append(recompute(result, kept, IN_BASELINE))
        return filtered
