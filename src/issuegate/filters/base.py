from abc import ABC, abstractmethod

from ..models import AnalysisResult


class BaseFilter(ABC):
    """Abstract base class for issue filtering stages."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stage identifier used in logs (e.g. 'config', 'inline', 'baseline')."""
        pass

    @abstractmethod
    def apply(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        """Return a new collection; results that lose issues are replaced, never mutated."""
        pass
