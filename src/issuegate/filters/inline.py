"""
Inline suppression comments.

Two placements are recognised, on the reported line or on the line above it:

    query(raw_sql)  # @issuegate-ignore sql-injection
    // @issuegate-ignore sql-injection, xss-detection

A bare marker suppresses every analyzer; otherwise only the listed ids.
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ..messages import SUPPRESSED_INLINE, recompute
from ..models import AnalysisResult, Issue
from .base import BaseFilter

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "@issuegate-ignore"


@lru_cache(maxsize=16)
def _marker_regex(marker: str) -> re.Pattern:
    return re.compile(
        re.escape(marker) + r"(?:[ \t]+([\w-]+(?:[ \t]*,[ \t]*[\w-]+)*))?",
        re.IGNORECASE,
    )


class InlineSuppressionFilter(BaseFilter):
    def __init__(self, marker: str = DEFAULT_MARKER, base_path: Optional[Path] = None):
        self.marker = marker
        self.base_path = Path(base_path) if base_path else None
        self._pattern = _marker_regex(marker)
        self._file_cache: dict[str, list[str]] = {}

    @property
    def name(self) -> str:
        return "inline"

    def apply(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        suppressed_message = SUPPRESSED_INLINE.format(marker=self.marker)
        filtered = []
        for result in results:
            kept = [issue for issue in result.issues if not self.is_suppressed(issue, result.analyzer_id)]
            filtered.append(recompute(result, kept, suppressed_message))
        return filtered

    def is_suppressed(self, issue: Issue, analyzer_id: str) -> bool:
        if not issue.targetable:
            return False

        lines = self._lines(issue.location.file)
        line = issue.location.line
        # Same line, then the line directly above (1-based -> 0-based)
        for index in (line - 1, line - 2):
            if 0 <= index < len(lines) and self.line_suppresses(lines[index], analyzer_id):
                return True
        return False

    def line_suppresses(self, text: str, analyzer_id: str) -> bool:
        match = self._pattern.search(text)
        if not match:
            return False
        if match.group(1) is None:
            return True
        ids = [part.strip() for part in match.group(1).split(",")]
        return analyzer_id in ids

    def _lines(self, file: str) -> list[str]:
        path = Path(file)
        if self.base_path is not None and not path.is_absolute():
            path = self.base_path / path
        key = str(path)

        if key not in self._file_cache:
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except (OSError, ValueError) as e:
                # ValueError: paths with embedded NUL bytes
                logger.debug("Cannot read %s for inline suppressions: %s", key, e)
                content = ""
            self._file_cache[key] = content.split("\n") if content else []

        return self._file_cache[key]
