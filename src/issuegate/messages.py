"""Recompute a result's status and summary message after issues were filtered out"""

import re

from .models import AnalysisResult, Issue, Status

IGNORED_VIA_CONFIG = "All issues are ignored via configuration"
SUPPRESSED_INLINE = "All issues are suppressed via {marker}"
IN_BASELINE = "All issues are in baseline"

_SINGULAR = {
    "issues": "issue",
    "errors": "error",
    "warnings": "warning",
    "problems": "problem",
    "vulnerabilities": "vulnerability",
}
_PLURAL_RE = re.compile(r"\b(" + "|".join(_SINGULAR) + r")\b")


def adjust_message(
    message: str, original_count: int, new_count: int, suppressed_message: str
) -> str:
    """Rewrite ``message`` so the issue count it mentions stays accurate.

    >>> adjust_message("Found 2 issues", 2, 1, IN_BASELINE)
    'Found 1 issue'
    """
    if new_count == 0:
        return suppressed_message
    if new_count == original_count:
        return message

    count_re = re.compile(r"\b" + re.escape(str(original_count)) + r"\b")
    adjusted = count_re.sub(str(new_count), message, count=1)

    if new_count == 1:
        adjusted = _PLURAL_RE.sub(lambda m: _SINGULAR[m.group(1)], adjusted, count=1)

    return adjusted


def recompute(
    result: AnalysisResult, kept: list[Issue], suppressed_message: str
) -> AnalysisResult:
    """Return ``result`` itself when nothing was removed, else a new adjusted result."""
    original_count = len(result.issues)
    if len(kept) == original_count:
        return result

    message = adjust_message(result.message, original_count, len(kept), suppressed_message)
    status = Status.PASSED if not kept else result.status
    return result.with_issues(tuple(kept), status=status, message=message)
