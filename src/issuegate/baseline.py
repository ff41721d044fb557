"""
Baseline snapshots: previously accepted issues that should not be reported again.

A baseline document looks like::

    {
        "generated_at": "2024-01-01T00:00:00+00:00",
        "version": "1.0.0",
        "errors": {
            "sql-injection": [
                {"type": "hash", "path": "app/V.php", "line": 42, "message": "...", "hash": "<sha256>"},
                {"type": "pattern", "path_pattern": "app/Legacy/*"}
            ]
        },
        "dont_report": ["missing-docblock"]
    }
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from .matching import IgnoreRule, parse_rule
from .models import AnalysisResult, Issue, Status, ValidationWarning

logger = logging.getLogger(__name__)

SOURCE = "baseline"
REQUIRED_KEYS = ("generated_at", "version", "errors")
BASELINE_VERSION = "1.0.0"
GENERATOR = "issuegate baseline"

# Keys written by capture_baseline next to the matching criteria
_ENTRY_KEYS = ("type", "hash", "line")


def issue_hash(issue: Issue) -> str:
    """Fingerprint of an issue's file, line and message.

    The JSON is encoded compactly with '/' escaped, so fingerprints stay
    identical to those in baselines written by earlier releases.
    """
    data = {
        "file": issue.location.file if issue.location else "unknown",
        "line": issue.location.line if issue.location else None,
        "message": issue.message,
    }
    encoded = json.dumps(data, separators=(",", ":"), ensure_ascii=True).replace("/", "\\/")
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class HashEntry:
    hash: str

    def matches(self, issue: Issue) -> bool:
        return issue_hash(issue) == self.hash


BaselineEntry = Union[HashEntry, IgnoreRule]


@dataclass(frozen=True)
class Baseline:
    generated_at: str
    version: str
    errors: dict[str, tuple[BaselineEntry, ...]] = field(default_factory=dict)
    dont_report: tuple[str, ...] = ()

    def entries_for(self, analyzer_id: str) -> tuple[BaselineEntry, ...]:
        return self.errors.get(analyzer_id, ())

    def contains(self, analyzer_id: str, issue: Issue) -> bool:
        return any(entry.matches(issue) for entry in self.entries_for(analyzer_id))


def parse_baseline(raw: Any) -> tuple[Optional[Baseline], list[ValidationWarning]]:
    """Validate a decoded baseline document.

    Returns ``(None, warnings)`` when the document as a whole is unusable.
    """
    warnings: list[ValidationWarning] = []

    if not isinstance(raw, dict):
        warnings.append(ValidationWarning(SOURCE, "Invalid baseline: expected a JSON object"))
        return _rejected(warnings)

    missing = [key for key in REQUIRED_KEYS if key not in raw]
    if missing:
        warnings.append(
            ValidationWarning(SOURCE, f"Invalid baseline: missing required keys {', '.join(missing)}")
        )
        return _rejected(warnings)

    raw_errors = raw["errors"]
    if raw_errors == []:
        # An empty JSON object is commonly serialized as [] by PHP-era tooling
        raw_errors = {}
    if not isinstance(raw_errors, dict):
        warnings.append(
            ValidationWarning(SOURCE, f"Invalid baseline: 'errors' must be an object, got {type(raw_errors).__name__}")
        )
        return _rejected(warnings)

    errors: dict[str, tuple[BaselineEntry, ...]] = {}
    for analyzer_id, raw_entries in raw_errors.items():
        analyzer_id = str(analyzer_id)
        if not isinstance(raw_entries, list):
            warnings.append(
                ValidationWarning(SOURCE, "Invalid entries: expected a list, skipping analyzer", analyzer_id)
            )
            continue
        entries = []
        for index, raw_entry in enumerate(raw_entries):
            entry, problem = _parse_entry(raw_entry)
            if problem:
                warnings.append(ValidationWarning(SOURCE, f"Entry #{index + 1}: {problem}", analyzer_id))
            if entry is not None:
                entries.append(entry)
        errors[analyzer_id] = tuple(entries)

    dont_report: tuple[str, ...] = ()
    raw_dont_report = raw.get("dont_report")
    if raw_dont_report is not None:
        if isinstance(raw_dont_report, list):
            dont_report = tuple(str(item) for item in raw_dont_report)
        else:
            warnings.append(ValidationWarning(SOURCE, "Invalid 'dont_report': expected a list, ignoring it"))

    for warning in warnings:
        logger.warning("%s", warning)

    baseline = Baseline(
        generated_at=str(raw["generated_at"]),
        version=str(raw["version"]),
        errors=errors,
        dont_report=dont_report,
    )
    return baseline, warnings


def _parse_entry(raw: Any) -> tuple[Optional[BaselineEntry], Optional[str]]:
    if not isinstance(raw, dict):
        return None, f"expected an object, got {type(raw).__name__}; skipped"

    if raw.get("type") == "pattern":
        rule, problems = parse_rule(raw, allowed_keys=_ENTRY_KEYS)
        return rule, "; ".join(problems) or None

    value = raw.get("hash")
    if isinstance(value, str) and value:
        return HashEntry(value), None
    return None, "neither a 'hash' nor a 'pattern' entry; skipped"


def _rejected(warnings: list[ValidationWarning]) -> tuple[None, list[ValidationWarning]]:
    for warning in warnings:
        logger.warning("%s", warning)
    return None, warnings


def load_baseline_file(path: Union[str, Path, None]) -> tuple[Optional[Baseline], list[ValidationWarning]]:
    """Read and parse a baseline file; I/O and JSON problems are warnings, never errors."""
    if not path:
        return _rejected([ValidationWarning(SOURCE, "No baseline file configured")])

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return _rejected(
            [ValidationWarning(SOURCE, f"No baseline file found at {path}. Run 'issuegate baseline' to create one.")]
        )
    except OSError as e:
        return _rejected([ValidationWarning(SOURCE, f"Cannot read baseline file {path}: {e}")])

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        return _rejected([ValidationWarning(SOURCE, f"Invalid baseline JSON in {path}: {e}")])

    return parse_baseline(raw)


def capture_baseline(
    results: Iterable[AnalysisResult],
    existing: Optional[dict[str, Any]] = None,
    generated_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build a baseline document accepting every currently reported issue.

    With ``existing`` (a previously written document) new entries are merged in
    and duplicates, by hash, are skipped.
    """
    errors: dict[str, list[Any]] = {}
    dont_report: list[str] = []

    if existing:
        previous_errors = existing.get("errors")
        if isinstance(previous_errors, dict):
            errors = {str(k): list(v) for k, v in previous_errors.items() if isinstance(v, list)}
        previous_dont_report = existing.get("dont_report")
        if isinstance(previous_dont_report, list):
            dont_report = [str(item) for item in previous_dont_report]

    added = 0
    for result in results:
        if result.status in (Status.PASSED, Status.SKIPPED):
            continue

        if not result.issues:
            # Failing without specific issues: nothing to fingerprint
            if result.analyzer_id not in dont_report:
                dont_report.append(result.analyzer_id)
            continue

        entries = errors.setdefault(result.analyzer_id, [])
        known = {entry.get("hash") for entry in entries if isinstance(entry, dict)}
        for issue in result.issues:
            digest = issue_hash(issue)
            if digest in known:
                continue
            entries.append(
                {
                    "type": "hash",
                    "path": issue.location.file if issue.location else "unknown",
                    "line": issue.location.line if issue.location else None,
                    "message": issue.message,
                    "hash": digest,
                }
            )
            known.add(digest)
            added += 1

    logger.debug("Captured %d new baseline entries", added)

    timestamp = generated_at or datetime.now(timezone.utc)
    return {
        "generated_at": timestamp.isoformat(),
        "generator": GENERATOR,
        "version": BASELINE_VERSION,
        "total_issues": sum(len(entries) for entries in errors.values()),
        "dont_report": list(dict.fromkeys(dont_report)),
        "errors": errors,
    }
