"""
issuegate - Post-analysis issue filtering and build gating

This package provides:
- Ignore rules from configuration (exact and wildcard path/message criteria)
- Inline suppression comments in source files
- Baseline snapshots of accepted issues
- A severity/score failure policy that decides the exit verdict
"""

__version__ = "0.1.0"

from .baseline import Baseline, capture_baseline, issue_hash, load_baseline_file, parse_baseline
from .engine import FilterPipeline, PipelineConfig, PipelineOutcome
from .models import AnalysisResult, Issue, Location, Severity, Status, ValidationWarning
from .policy import FailOn, FailurePolicy, Verdict, evaluate

__all__ = [
    "AnalysisResult",
    "Baseline",
    "FailOn",
    "FailurePolicy",
    "FilterPipeline",
    "Issue",
    "Location",
    "PipelineConfig",
    "PipelineOutcome",
    "Severity",
    "Status",
    "ValidationWarning",
    "Verdict",
    "capture_baseline",
    "evaluate",
    "issue_hash",
    "load_baseline_file",
    "parse_baseline",
]
