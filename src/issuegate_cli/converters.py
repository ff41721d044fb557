from issuegate.models import AnalysisResult, Issue, Location

from .models import IssuePayload, ResultPayload


def issue_payload_to_issue(payload: IssuePayload) -> Issue:
    """Convert an external Pydantic issue to the immutable core dataclass"""
    location = None
    if payload.location is not None:
        location = Location(file=payload.location.file, line=payload.location.line)
    return Issue(
        message=payload.message,
        location=location,
        severity=payload.severity,
        recommendation=payload.recommendation,
    )


def result_payload_to_result(payload: ResultPayload) -> AnalysisResult:
    return AnalysisResult(
        analyzer_id=payload.analyzer_id,
        status=payload.status,
        message=payload.message,
        issues=tuple(issue_payload_to_issue(i) for i in payload.issues),
        execution_time=payload.execution_time,
        metadata=dict(payload.metadata),
    )
