import pytest

from issuegate.models import AnalysisResult, Issue, Location, Severity, Status


def _issue(
    message="SQL Injection vulnerability",
    file="/app/Vulnerable.php",
    line=42,
    severity=Severity.HIGH,
    recommendation="Use prepared statements",
):
    location = Location(file, line) if file is not None else None
    return Issue(message=message, location=location, severity=severity, recommendation=recommendation)


def _result(analyzer_id="sec-1", issues=(), status=Status.FAILED, message=None):
    issues = tuple(issues)
    if message is None:
        message = f"Found {len(issues)} issues"
    return AnalysisResult(analyzer_id=analyzer_id, status=status, message=message, issues=issues)


@pytest.fixture
def make_issue():
    return _issue


@pytest.fixture
def make_result():
    return _result
