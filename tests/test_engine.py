import pytest

from issuegate.baseline import issue_hash, parse_baseline
from issuegate.engine import FilterPipeline, PipelineConfig
from issuegate.messages import IGNORED_VIA_CONFIG
from issuegate.models import Severity, Status
from issuegate.policy import FailOn


@pytest.fixture
def sec_result(make_issue, make_result):
    issue = make_issue(file="/app/V.php", line=42, message="SQL Injection vulnerability", severity=Severity.HIGH)
    return make_result(analyzer_id="sec-1", issues=[issue], message="Found 1 issue")


@pytest.mark.parametrize("fail_on", list(FailOn))
def test_ignored_issue_passes_under_any_fail_on(fail_on, sec_result):
    config = PipelineConfig(ignore_errors={"sec-1": [{"path": "/app/V.php"}]}, fail_on=fail_on)

    outcome = FilterPipeline(config).run([sec_result])

    [result] = outcome.results
    assert result.status == Status.PASSED
    assert result.message == IGNORED_VIA_CONFIG
    assert outcome.verdict.exit_code == 0
    assert outcome.warnings == []


@pytest.mark.parametrize("fail_on,exit_code", [(FailOn.HIGH, 1), (FailOn.CRITICAL, 0)])
def test_unfiltered_high_issue(fail_on, exit_code, sec_result):
    outcome = FilterPipeline(PipelineConfig(fail_on=fail_on)).run([sec_result])

    assert outcome.results == [sec_result]
    assert outcome.verdict.exit_code == exit_code


def test_pipeline_is_idempotent(tmp_path, make_issue, make_result):
    source = tmp_path / "a.php"
    source.write_text("x();\ny(); // @issuegate-ignore\n", encoding="utf-8")
    results = [
        make_result(
            issues=[
                make_issue(file=str(source), line=1),
                make_issue(file=str(source), line=2),
                make_issue(file="/app/Legacy.php"),
            ]
        ),
        make_result(analyzer_id="xss", issues=[make_issue(message="XSS")]),
    ]
    baseline, _ = parse_baseline(
        {"generated_at": "t", "version": "1", "errors": {"xss": [{"hash": issue_hash(make_issue(message="XSS"))}]}}
    )
    config = PipelineConfig(
        ignore_errors={"sec-1": [{"path": "/app/Legacy.php"}]},
        use_baseline=True,
        baseline=baseline,
    )
    pipeline = FilterPipeline(config)

    once = pipeline.run(results)
    twice = pipeline.run(once.results)

    assert twice.results == once.results
    assert once.results[0].message == "Found 1 issue"
    assert once.results[1].status == Status.PASSED


def test_layers_apply_in_order(tmp_path, make_issue, make_result):
    source = tmp_path / "a.php"
    source.write_text("// @issuegate-ignore\nquery();\n", encoding="utf-8")
    issue = make_issue(file=str(source), line=2)
    baseline, _ = parse_baseline(
        {"generated_at": "t", "version": "1", "errors": {"sec-1": [{"hash": issue_hash(issue)}]}}
    )
    results = [make_result(issues=[issue])]

    # Inline runs before baseline, so the inline sentinel wins
    outcome = FilterPipeline(PipelineConfig(use_baseline=True, baseline=baseline)).run(results)

    assert outcome.results[0].message == "All issues are suppressed via @issuegate-ignore"


def test_baseline_skipped_when_not_enabled(make_issue, make_result):
    issue = make_issue()
    baseline, _ = parse_baseline(
        {"generated_at": "t", "version": "1", "errors": {"sec-1": [{"hash": issue_hash(issue)}]}}
    )
    result = make_result(issues=[issue])

    outcome = FilterPipeline(PipelineConfig(baseline=baseline)).run([result])

    assert outcome.results == [result]


def test_missing_baseline_is_a_warning(sec_result):
    outcome = FilterPipeline(PipelineConfig(use_baseline=True, fail_on=FailOn.NEVER)).run([sec_result])

    assert outcome.results == [sec_result]
    assert outcome.warnings[0].source == "baseline"


def test_baseline_dont_report_joins_denylist_in_baseline_mode(make_issue, make_result):
    result = make_result(issues=[make_issue(severity=Severity.MEDIUM)])
    baseline, _ = parse_baseline({"generated_at": "t", "version": "1", "errors": [], "dont_report": ["sec-1"]})

    with_baseline = PipelineConfig(fail_on=FailOn.MEDIUM, use_baseline=True, baseline=baseline)
    without_baseline = PipelineConfig(fail_on=FailOn.MEDIUM, use_baseline=False, baseline=baseline)

    assert FilterPipeline(with_baseline).run([result]).verdict.exit_code == 0
    assert FilterPipeline(without_baseline).run([result]).verdict.exit_code == 1


def test_denylist_union_is_deduplicated():
    baseline, _ = parse_baseline({"generated_at": "t", "version": "1", "errors": {}, "dont_report": ["a", "b"]})
    config = PipelineConfig(dont_report=("a", "c"), use_baseline=True, baseline=baseline)

    assert config.denylist() == frozenset({"a", "b", "c"})


def test_invalid_rules_surface_as_warnings_without_blocking(sec_result):
    config = PipelineConfig(
        ignore_errors={"sec-1": [{}], "unknown-analyzer": [{"path": "x"}]},
        fail_on=FailOn.HIGH,
    )

    outcome = FilterPipeline(config).run([sec_result])

    messages = " ".join(str(w) for w in outcome.warnings)
    assert "Empty rule" in messages
    assert "Unknown analyzer" in messages
    assert outcome.results == [sec_result]
    assert outcome.verdict.failed


def test_outcome_report_summary(sec_result):
    outcome = FilterPipeline(PipelineConfig(ignore_errors={"sec-1": [{"path": "/app/V.php"}]})).run([sec_result])
    assert outcome.report.summary()["score"] == 100
