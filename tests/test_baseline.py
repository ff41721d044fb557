import json
from datetime import datetime, timezone

import pytest

from issuegate.baseline import (
    HashEntry,
    capture_baseline,
    issue_hash,
    load_baseline_file,
    parse_baseline,
)
from issuegate.filters import BaselineFilter
from issuegate.messages import IN_BASELINE
from issuegate.models import Status

# sha256 of {"file":"\/app\/Vulnerable.php","line":42,"message":"SQL Injection vulnerability"}
KNOWN_HASH = "59cec427135c49dbe27d5c6b59802d97af9f5c742764a0afbd878c1f30c8056a"


def _document(errors, **extra):
    return {"generated_at": "2024-01-01T00:00:00Z", "version": "1.0.0", "errors": errors, **extra}


def test_issue_hash_matches_existing_baselines(make_issue):
    assert issue_hash(make_issue()) == KNOWN_HASH


def test_issue_hash_without_location_escapes_unicode(make_issue):
    issue = make_issue(file=None, message="Café config")
    assert issue_hash(issue) == "d46d99a9a0b62dc2c3216689775874d6871887d2bfa0a4748c8ef3a5733e9176"


def test_one_character_changes_the_hash(make_issue):
    assert issue_hash(make_issue(message="SQL Injection vulnerabilitY")) != KNOWN_HASH


def test_hash_entry_filters_issue(make_issue, make_result):
    baseline, warnings = parse_baseline(_document({"sec-1": [{"hash": KNOWN_HASH}]}))
    result = make_result(issues=[make_issue()])

    [filtered] = BaselineFilter(baseline).apply([result])

    assert warnings == []
    assert filtered.status == Status.PASSED
    assert filtered.message == IN_BASELINE


def test_changed_message_reappears(make_issue, make_result):
    baseline, _ = parse_baseline(_document({"sec-1": [{"hash": KNOWN_HASH}]}))
    result = make_result(issues=[make_issue(message="SQL Injection vulnerability!")])

    [filtered] = BaselineFilter(baseline).apply([result])

    assert filtered is result


def test_pattern_entries(make_issue, make_result):
    baseline, _ = parse_baseline(
        _document(
            {
                "sec-1": [{"type": "pattern", "path_pattern": "*/Vulnerable*", "message_pattern": "*SQL*"}],
                "xss": [{"type": "pattern", "path": "/app/Vulnerable.php", "message": "SQL Injection vulnerability"}],
            }
        )
    )
    results = [
        make_result(issues=[make_issue()]),
        make_result(analyzer_id="xss", issues=[make_issue()]),
    ]

    filtered = BaselineFilter(baseline).apply(results)

    assert [r.status for r in filtered] == [Status.PASSED, Status.PASSED]


def test_partial_baseline_match(make_issue, make_result):
    other = make_issue(line=50, message="Another injection")
    baseline, _ = parse_baseline(_document({"sec-1": [{"hash": KNOWN_HASH}]}))
    result = make_result(issues=[make_issue(), other])

    [filtered] = BaselineFilter(baseline).apply([result])

    assert filtered.status == Status.FAILED
    assert filtered.issues == (other,)
    assert filtered.message == "Found 1 issue"


def test_analyzers_without_entries_pass_through(make_issue, make_result):
    baseline, _ = parse_baseline(_document({"sec-1": [{"hash": KNOWN_HASH}]}))
    result = make_result(analyzer_id="other", issues=[make_issue()])

    assert BaselineFilter(baseline).apply([result])[0] is result


@pytest.mark.parametrize(
    "raw,fragment",
    [
        ({"invalid": "structure"}, "missing required keys"),
        ({"generated_at": "x", "version": "1"}, "errors"),
        (_document("not-an-array"), "'errors' must be an object"),
        (None, "expected a JSON object"),
    ],
)
def test_invalid_documents_are_rejected(raw, fragment):
    baseline, warnings = parse_baseline(raw)

    assert baseline is None
    assert fragment in warnings[0].message


def test_empty_list_errors_is_accepted():
    baseline, warnings = parse_baseline(_document([], dont_report=["debug-mode"]))

    assert warnings == []
    assert baseline.errors == {}
    assert baseline.dont_report == ("debug-mode",)


def test_bad_entries_are_skipped_with_warnings():
    baseline, warnings = parse_baseline(
        _document({"sec-1": ["string-not-array", {"path": "x"}, {"hash": "abc"}], "xss": "nope"})
    )

    assert baseline.entries_for("sec-1") == (HashEntry("abc"),)
    assert baseline.entries_for("xss") == ()
    assert len(warnings) == 3


def test_non_list_dont_report_is_ignored():
    baseline, warnings = parse_baseline(_document({}, dont_report="sec-1"))

    assert baseline.dont_report == ()
    assert "dont_report" in warnings[0].message


def test_load_missing_file(tmp_path):
    baseline, warnings = load_baseline_file(tmp_path / "none.json")

    assert baseline is None
    assert "No baseline file found" in warnings[0].message


def test_load_invalid_json(tmp_path):
    path = tmp_path / "baseline.json"
    path.write_text("{not json", encoding="utf-8")

    baseline, warnings = load_baseline_file(path)

    assert baseline is None
    assert "Invalid baseline JSON" in warnings[0].message


def test_load_valid_file(tmp_path):
    path = tmp_path / "baseline.json"
    path.write_text(json.dumps(_document({"sec-1": [{"hash": KNOWN_HASH}]})), encoding="utf-8")

    baseline, warnings = load_baseline_file(path)

    assert warnings == []
    assert baseline.entries_for("sec-1") == (HashEntry(KNOWN_HASH),)


def test_capture_baseline(make_issue, make_result):
    results = [
        make_result(issues=[make_issue()]),
        make_result(analyzer_id="passing", status=Status.PASSED, issues=[]),
        make_result(analyzer_id="skipped", status=Status.SKIPPED, issues=[]),
        make_result(analyzer_id="no-details", issues=[]),
    ]
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)

    document = capture_baseline(results, generated_at=when)

    assert document["generated_at"] == "2024-01-01T00:00:00+00:00"
    assert document["version"] == "1.0.0"
    assert document["total_issues"] == 1
    assert document["dont_report"] == ["no-details"]
    assert document["errors"] == {
        "sec-1": [
            {
                "type": "hash",
                "path": "/app/Vulnerable.php",
                "line": 42,
                "message": "SQL Injection vulnerability",
                "hash": KNOWN_HASH,
            }
        ]
    }


def test_capture_merges_without_duplicates(make_issue, make_result):
    existing = capture_baseline([make_result(issues=[make_issue()])])
    existing["dont_report"] = ["legacy"]
    results = [make_result(issues=[make_issue(), make_issue(line=7)])]

    document = capture_baseline(results, existing=existing)

    assert document["total_issues"] == 2
    assert document["dont_report"] == ["legacy"]
    assert [e["line"] for e in document["errors"]["sec-1"]] == [42, 7]


def test_captured_document_round_trips_through_the_filter(make_issue, make_result):
    results = [make_result(issues=[make_issue(), make_issue(file=None, message="Global issue")])]
    baseline, warnings = parse_baseline(json.loads(json.dumps(capture_baseline(results))))

    [filtered] = BaselineFilter(baseline).apply(results)

    assert warnings == []
    assert filtered.status == Status.PASSED
