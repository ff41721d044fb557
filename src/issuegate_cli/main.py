import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from issuegate.baseline import capture_baseline
from issuegate.engine import FilterPipeline
from issuegate.models import AnalysisResult
from issuegate.policy import FailOn

from .config import DEFAULT_CONFIG_FILE, GateConfig
from .converters import result_payload_to_result
from .models import ResultsPayload

app = typer.Typer(help="issuegate - Filter analysis results and decide whether the build fails")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_results(path: Path) -> list[AnalysisResult]:
    """Read analyzer results from JSON: a list of results or {"results": [...]}"""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error: cannot read results from {path}: {e}")
        raise typer.Exit(code=2)

    if isinstance(data, list):
        data = {"results": data}

    try:
        payload = ResultsPayload.model_validate(data)
    except ValidationError as e:
        typer.echo(f"Error: invalid results file {path}:\n{e}")
        raise typer.Exit(code=2)

    return [result_payload_to_result(r) for r in payload.results]


@app.command()
def check(
    results_file: Path = typer.Argument(..., help="JSON file with analyzer results"),
    config_file: Path = typer.Option(DEFAULT_CONFIG_FILE, help="Path to config file"),
    baseline: bool = typer.Option(False, help="Filter against the baseline and only report new issues"),
    baseline_file: Optional[Path] = typer.Option(None, help="Baseline file (overrides config)"),
    fail_on: Optional[FailOn] = typer.Option(None, envvar="ISSUEGATE_FAIL_ON", help="Minimum severity that fails the run"),
    fail_threshold: Optional[int] = typer.Option(
        None, min=0, max=100, envvar="ISSUEGATE_FAIL_THRESHOLD", help="Minimum score (0-100) to pass"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Filter results through ignore rules, inline suppressions and the baseline"""
    _configure_logging(verbose)
    config = GateConfig(config_file)
    results = load_results(results_file)

    pipeline_config = config.to_pipeline_config(
        use_baseline=baseline,
        baseline_file=baseline_file,
        fail_on=fail_on,
        fail_threshold=fail_threshold,
    )
    if baseline and pipeline_config.baseline is not None:
        typer.echo("📋 Filtering against baseline...")

    outcome = FilterPipeline(pipeline_config).run(results)

    warnings = config.warnings + outcome.warnings
    if warnings:
        typer.echo("⚠️  Configuration Warnings:")
        for warning in warnings:
            typer.echo(f"  - {warning}")
        typer.echo("")

    for result in outcome.results:
        typer.echo(f"{result.status.value.upper()}: [{result.analyzer_id}] {result.message}")
        for issue in result.issues:
            where = f"{issue.location.file}:{issue.location.line}" if issue.location else "(no location)"
            typer.echo(f"    {issue.severity.value}: {where} - {issue.message}")

    summary = outcome.report.summary()
    typer.echo(f"\nScore: {summary['score']}/100 ({summary['passed']} of {summary['total']} passed)")

    for reason in outcome.verdict.reasons:
        typer.echo(f"✗ {reason}")

    if outcome.verdict.failed:
        raise typer.Exit(code=1)


@app.command()
def baseline(
    results_file: Path = typer.Argument(..., help="JSON file with analyzer results"),
    output: Optional[Path] = typer.Option(None, help="Custom output path for the baseline file"),
    merge: bool = typer.Option(False, help="Merge with the existing baseline instead of overwriting"),
    config_file: Path = typer.Option(DEFAULT_CONFIG_FILE, help="Path to config file"),
):
    """Write a baseline accepting every issue currently reported"""
    _configure_logging(False)
    config = GateConfig(config_file)
    results = load_results(results_file)
    output_path = output or Path(config.settings.baseline_file or ".issuegate-baseline.json")

    existing = None
    if merge and output_path.exists():
        try:
            existing = json.loads(output_path.read_text(encoding="utf-8"))
            typer.echo(f"📋 Merging with existing baseline at: {output_path}")
        except (OSError, json.JSONDecodeError) as e:
            typer.echo(f"Warning: ignoring unreadable baseline {output_path}: {e}")
        if not isinstance(existing, dict):
            existing = None

    document = capture_baseline(results, existing=existing)
    output_path.write_text(json.dumps(document, indent=4) + "\n", encoding="utf-8")

    typer.echo("✅ Baseline file generated successfully!")
    typer.echo(f"   Location: {output_path}")
    typer.echo(f"   Total issues: {document['total_issues']}")
    if document["dont_report"]:
        typer.echo(f"   Analyzers in dont_report: {len(document['dont_report'])}")


if __name__ == "__main__":
    app()
