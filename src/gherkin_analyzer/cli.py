from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

import typer
from lsprotocol.types import Diagnostic, DiagnosticSeverity

from gherkin_analyzer.checks import Issue, export_default_rules
from gherkin_analyzer.config import project_settings
from gherkin_analyzer.diagnostics import to_diagnostic
from gherkin_analyzer.engine import PARSE_ERROR_RULE_KEY, AnalysisEngine, issue_severity
from gherkin_analyzer.model import TextPosition
from gherkin_analyzer.rule_config import RuleConfiguration
from gherkin_analyzer.schema import (
    CheckReportDTO,
    DiagnosticDTO,
    FileReportDTO,
    RuleDefaultDTO,
)

logger = logging.getLogger(__name__)

FEATURE_SUFFIX = ".feature"

app = typer.Typer(add_completion=False)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig()
    if verbose:
        logging.getLogger("gherkin_analyzer").setLevel(logging.DEBUG)


def collect_feature_files(paths: Iterable[Path]) -> list[Path]:
    """Expand directories to the ``.feature`` files below them, keeping order."""
    seen: set[Path] = set()
    files: list[Path] = []
    for path in paths:
        candidates = sorted(path.rglob(f"*{FEATURE_SUFFIX}")) if path.is_dir() else [path]
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            files.append(candidate)
    return files


def severity_label(severity: DiagnosticSeverity | None) -> str:
    if severity is None:
        return "warning"
    return severity.name.lower()


def _diagnostic_dto(path: Path, diagnostic: Diagnostic) -> DiagnosticDTO:
    start = diagnostic.range.start
    end = diagnostic.range.end
    return DiagnosticDTO(
        path=str(path),
        line=start.line + 1,
        column=start.character + 1,
        end_line=end.line + 1,
        end_column=end.character + 1,
        severity=severity_label(diagnostic.severity),
        code=diagnostic.code,
        message=diagnostic.message,
    )


def run_check(files: list[Path], settings: Mapping[str, object] | None) -> CheckReportDTO:
    """Analyze ``files`` as one workspace, including cross-file rules."""
    configuration = RuleConfiguration.from_settings(settings)
    engine = AnalysisEngine(configuration)
    per_uri: dict[str, tuple[Path, list[Diagnostic]]] = {}
    for path in files:
        uri = path.resolve().as_uri()
        try:
            raw = path.read_bytes()
        except OSError as exc:
            logger.debug("unable to read %s", path, exc_info=True)
            issue = Issue(
                PARSE_ERROR_RULE_KEY,
                f"Unable to read {path}: {exc}",
                position=TextPosition(line=1, column=1),
                line=1,
            )
            per_uri[uri] = (path, [to_diagnostic(issue, issue_severity(configuration))])
            continue
        per_uri[uri] = (path, engine.analyze_file(uri, raw))
    for uri, extra in engine.cross_file_diagnostics().items():
        if uri in per_uri:
            per_uri[uri][1].extend(extra)

    reports: list[FileReportDTO] = []
    counts: dict[str, int] = {}
    for uri, (path, diagnostics) in per_uri.items():
        ordered = sorted(
            diagnostics, key=lambda d: (d.range.start.line, d.range.start.character)
        )
        dtos = [_diagnostic_dto(path, diagnostic) for diagnostic in ordered]
        for dto in dtos:
            counts[dto.severity] = counts.get(dto.severity, 0) + 1
        reports.append(FileReportDTO(path=str(path), uri=uri, diagnostics=dtos))
    exit_code = 1 if counts.get(severity_label(DiagnosticSeverity.Error)) else 0
    return CheckReportDTO(files=reports, counts=counts, exit_code=exit_code)


def _emit_text(report: CheckReportDTO) -> None:
    for file_report in report.files:
        for item in file_report.diagnostics:
            typer.echo(
                f"{item.path}:{item.line}:{item.column}: {item.severity} "
                f"{item.code} {item.message}"
            )
    total = sum(report.counts.values())
    summary = ", ".join(f"{count} {name}" for name, count in sorted(report.counts.items()))
    typer.echo(
        f"{len(report.files)} file(s) checked, {total} issue(s)"
        + (f" ({summary})" if summary else ""),
        err=True,
    )


@app.command("check")
def check(
    paths: List[Path] = typer.Argument(..., help="Feature files or directories."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to gherkin-analyzer.toml."),
    json_output: bool = typer.Option(False, "--json", help="Emit a JSON report."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Analyze feature files and report diagnostics."""
    _configure_logging(verbose)
    files = collect_feature_files(paths)
    settings = project_settings(root=Path.cwd(), config_path=config)
    report = run_check(files, settings)
    if json_output:
        typer.echo(json.dumps(report.model_dump(), indent=2))
    else:
        _emit_text(report)
    raise typer.Exit(code=report.exit_code)


@app.command("rules")
def rules(
    output: Optional[Path] = typer.Option(None, "--output", help="Write to file instead of stdout."),
) -> None:
    """Print the default configuration of every rule as JSON."""
    payload = {
        key: RuleDefaultDTO(**entry).model_dump()
        for key, entry in export_default_rules().items()
    }
    text = json.dumps(payload, indent=2) + "\n"
    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {len(payload)} rule defaults to {output}")


@app.command("serve")
def serve(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    """Run the language server on stdio."""
    from gherkin_analyzer import server

    if verbose:
        logging.getLogger("gherkin_analyzer").setLevel(logging.DEBUG)
    server.start()


def main() -> None:
    app()
