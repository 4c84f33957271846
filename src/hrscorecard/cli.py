"""Typer CLI entrypoint for the scorecard engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from dependency_injector import providers
from pydantic import ValidationError

from .api import ApiResponse, ScorecardApi
from .container import create_container
from .errors import StoreError
from .logging import configure_logging
from .schemas.config import load_config
from .service import AuditLogger
from .summary import HTTPSummaryClient

app = typer.Typer(help="Scorecard aggregation and technical test scoring CLI.")


def _data_option() -> Any:
    return typer.Option(..., exists=True, readable=True, dir_okay=False, help="Record store snapshot (JSON).")


def _config_option() -> Any:
    return typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")


def _log_level_option() -> Any:
    return typer.Option("INFO", help="Log level for structured logging.")


def _output_option() -> Any:
    return typer.Option(None, dir_okay=False, help="Also write the JSON response to this path.")


def _load_settings(config: Optional[Path], data: Path) -> dict[str, Any]:
    raw: Any = None
    if config:
        with config.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    try:
        settings = load_config(raw).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc
    settings.setdefault("store", {})["path"] = str(data)
    return settings


def _build_api(
    *,
    data: Path,
    config: Optional[Path],
    log_level: str,
    audit_log: Optional[Path] = None,
    summary_endpoint: Optional[str] = None,
    summary_api_key: Optional[str] = None,
) -> ScorecardApi:
    configure_logging(log_level)
    container = create_container(settings=_load_settings(config, data))
    if audit_log:
        container.audit_logger.override(providers.Object(AuditLogger(audit_log)))
    if summary_endpoint:
        container.summary_client.override(
            providers.Object(HTTPSummaryClient(summary_endpoint, summary_api_key))
        )
    try:
        return container.api()
    except StoreError as exc:
        typer.echo(json.dumps(exc.to_payload(), ensure_ascii=False), err=True)
        raise typer.Exit(code=2) from exc


def _emit(response: ApiResponse, output: Optional[Path]) -> None:
    rendered = json.dumps(response.body, ensure_ascii=False, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
    typer.echo(rendered)
    if not response.ok:
        raise typer.Exit(code=1 if response.status < 500 else 2)


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc}", param_name="answers") from exc


@app.command()
def aggregate(
    job: str = typer.Option(..., help="Job requisition id."),
    data: Path = _data_option(),
    config: Optional[Path] = _config_option(),
    log_level: str = _log_level_option(),
    output: Optional[Path] = _output_option(),
) -> None:
    """Aggregate completed scorecards per candidate for a job."""
    api = _build_api(data=data, config=config, log_level=log_level)
    _emit(api.aggregate({"job_id": job}), output)


@app.command()
def compare(
    job: str = typer.Option(..., help="Job requisition id."),
    anonymize: bool = typer.Option(False, "--anonymize/--no-anonymize", help="Replace names with positional labels."),
    data: Path = _data_option(),
    config: Optional[Path] = _config_option(),
    log_level: str = _log_level_option(),
    output: Optional[Path] = _output_option(),
    summary_endpoint: Optional[str] = typer.Option(None, help="Comparison summary API endpoint."),
    summary_api_key: Optional[str] = typer.Option(None, help="Comparison summary API key."),
) -> None:
    """Rank the candidates of a job and print requisition statistics."""
    api = _build_api(
        data=data,
        config=config,
        log_level=log_level,
        summary_endpoint=summary_endpoint,
        summary_api_key=summary_api_key,
    )
    _emit(api.compare({"job_id": job, "anonymize": anonymize}), output)


@app.command()
def grade(
    token: str = typer.Option(..., help="External test token."),
    answers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Answers JSON path."),
    data: Path = _data_option(),
    config: Optional[Path] = _config_option(),
    log_level: str = _log_level_option(),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Grade a submitted technical test and record the result."""
    payload = _read_json(answers)
    if isinstance(payload, dict):
        payload = payload.get("answers")
    api = _build_api(data=data, config=config, log_level=log_level, audit_log=audit_log)
    _emit(api.grade_submission({"token": token, "answers": payload}), None)


@app.command("show-test")
def show_test(
    token: str = typer.Option(..., help="External test token."),
    data: Path = _data_option(),
    config: Optional[Path] = _config_option(),
    log_level: str = _log_level_option(),
) -> None:
    """Print the public view of a pending technical test."""
    api = _build_api(data=data, config=config, log_level=log_level)
    _emit(api.technical_test({"token": token}), None)


@app.command("issue-test")
def issue_test(
    candidate: str = typer.Option(..., help="Candidate id."),
    template: str = typer.Option(..., help="Template id."),
    job: Optional[str] = typer.Option(None, help="Job requisition id."),
    expiration_days: Optional[int] = typer.Option(None, min=1, help="Days until the link expires."),
    created_by: Optional[str] = typer.Option(None, help="Recruiter issuing the link."),
    data: Path = _data_option(),
    config: Optional[Path] = _config_option(),
    log_level: str = _log_level_option(),
) -> None:
    """Create a technical test link for a candidate."""
    api = _build_api(data=data, config=config, log_level=log_level)
    _emit(
        api.issue_test_link(
            {
                "candidate_id": candidate,
                "template_id": template,
                "job_id": job,
                "expiration_days": expiration_days,
                "created_by": created_by,
            }
        ),
        None,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
