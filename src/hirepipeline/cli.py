"""Typer CLI entrypoint for the hiring pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from .config import load_settings
from .container import PipelineContainer, create_container
from .core import Capability, PipelineError, rank_candidates
from .llm import HTTPEvaluationClient
from .logging import configure_logging
from .pipeline import evaluated_summary
from .schemas import CandidateStatus, OfferTerms

app = typer.Typer(help="Candidate hiring-pipeline CLI.")

SnapshotOption = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Snapshot JSON path.")
OutputOption = typer.Option(None, dir_okay=False, help="Where to write the updated snapshot (defaults to --snapshot).")
ConfigOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")
LogLevelOption = typer.Option(None, help="Log level for structured logging (overrides config).")
AuditLogOption = typer.Option(None, dir_okay=False, help="Audit log output (JSONL).")


def _open(
    snapshot: Path,
    *,
    config: Optional[Path],
    log_level: Optional[str],
    audit_log: Optional[Path] = None,
    endpoint: Optional[str] = None,
    api_key: Optional[str] = None,
) -> PipelineContainer:
    try:
        app_config = load_settings(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc

    configure_logging(log_level or app_config.logging.level)
    settings = app_config.to_settings()

    evaluator = None
    if endpoint:
        evaluator_settings = settings.get("evaluator", {})
        evaluator = HTTPEvaluationClient(
            endpoint,
            api_key or evaluator_settings.get("api_key"),
            timeout=evaluator_settings.get("timeout_seconds"),
        )

    container = create_container(settings=settings, evaluator=evaluator, audit_path=audit_log)
    try:
        container.runner().open(snapshot)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="snapshot") from exc
    return container


def _save(container: PipelineContainer, snapshot: Path, output: Optional[Path]) -> Path:
    target = output or snapshot
    container.runner().save(target)
    return target


def _fail(exc: PipelineError) -> typer.Exit:
    typer.echo(json.dumps(exc.to_dict(), ensure_ascii=False), err=True)
    return typer.Exit(code=1)


@app.command()
def evaluate(
    snapshot: Path = SnapshotOption,
    output: Optional[Path] = OutputOption,
    tenant: Optional[str] = typer.Option(None, help="Only evaluate this tenant's candidates."),
    endpoint: Optional[str] = typer.Option(None, help="Evaluation API endpoint."),
    api_key: Optional[str] = typer.Option(None, help="Evaluation API key."),
    wait_seconds: Optional[float] = typer.Option(None, help="Give up waiting after this many seconds."),
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Score every candidate still waiting at 'applied'."""
    container = _open(snapshot, config=config, log_level=log_level, endpoint=endpoint, api_key=api_key)
    runner = container.runner()
    try:
        evaluated = runner.evaluate(tenant_id=tenant, timeout=wait_seconds)
    finally:
        container.trigger().shutdown(wait=False)
    pending = runner.pending_evaluations()
    target = _save(container, snapshot, output)
    typer.echo(json.dumps(evaluated_summary(evaluated), ensure_ascii=False))
    typer.echo(f"Evaluated {len(evaluated)} candidates. Snapshot saved to {target}.")
    if pending:
        typer.echo(
            f"Evaluations still running when the wait ended; re-run to record: {', '.join(pending)}",
            err=True,
        )


@app.command("import-candidates")
def import_candidates(
    snapshot: Path = SnapshotOption,
    candidates: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."),
    output: Optional[Path] = OutputOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Add new applications from a JSON-lines file."""
    container = _open(snapshot, config=config, log_level=log_level)
    runner = container.runner()
    added, errors = runner.import_candidates(candidates)
    runner.drain()
    for message in errors:
        typer.echo(message, err=True)
    target = _save(container, snapshot, output)
    typer.echo(f"Added {len(added)} candidates ({len(errors)} errors). Snapshot saved to {target}.")
    if errors:
        raise typer.Exit(code=1)


@app.command()
def advance(
    snapshot: Path = SnapshotOption,
    candidate_id: str = typer.Option(..., help="Candidate id."),
    to: CandidateStatus = typer.Option(..., help="Target interview stage."),
    actor_id: Optional[str] = typer.Option(None, help="Reviewer id for the audit trail."),
    output: Optional[Path] = OutputOption,
    audit_log: Optional[Path] = AuditLogOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Record a screening decision that moves a candidate forward."""
    container = _open(snapshot, config=config, log_level=log_level, audit_log=audit_log)
    try:
        candidate = container.store().get(candidate_id)
        updated = container.stages().advance(candidate, to, actor_id=actor_id)
    except PipelineError as exc:
        raise _fail(exc) from exc
    _save(container, snapshot, output)
    typer.echo(f"{updated.id}: {candidate.status.value} -> {updated.status.value}")


@app.command()
def reject(
    snapshot: Path = SnapshotOption,
    candidate_id: str = typer.Option(..., help="Candidate id."),
    actor_id: Optional[str] = typer.Option(None, help="Reviewer id for the audit trail."),
    output: Optional[Path] = OutputOption,
    audit_log: Optional[Path] = AuditLogOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Reject a candidate at any non-terminal stage."""
    container = _open(snapshot, config=config, log_level=log_level, audit_log=audit_log)
    try:
        candidate = container.store().get(candidate_id)
        updated = container.stages().reject(candidate, actor_id=actor_id)
    except PipelineError as exc:
        raise _fail(exc) from exc
    _save(container, snapshot, output)
    typer.echo(f"{updated.id}: {candidate.status.value} -> {updated.status.value}")


@app.command("draft-offer")
def draft_offer(
    snapshot: Path = SnapshotOption,
    candidate_id: str = typer.Option(..., help="Candidate id."),
    actor_id: str = typer.Option(..., help="Recruiter id."),
    capability: Optional[List[Capability]] = typer.Option(None, help="Capabilities held by the actor."),
    salary: str = typer.Option(..., help="Offered salary."),
    joining_date: str = typer.Option(..., help="Joining date (YYYY-MM-DD)."),
    variable_pay: str = typer.Option("", help="Variable pay component."),
    notes: str = typer.Option("", help="Notes for the approver."),
    output: Optional[Path] = OutputOption,
    audit_log: Optional[Path] = AuditLogOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Draft an offer for a candidate in the HR round."""
    container = _open(snapshot, config=config, log_level=log_level, audit_log=audit_log)
    terms = OfferTerms(salary=salary, joining_date=joining_date, variable_pay=variable_pay, notes=notes)
    try:
        candidate = container.store().get(candidate_id)
        updated = container.offers().draft_offer(candidate, terms, actor_id, capability or [])
    except PipelineError as exc:
        raise _fail(exc) from exc
    _save(container, snapshot, output)
    typer.echo(f"{updated.id}: offer drafted, awaiting approval")


@app.command("approve-offer")
def approve_offer(
    snapshot: Path = SnapshotOption,
    candidate_id: str = typer.Option(..., help="Candidate id."),
    actor_id: str = typer.Option(..., help="Approving admin id."),
    capability: Optional[List[Capability]] = typer.Option(None, help="Capabilities held by the actor."),
    output: Optional[Path] = OutputOption,
    audit_log: Optional[Path] = AuditLogOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Approve a pending offer and send it to the candidate."""
    container = _open(snapshot, config=config, log_level=log_level, audit_log=audit_log)
    try:
        candidate = container.store().get(candidate_id)
        updated = container.offers().approve_offer(candidate, actor_id, capability or [])
    except PipelineError as exc:
        raise _fail(exc) from exc
    _save(container, snapshot, output)
    typer.echo(f"{updated.id}: offer sent")


@app.command("accept-offer")
def accept_offer(
    snapshot: Path = SnapshotOption,
    candidate_id: str = typer.Option(..., help="Candidate id."),
    output: Optional[Path] = OutputOption,
    audit_log: Optional[Path] = AuditLogOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Record that the candidate accepted the offer."""
    container = _open(snapshot, config=config, log_level=log_level, audit_log=audit_log)
    try:
        candidate = container.store().get(candidate_id)
        updated = container.offers().record_acceptance(candidate)
    except PipelineError as exc:
        raise _fail(exc) from exc
    _save(container, snapshot, output)
    typer.echo(f"{updated.id}: offer accepted, pre-boarding opened")


@app.command()
def board(
    snapshot: Path = SnapshotOption,
    tenant: str = typer.Option(..., help="Tenant whose candidates to list."),
    log_level: Optional[str] = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print a tenant's candidates in recruiting-board order."""
    container = _open(snapshot, config=None, log_level=log_level)
    for candidate in rank_candidates(container.store().list_by_tenant(tenant)):
        score = candidate.evaluation.score if candidate.evaluation else "-"
        typer.echo(f"{candidate.id}\t{candidate.status.value}\t{score}\t{candidate.name}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
