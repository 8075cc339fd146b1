"""Typer based command line entry points for RecruitFlow."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import typer

from recruitflow.core.errors import ImportValidationError
from recruitflow.core.logger import get_logger, set_log_level
from recruitflow.core.profiles import ensure_work_dirs
from recruitflow.services.admin_api.client import AdminApiClient
from recruitflow.services.admin_api.config import DEFAULT_PROFILE, load_mailbox_dir, resolve_config
from recruitflow.services.admin_api.schemas import ImportOptions
from recruitflow.services.export import EXPORT_FORMATS, export_module
from recruitflow.services.importer import ImportSession, ImportStep, PendingFileMailbox, write_import_report
from recruitflow.services.importer.acquisition import is_resume_file
from recruitflow.services.importer.fields import visible_fields
from recruitflow.services.importer.mapping import unmapped_headers

LOGGER = get_logger()

MAX_PRINTED_ERRORS = 10

app = typer.Typer(help="Bulk import and export tooling for the RecruitFlow admin API.")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    try:
        set_log_level(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _resolve_client(profile: str) -> AdminApiClient:
    return AdminApiClient.from_profile(profile)


def _handle_error(exc: Exception) -> None:
    LOGGER.error("recruitflow command failed: %s", exc, exc_info=True)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _parse_overrides(values: List[str]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise typer.BadParameter(f"--map expects field=Header, got {item!r}")
        field_name, header = item.split("=", 1)
        overrides[field_name.strip()] = header.strip()
    return overrides


def _echo_lines(lines: List[str], *, color: str | None = None) -> None:
    for line in lines[:MAX_PRINTED_ERRORS]:
        typer.secho(f"  {line}", fg=color)
    if len(lines) > MAX_PRINTED_ERRORS:
        typer.secho(f"  ... and {len(lines) - MAX_PRINTED_ERRORS} more", fg=color)


def _echo_mapping(session: ImportSession) -> None:
    typer.echo("Field mapping:")
    for definition in session.field_definitions:
        header = session.mapping.get(definition.field_name) or "(skip)"
        marker = "*" if definition.is_required else " "
        typer.echo(f"  {marker} {definition.display_label:30} <- {header}")
    extra = unmapped_headers(session.headers, session.mapping)
    if extra:
        typer.echo(f"  Unmapped columns: {', '.join(extra)}")


def _write_report(session: ImportSession, report_dir: Optional[Path]) -> None:
    if report_dir is None:
        return
    report_path, reject_path = write_import_report(session, report_dir)
    typer.echo(f"Report: {report_path}")
    if reject_path:
        typer.echo(f"Rejected rows: {reject_path}")


@app.command("fields")
def cmd_fields(
    module: str = typer.Option(..., "--module", help="Entity type, e.g. job-seekers"),
    profile: str = typer.Option(DEFAULT_PROFILE, "--profile", help="Admin API profile name"),
) -> None:
    """List the visible field definitions of a module in display order."""

    try:
        client = _resolve_client(profile)
    except Exception as exc:
        _handle_error(exc)
    try:
        definitions = visible_fields(client.fetch_field_definitions(module))
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc)
    else:
        if not definitions:
            typer.echo("<no fields>")
        for definition in definitions:
            required = "required" if definition.is_required else ""
            typer.echo(f"{definition.field_name:30} {definition.display_label:30} {definition.field_type:10} {required}")
    finally:
        client.close()


@app.command("stage")
def cmd_stage(
    file: Path = typer.Option(..., "--file", exists=True, dir_okay=False, help="CSV or resume file to hand over"),
    resume: Optional[bool] = typer.Option(None, "--resume/--csv", help="Force resume or CSV handling"),
    content_type: str = typer.Option("", "--content-type", help="MIME type recorded with the file"),
    profile: str = typer.Option(DEFAULT_PROFILE, "--profile", help="Admin API profile name"),
) -> None:
    """Place a file in the pending-file mailbox for the next ``import --from-mailbox``."""

    try:
        mailbox = PendingFileMailbox(load_mailbox_dir(resolve_config(profile)))
        is_resume = resume if resume is not None else is_resume_file(file.name, content_type)
        path = mailbox.put_file(file, content_type=content_type, is_resume=is_resume)
    except Exception as exc:
        _handle_error(exc)
    else:
        kind = "resume" if is_resume else "csv"
        typer.echo(f"Staged {file.name} ({kind}) at {path}")


@app.command("import")
def cmd_import(
    module: str = typer.Option(..., "--module", help="Entity type, e.g. job-seekers"),
    file: Optional[Path] = typer.Option(None, "--file", dir_okay=False, help="CSV file to import"),
    from_mailbox: bool = typer.Option(False, "--from-mailbox", help="Take the staged pending file"),
    resume: Optional[Path] = typer.Option(None, "--resume", exists=True, dir_okay=False, help="Resume to parse"),
    mapping: List[str] = typer.Option([], "--map", help="Override mapping as field=Header (empty header skips)"),
    skip_incomplete: bool = typer.Option(False, "--skip-incomplete", help="Drop rows with errors and continue"),
    update_existing: bool = typer.Option(False, "--update-existing", help="Update records that already exist"),
    skip_duplicates: bool = typer.Option(False, "--skip-duplicates", help="Skip records that already exist"),
    import_new_only: bool = typer.Option(False, "--import-new-only", help="Only create new records"),
    report_dir: Optional[Path] = typer.Option(None, "--report-dir", help="Write a Markdown report here"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate and preview without submitting"),
    profile: str = typer.Option(DEFAULT_PROFILE, "--profile", help="Admin API profile name"),
) -> None:
    """Map, validate and submit a CSV (or parsed resume) to the bulk-import endpoint."""

    sources = [bool(file), from_mailbox, bool(resume)]
    if sum(sources) != 1:
        raise typer.BadParameter("Provide exactly one of --file, --from-mailbox or --resume")
    overrides = _parse_overrides(mapping)

    try:
        client = _resolve_client(profile)
    except Exception as exc:
        _handle_error(exc)
    session = ImportSession(client, mailbox=PendingFileMailbox(load_mailbox_dir(client.config)))
    try:
        if from_mailbox:
            if not session.load_pending():
                typer.secho("No pending file in the mailbox.", fg=typer.colors.YELLOW)
                raise typer.Exit(code=1)
            session.select_module(module)
        else:
            session.select_module(module)
            if resume:
                session.load_resume(resume)
            else:
                session.load_file(file)

        if session.step != ImportStep.MAP:
            typer.secho("Import did not reach the mapping step.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=1)
        typer.echo(f"Parsed {len(session.rows)} rows from {session.source_name}")
        session.set_mappings(overrides)
        _echo_mapping(session)

        try:
            if skip_incomplete:
                dropped = session.skip_incomplete_records()
                if dropped:
                    typer.secho(f"Skipped {dropped} incomplete rows.", fg=typer.colors.YELLOW)
            else:
                session.advance_to_preview()
        except ImportValidationError as exc:
            typer.secho("Validation failed:", fg=typer.colors.RED)
            _echo_lines(exc.result.errors if exc.result else [str(exc)], color=typer.colors.RED)
            _write_report(session, report_dir)
            raise typer.Exit(code=1)

        if session.validation and session.validation.warnings:
            typer.secho("Warnings:", fg=typer.colors.YELLOW)
            _echo_lines(session.validation.warnings, color=typer.colors.YELLOW)

        ready = len(session.valid_rows)
        if dry_run:
            typer.echo(f"Dry run: {ready} records ready for {session.module}.")
            _write_report(session, report_dir)
            return

        options = ImportOptions(
            update_existing=update_existing,
            skip_duplicates=skip_duplicates,
            import_new_only=import_new_only,
        )
        outcome = session.submit(options)
        if outcome is None:
            typer.secho("Import cancelled.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=1)
        typer.secho(
            f"Imported: {outcome.success}  Failed: {outcome.failed}",
            fg=typer.colors.GREEN if not outcome.failed else typer.colors.YELLOW,
        )
        _echo_lines(outcome.errors, color=typer.colors.RED)
        _write_report(session, report_dir)
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc)
    finally:
        session.close()
        client.close()


@app.command("export")
def cmd_export(
    module: str = typer.Option(..., "--module", help="Entity type, e.g. organizations"),
    fields: List[str] = typer.Option([], "--field", help="Field name to include (repeatable)"),
    export_format: str = typer.Option("csv", "--format", help="csv or excel"),
    out: Optional[Path] = typer.Option(None, "--out", help="Destination file"),
    profile: str = typer.Option(DEFAULT_PROFILE, "--profile", help="Admin API profile name"),
) -> None:
    """Export one module's records to CSV or Excel."""

    export_format = export_format.lower()
    if export_format not in EXPORT_FORMATS:
        raise typer.BadParameter("format must be one of csv, excel")
    if out is None:
        suffix = "xlsx" if export_format == "excel" else "csv"
        out = ensure_work_dirs()["out"] / f"{module}.{suffix}"

    try:
        client = _resolve_client(profile)
    except Exception as exc:
        _handle_error(exc)
    try:
        written = export_module(client, module, out, selected_fields=fields, export_format=export_format)
    except Exception as exc:
        if isinstance(exc, typer.Exit):
            raise
        _handle_error(exc)
    else:
        typer.echo(str(written))
    finally:
        client.close()


def main() -> None:  # pragma: no cover - thin wrapper
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
