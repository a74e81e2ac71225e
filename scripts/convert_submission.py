#!/usr/bin/env python3
"""
LaTeX Submission Conversion CLI

Converts LaTeX submission files to PDF and manages the local submission store
the converter works against.

Commands:
    convert         - Convert a LaTeX submission file and attach the output
    add-submission  - Create a submission in a context
    add-file        - Add a file to a submission (main file or dependent)
    show            - Show a submission file and its dependent files
    set-executable  - Configure the LaTeX executable for a context
    notifications   - Show recent user notifications

Examples:\n

    convert_submission.py add-submission --context-id 1

    convert_submission.py add-file paper.tex --submission-id 1

    convert_submission.py add-file fig1.png --submission-id 1 --depends-on 1 --name img/fig1.png

    convert_submission.py set-executable 1 /usr/bin/pdflatex

    convert_submission.py convert 1
"""

import json
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from latex_converter.contexts.conversion import ConversionOrchestrator, ConversionRequest
from latex_converter.contexts.conversion.compiler import find_executable_problem
from latex_converter.contexts.conversion.logger import setup_conversion_logger
from latex_converter.contexts.conversion.submission_writer import mimetype_for
from latex_converter.contexts.submission import (
    AssocType,
    FileStage,
    Genre,
    NewSubmissionFile,
    PersistenceError,
    RecordNotFoundError,
)
from latex_converter.contexts.submission.notifications import JsonlNotifier
from latex_converter.contexts.submission.repository import SubmissionDatabase
from latex_converter.contexts.submission.storage import LocalFileStorage
from latex_converter.utils.settings import SETTING_PATH_EXECUTABLE, PluginSettings
from latex_converter.utils.timestamp import format_timestamp, now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

app = typer.Typer(
    help="Convert LaTeX submission files to PDF and attach the output to the submission",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _open_store() -> tuple[SubmissionDatabase, LocalFileStorage]:
    database = SubmissionDatabase.initialize()
    return database, LocalFileStorage(database)


@app.command("convert")
def convert_command(
    submission_file_id: Annotated[int, typer.Argument(help="Submission file id of the LaTeX main file")],
    user_id: Annotated[
        int, typer.Option("--user-id", "-u", help="User notified about failures")
    ] = 1,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug output, including compiler output")
    ] = False,
):
    """
    Convert a LaTeX submission file to PDF.

    Prints the JSON result ({"status": ..., "submissionId": ...}) and exits
    with 0 on success, 1 on failure.
    """
    database, storage = _open_store()
    settings = PluginSettings()

    try:
        request = ConversionRequest.resolve(
            submission_file_id, database.submissions, database.submission_files
        )
    except (RecordNotFoundError, PersistenceError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    latex_executable = settings.latex_executable(request.context_id)
    log_file = setup_conversion_logger(
        LOGS_PATH / f"convert_{now()}", latex_executable=latex_executable, verbose=verbose
    )

    orchestrator = ConversionOrchestrator(
        request,
        user_id=user_id,
        latex_executable=latex_executable,
        storage=storage,
        submissions=database.submissions,
        submission_files=database.submission_files,
        notifier=JsonlNotifier(),
        genre_ids=settings.genre_ids(request.context_id),
        verbose=verbose,
    )
    result = orchestrator.process()
    database.close()

    typer.echo(json.dumps(result.to_dict()))
    if result.success:
        outcome = orchestrator.outcome
        label = "log file (no PDF produced)" if outcome.is_log_fallback else "PDF"
        typer.secho(f"✓ Added {label} as submission file {outcome.main_submission_file_id}", fg=typer.colors.GREEN)
        if outcome.dependent_submission_file_ids:
            typer.echo(f"  Dependent files: {outcome.dependent_submission_file_ids}")
    else:
        typer.secho("✗ Conversion failed", fg=typer.colors.RED, bold=True)
    typer.echo(f"  Log: {log_file}")

    raise typer.Exit(code=0 if result.success else 1)


@app.command("add-submission")
def add_submission_command(
    context_id: Annotated[int, typer.Option("--context-id", "-c", help="Context (journal) id")] = 1,
):
    """Create a submission and print its id."""
    database, _ = _open_store()
    submission_id = database.submissions.add(context_id)
    database.close()
    typer.echo(submission_id)


@app.command("add-file")
def add_file_command(
    path: Annotated[Path, typer.Argument(help="File to add", exists=True, dir_okay=False)],
    submission_id: Annotated[int, typer.Option("--submission-id", "-s", help="Owning submission")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Display name (may contain sub-directories for dependents)"),
    ] = None,
    locale: Annotated[str, typer.Option("--locale", "-l", help="Locale of the display name")] = "en",
    depends_on: Annotated[
        Optional[int],
        typer.Option("--depends-on", "-d", help="Submission file id this file is a dependent of"),
    ] = None,
    stage: Annotated[int, typer.Option("--stage", help="File stage for main files")] = int(FileStage.SUBMISSION),
    genre: Annotated[Optional[int], typer.Option("--genre", help="Genre id")] = None,
):
    """Add a file to the local store and create its submission file record."""
    database, storage = _open_store()

    try:
        submission = database.submissions.get(submission_id)
    except RecordNotFoundError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    display_name = name or path.name
    extension = path.suffix.lower()
    destination = (
        f"{database.submissions.submission_dir(submission.context_id, submission.id)}/"
        f"{now()}_{os.urandom(4).hex()}{extension}"
    )
    file_id = storage.store(path.resolve(), destination)

    mimetype = mimetype_for(path.name)
    if depends_on is None:
        file_stage, assoc_type, assoc_id = stage, AssocType.SUBMISSION, submission.id
    else:
        file_stage, assoc_type, assoc_id = FileStage.DEPENDENT, AssocType.SUBMISSION_FILE, depends_on
        authorised = PluginSettings().authorised_mime_types(submission.context_id)
        if authorised and mimetype not in authorised:
            typer.secho(
                f"Warning: {mimetype} is not an authorised dependent type for context "
                f"{submission.context_id} ({', '.join(authorised)})",
                fg=typer.colors.YELLOW,
                err=True,
            )

    fields = NewSubmissionFile(
        submission_id=submission.id,
        file_id=file_id,
        path=destination,
        name={locale: display_name},
        locale=locale,
        mimetype=mimetype,
        file_stage=file_stage,
        genre_id=genre if genre is not None else int(Genre.OTHER),
        assoc_type=assoc_type,
        assoc_id=assoc_id,
    )
    submission_file_id = database.submission_files.create(fields)
    database.close()
    typer.echo(submission_file_id)


@app.command("show")
def show_command(
    submission_file_id: Annotated[int, typer.Argument(help="Submission file id")],
):
    """Show a submission file and the files that depend on it."""
    database, _ = _open_store()

    try:
        record = database.submission_files.get(submission_file_id)
    except RecordNotFoundError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\n{record.id}: {record.display_name}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"  Names: {record.name}")
    typer.echo(f"  Path: {record.path}")
    typer.echo(f"  MIME type: {record.mimetype}")
    typer.echo(f"  Stage: {record.file_stage}  Genre: {record.genre_id}")

    dependents = database.submission_files.list_by_association(record.submission_id, record.id)
    if dependents:
        typer.echo("\nDependent files:")
        for dependent in dependents:
            typer.echo(f"  {dependent.id}: {dependent.display_name} (genre {dependent.genre_id})")
    typer.echo("")
    database.close()


@app.command("set-executable")
def set_executable_command(
    context_id: Annotated[int, typer.Argument(help="Context (journal) id")],
    executable: Annotated[str, typer.Argument(help="Absolute path to the LaTeX executable")],
):
    """Configure the LaTeX executable used for a context."""
    problem = find_executable_problem(executable)
    if problem:
        typer.secho(f"Warning: {problem}", fg=typer.colors.YELLOW, err=True)

    settings = PluginSettings()
    settings.set(context_id, SETTING_PATH_EXECUTABLE, executable)
    settings.save()
    typer.echo(f"Context {context_id}: {SETTING_PATH_EXECUTABLE} = {executable}")


@app.command("notifications")
def notifications_command(
    user_id: Annotated[Optional[int], typer.Option("--user-id", "-u", help="Only this user")] = None,
    n: Annotated[int, typer.Option("-n", help="Number of notifications", min=1)] = 10,
):
    """Show the most recent user notifications."""
    for item in JsonlNotifier().recent(n, user_id=user_id):
        typer.echo(
            f"{format_timestamp(item['timestamp'])}  user {item['user_id']}  {item['contents']}"
        )


if __name__ == "__main__":
    app()
