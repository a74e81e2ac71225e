"""
Integration tests for the full conversion pipeline.

Runs through the SQLite repositories, the local file store and the JSON Lines
notifier. The pdflatex tests run a real compiler and are skipped when it is
not installed.
"""

import shutil

import pytest

from latex_converter.contexts.conversion import ConversionOrchestrator, ConversionRequest
from latex_converter.contexts.submission.notifications import DEFAULT_ERROR_OCCURRED, JsonlNotifier
from latex_converter.contexts.submission.records import FileStage, Genre
from latex_converter.utils.settings import SETTING_PATH_EXECUTABLE, PluginSettings

PDFLATEX = shutil.which("pdflatex")
skip_if_no_pdflatex = pytest.mark.skipif(
    PDFLATEX is None, reason="pdflatex not installed - install TeX Live, MiKTeX, or MacTeX"
)

PAPER_TEX = r"""
\documentclass{article}
\input{macros}
\begin{document}
\section{Introduction}
\label{sec:intro}
\hello{} See section \ref{sec:intro}.
\end{document}
"""

BROKEN_TEX = r"""
\documentclass{article}
\begin{document}
This has an \undefinedcommand{test} and never ends
"""


def _convert(database, storage, settings, notifier, temp_root, submission_file_id, user_id=1):
    request = ConversionRequest.resolve(
        submission_file_id, database.submissions, database.submission_files
    )
    orchestrator = ConversionOrchestrator(
        request,
        user_id=user_id,
        latex_executable=settings.latex_executable(request.context_id),
        storage=storage,
        submissions=database.submissions,
        submission_files=database.submission_files,
        notifier=notifier,
        temp_root=temp_root,
        genre_ids=settings.genre_ids(request.context_id),
    )
    return orchestrator, orchestrator.process()


@pytest.fixture
def settings(tmp_path):
    return PluginSettings(tmp_path / "config" / "settings.yaml")


@pytest.fixture
def jsonl_notifier(tmp_path):
    return JsonlNotifier(tmp_path / "logs" / "notifications.log")


@pytest.mark.integration
def test_paper_with_aux_and_bbl_outputs(
    submissions, database, storage, settings, jsonl_notifier, temp_root, fake_latex
):
    settings.set(1, SETTING_PATH_EXECUTABLE, str(fake_latex(produces=("pdf", "aux", "bbl"))))
    submission_id = submissions.add_submission(context_id=1)
    main = submissions.add_file(
        submission_id, {"en": "paper.tex"}, file_stage=FileStage.PRODUCTION_READY
    )
    submissions.add_file(submission_id, {"en": "macros.tex"}, depends_on=main.id)

    orchestrator, result = _convert(
        database, storage, settings, jsonl_notifier, temp_root, main.id
    )

    assert result.to_dict() == {"status": True, "submissionId": submission_id}
    new_main = database.submission_files.get(orchestrator.outcome.main_submission_file_id)
    assert new_main.display_name == "paper.pdf"
    assert new_main.file_stage == FileStage.PRODUCTION_READY

    dependents = database.submission_files.list_by_association(submission_id, new_main.id)
    assert {record.display_name for record in dependents} == {"paper.aux", "paper.bbl"}
    assert all(record.genre_id == Genre.OTHER for record in dependents)
    assert all((storage.base_dir / record.path).is_file() for record in [new_main, *dependents])
    assert jsonl_notifier.recent() == []
    assert list(temp_root.iterdir()) == []


@pytest.mark.integration
def test_unconfigured_context_notifies_user(
    submissions, database, storage, settings, jsonl_notifier, temp_root
):
    submission_id = submissions.add_submission(context_id=5)
    main = submissions.add_file(submission_id, {"en": "paper.tex"})

    _, result = _convert(database, storage, settings, jsonl_notifier, temp_root, main.id, user_id=9)

    assert result.success is False
    (notification,) = jsonl_notifier.recent()
    assert notification["user_id"] == 9
    assert notification["message_key"].endswith("executable.notConfigured")
    assert list(temp_root.iterdir()) == []


@pytest.mark.integration
def test_failed_run_writes_one_generic_notification(
    submissions, database, storage, settings, jsonl_notifier, temp_root, fake_latex
):
    settings.set(1, SETTING_PATH_EXECUTABLE, str(fake_latex(produces=())))
    submission_id = submissions.add_submission(context_id=1)
    main = submissions.add_file(submission_id, {"en": "paper.tex"})

    _, result = _convert(database, storage, settings, jsonl_notifier, temp_root, main.id)

    assert result.success is False
    assert [item["message_key"] for item in jsonl_notifier.recent()] == [DEFAULT_ERROR_OCCURRED]
    assert database.submission_files.list_by_submission(submission_id) == [main]


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_pdflatex
def test_real_pdflatex_produces_pdf(
    submissions, database, storage, settings, jsonl_notifier, temp_root
):
    settings.set(1, SETTING_PATH_EXECUTABLE, PDFLATEX)
    submission_id = submissions.add_submission(context_id=1)
    main = submissions.add_file(submission_id, {"en": "paper.tex"}, content=PAPER_TEX)
    submissions.add_file(
        submission_id,
        {"en": "macros.tex"},
        content=r"\newcommand{\hello}{Hello World}",
        depends_on=main.id,
    )

    orchestrator, result = _convert(
        database, storage, settings, jsonl_notifier, temp_root, main.id
    )

    assert result.success, jsonl_notifier.recent()
    assert orchestrator.outcome.is_log_fallback is False
    new_main = database.submission_files.get(orchestrator.outcome.main_submission_file_id)
    assert new_main.mimetype == "application/pdf"
    assert (storage.base_dir / new_main.path).read_bytes().startswith(b"%PDF")

    dependent_names = {
        record.display_name
        for record in database.submission_files.list_by_association(submission_id, new_main.id)
    }
    assert "paper.log" in dependent_names
    assert "paper.aux" in dependent_names


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_pdflatex
def test_real_pdflatex_failure_returns_log(
    submissions, database, storage, settings, jsonl_notifier, temp_root
):
    settings.set(1, SETTING_PATH_EXECUTABLE, PDFLATEX)
    submission_id = submissions.add_submission(context_id=1)
    main = submissions.add_file(submission_id, {"en": "broken.tex"}, content=BROKEN_TEX)

    orchestrator, result = _convert(
        database, storage, settings, jsonl_notifier, temp_root, main.id
    )

    assert result.success is True
    assert orchestrator.outcome.is_log_fallback is True
    new_main = database.submission_files.get(orchestrator.outcome.main_submission_file_id)
    assert new_main.display_name == "broken.log"
    assert "Undefined control sequence" in (storage.base_dir / new_main.path).read_text(
        encoding="latin-1"
    )
