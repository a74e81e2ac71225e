"""
Conversion Orchestrator

Runs one conversion of a LaTeX submission file to PDF:

    Init -> DirectoryCreated -> FilesResolved -> FilesCopied -> Converted
         -> OutputResolved -> FilesWritten -> Done

Any failing step ends the run with one generic error notification for the
user and a failure result. The working directory is removed before process()
returns, on every path. Details of what went wrong only go to the log.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from latex_converter.contexts.conversion.compiler import invoke_latex, read_log_diagnostics
from latex_converter.contexts.conversion.exceptions import (
    ConfigurationMissingError,
    ConversionError,
    InvocationError,
    PersistenceError,
)
from latex_converter.contexts.conversion.logger import (
    _log_error,
    _log_info,
    _log_success,
    _log_warning,
    log_conversion_start,
    log_invocation_result,
)
from latex_converter.contexts.conversion.materializer import materialize
from latex_converter.contexts.conversion.output_resolver import expected_names, resolve_output
from latex_converter.contexts.conversion.submission_writer import SubmissionFileWriter
from latex_converter.contexts.conversion.workspace import WorkingDirectory
from latex_converter.contexts.submission.exceptions import PersistenceError as RepositoryError
from latex_converter.contexts.submission.interfaces import (
    FileStorage,
    Notifier,
    SubmissionFileRepository,
    SubmissionRepository,
)
from latex_converter.contexts.submission.notifications import (
    DEFAULT_ERROR_OCCURRED,
    EXECUTABLE_NOT_CONFIGURED,
    NOTIFICATION_TYPE_ERROR,
)
from latex_converter.contexts.submission.records import Submission, SubmissionFileRecord
from latex_converter.utils.pdf_processing import page_count


class ConversionState(Enum):
    INIT = "init"
    DIRECTORY_CREATED = "directory_created"
    FILES_RESOLVED = "files_resolved"
    FILES_COPIED = "files_copied"
    CONVERTED = "converted"
    OUTPUT_RESOLVED = "output_resolved"
    FILES_WRITTEN = "files_written"
    DONE = "done"


@dataclass(frozen=True)
class ConversionRequest:
    """A submission file to convert, resolved to its submission and context."""

    submission_file: SubmissionFileRecord
    submission: Submission

    @classmethod
    def resolve(
        cls,
        submission_file_id: int,
        submissions: SubmissionRepository,
        submission_files: SubmissionFileRepository,
    ) -> "ConversionRequest":
        """
        Look up a submission file and its owning submission.

        Raises:
            RecordNotFoundError: If either record doesn't exist
        """
        submission_file = submission_files.get(submission_file_id)
        submission = submissions.get(submission_file.submission_id)
        return cls(submission_file=submission_file, submission=submission)

    @property
    def submission_file_id(self) -> int:
        return self.submission_file.id

    @property
    def submission_id(self) -> int:
        return self.submission.id

    @property
    def context_id(self) -> int:
        return self.submission.context_id


@dataclass(frozen=True)
class ConversionResult:
    success: bool
    submission_id: int

    def to_dict(self) -> Dict[str, object]:
        """JSON payload returned to the handler."""
        return {"status": self.success, "submissionId": self.submission_id}


@dataclass
class ConversionOutcome:
    """Ids created by a successful run, kept for callers that want to show them."""

    main_submission_file_id: Optional[int] = None
    dependent_submission_file_ids: List[int] = field(default_factory=list)
    is_log_fallback: bool = False


class ConversionOrchestrator:
    """
    Converts one LaTeX submission file and attaches the output to the submission.

    All host state comes in through the constructor.

    Args:
        request: The resolved submission file to convert
        user_id: User who receives failure notifications
        latex_executable: Path to the LaTeX executable configured for the context
        storage: File storage gateway (its base_dir is where record paths point)
        submissions: Submission repository (for the submission's storage directory)
        submission_files: Submission file repository
        notifier: User notification gateway
        temp_root: Parent of the working directory (default: system temp directory)
        genre_ids: Genre id overrides for dependent files
        verbose: Also log the raw compiler output
    """

    def __init__(
        self,
        request: ConversionRequest,
        *,
        user_id: int,
        latex_executable: Optional[str],
        storage: FileStorage,
        submissions: SubmissionRepository,
        submission_files: SubmissionFileRepository,
        notifier: Notifier,
        temp_root: Optional[Path] = None,
        genre_ids: Optional[Mapping[str, int]] = None,
        verbose: bool = False,
    ):
        self.request = request
        self.user_id = user_id
        self.latex_executable = latex_executable
        self.storage = storage
        self.submissions = submissions
        self.submission_files = submission_files
        self.notifier = notifier
        self.temp_root = temp_root
        self.genre_ids = genre_ids
        self.verbose = verbose

        self.state = ConversionState.INIT
        self.outcome = ConversionOutcome()
        self.working_dir: Optional[Path] = None

    def process(self) -> ConversionResult:
        """Run the conversion. Never raises for expected failures; see the result."""
        try:
            self._check_configuration()
        except ConfigurationMissingError as e:
            _log_error(str(e))
            self._notify(EXECUTABLE_NOT_CONFIGURED)
            self._advance(ConversionState.DONE)
            return self._result(False)

        try:
            with WorkingDirectory.create(root=self.temp_root) as workspace:
                self.working_dir = workspace.path
                self._advance(ConversionState.DIRECTORY_CREATED)
                self._convert(workspace.path)
        except (ConversionError, RepositoryError) as e:
            _log_error(
                f"Conversion of submission file {self.request.submission_file_id} failed "
                f"after {self.state.value}: {type(e).__name__}: {e}"
            )
            self._notify(DEFAULT_ERROR_OCCURRED)
            self._advance(ConversionState.DONE)
            return self._result(False)

        self._advance(ConversionState.DONE)
        _log_success(
            f"Submission file {self.request.submission_file_id} converted to "
            f"submission file {self.outcome.main_submission_file_id}"
        )
        return self._result(True)

    def _check_configuration(self) -> None:
        """Raises ConfigurationMissingError when the context has no LaTeX executable."""
        if not self.latex_executable:
            raise ConfigurationMissingError(self.request.context_id)

    def _convert(self, working_dir: Path) -> None:
        main = self.request.submission_file

        dependents = self.submission_files.list_by_association(main.submission_id, main.id)
        self._advance(ConversionState.FILES_RESOLVED)

        materialized = materialize(main, dependents, self.storage.base_dir, working_dir)
        self._advance(ConversionState.FILES_COPIED)

        main_file_name = materialized.main_file_name
        stem, pdf_name, log_name = expected_names(main_file_name)

        log_conversion_start(main.id, main_file_name, materialized.dependent_names, working_dir)
        try:
            invocation = invoke_latex(working_dir, self.latex_executable, main_file_name)
        except InvocationError as e:
            # Nothing ran; the output check below reports the failure
            _log_error(str(e))
        else:
            errors, warnings = read_log_diagnostics(working_dir / log_name)
            log_invocation_result(main_file_name, invocation, errors, warnings, self.verbose)
        self._advance(ConversionState.CONVERTED)

        output = resolve_output(working_dir, stem, pdf_name, log_name, main_file_name)
        if output.is_fallback:
            _log_warning(f"No {pdf_name} produced, attaching {log_name} instead")
        else:
            _log_info(f"Produced {pdf_name} ({page_count(output.main_artifact) or '?'} pages)")
        self._advance(ConversionState.OUTPUT_RESOLVED)

        writer = SubmissionFileWriter(
            original=main,
            submission_dir=self.submissions.submission_dir(
                self.request.context_id, self.request.submission_id
            ),
            storage=self.storage,
            repository=self.submission_files,
            genre_ids=self.genre_ids,
        )
        new_id = writer.write_main(output.main_artifact)
        if new_id is None:
            raise PersistenceError(f"{output.main_artifact.name} was not added to the submission")

        self.outcome.main_submission_file_id = new_id
        self.outcome.is_log_fallback = output.is_fallback
        if output.dependent_artifacts:
            self.outcome.dependent_submission_file_ids = writer.write_dependents(
                output.dependent_artifacts, new_id
            )
        self._advance(ConversionState.FILES_WRITTEN)

    def _advance(self, state: ConversionState) -> None:
        self.state = state

    def _notify(self, message_key: str) -> None:
        self.notifier.notify(self.user_id, NOTIFICATION_TYPE_ERROR, message_key)

    def _result(self, success: bool) -> ConversionResult:
        return ConversionResult(success=success, submission_id=self.request.submission_id)
