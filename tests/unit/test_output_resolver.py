"""Unit tests for choosing the main artifact and collecting dependent artifacts."""

import pytest

from latex_converter.contexts.conversion.exceptions import NoOutputProducedError
from latex_converter.contexts.conversion.output_resolver import expected_names, resolve_output


def _touch(directory, *names):
    for name in names:
        (directory / name).write_text(name)


def _resolve(working_dir, main_file_name="paper.tex"):
    stem, pdf_name, log_name = expected_names(main_file_name)
    return resolve_output(working_dir, stem, pdf_name, log_name, main_file_name)


@pytest.mark.unit
def test_expected_names():
    assert expected_names("paper.tex") == ("paper", "paper.pdf", "paper.log")
    assert expected_names("my.thesis.tex") == ("my.thesis", "my.thesis.pdf", "my.thesis.log")


@pytest.mark.unit
def test_pdf_is_main_artifact_and_others_are_dependents(tmp_path):
    _touch(tmp_path, "paper.tex", "paper.pdf", "paper.aux", "paper.bbl", "paper.log")

    output = _resolve(tmp_path)

    assert output.main_artifact == tmp_path / "paper.pdf"
    assert output.is_fallback is False
    assert [path.name for path in output.dependent_artifacts] == ["paper.aux", "paper.bbl", "paper.log"]


@pytest.mark.unit
def test_dependents_exclude_source_and_main_artifact(tmp_path):
    _touch(tmp_path, "paper.tex", "paper.pdf", "paper.aux", "paper.bbl")

    output = _resolve(tmp_path)

    assert {path.name for path in output.dependent_artifacts} == {"paper.aux", "paper.bbl"}


@pytest.mark.unit
def test_log_is_fallback_when_no_pdf(tmp_path):
    _touch(tmp_path, "paper.tex", "paper.log", "paper.aux")

    output = _resolve(tmp_path)

    assert output.main_artifact == tmp_path / "paper.log"
    assert output.is_fallback is True
    assert [path.name for path in output.dependent_artifacts] == ["paper.aux"]


@pytest.mark.unit
def test_neither_pdf_nor_log_raises(tmp_path):
    _touch(tmp_path, "paper.tex", "paper.aux")

    with pytest.raises(NoOutputProducedError):
        _resolve(tmp_path)


@pytest.mark.unit
def test_files_not_starting_with_stem_are_ignored(tmp_path):
    _touch(tmp_path, "paper.tex", "paper.pdf", "fig1.png", "style.sty")

    output = _resolve(tmp_path)

    assert output.dependent_artifacts == []


@pytest.mark.unit
def test_directories_are_not_artifacts(tmp_path):
    _touch(tmp_path, "paper.tex", "paper.pdf")
    (tmp_path / "paper_figures").mkdir()

    output = _resolve(tmp_path)

    assert output.dependent_artifacts == []
