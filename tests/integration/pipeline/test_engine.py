from __future__ import annotations

"""
Integration tests for the Orchestration Pipeline.

Runs the full discovery, extraction, compilation and attachment flow
against the fake compiler and checks the resulting RunResult, the
filesystem side effects and the collaborator callbacks.
"""

import os
import shutil
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

from thriftbuild.core.pipeline.engine import run_pipeline
from thriftbuild.domain.pipeline_models import RunStatus


class RecordingCollaborator:
    """Collects registration callbacks for assertions."""

    def __init__(self) -> None:
        self.source_roots: List[str] = []
        self.resource_roots: List[Tuple[str, List[str], List[str]]] = []

    def register_generated_source_root(self, path: str) -> None:
        self.source_roots.append(path)

    def register_resource_root(self, path: str, includes: List[str], excludes: List[str]) -> None:
        self.resource_roots.append((path, includes, excludes))


@pytest.fixture
def collaborator() -> RecordingCollaborator:
    return RecordingCollaborator()


def _output_dir(project: Path) -> Path:
    return project / "target" / "generated-sources" / "thrift"


def _scratch_dir(project: Path) -> Path:
    return project / "target" / "thrift-dependencies"

# -----------------------------------------------------------------------------
# NOTHING TO DO
# -----------------------------------------------------------------------------

def test_missing_source_root_is_no_files(
        tmp_path: Path, fake_thrift: str, collaborator: RecordingCollaborator
) -> None:
    result = run_pipeline({"base_dir": str(tmp_path), "executable": fake_thrift}, collaborator)

    assert result.status == RunStatus.NO_FILES_FOUND
    assert result.ok is True
    assert "does not exist" in result.summary["reason"]
    assert collaborator.source_roots == []
    assert not (tmp_path / "target").exists()


def test_empty_source_root_is_no_files(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    source_root = thrift_project / "src" / "main" / "thrift"
    for f in source_root.iterdir():
        f.unlink()
    (source_root / "README.md").write_text("no schemas here", encoding="utf-8")

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.NO_FILES_FOUND
    assert result.summary["reason"] == "No thrift files to compile."
    assert not _output_dir(thrift_project).exists()
    assert collaborator.resource_roots == []


def test_exclude_everything_is_no_files(
        base_config: Dict[str, Any], collaborator: RecordingCollaborator
) -> None:
    base_config["exclude_patterns"] = ["**/*"]
    assert run_pipeline(base_config, collaborator).status == RunStatus.NO_FILES_FOUND

# -----------------------------------------------------------------------------
# SUCCESS
# -----------------------------------------------------------------------------

def test_success_compiles_and_registers(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    result = run_pipeline(base_config, collaborator)

    out = _output_dir(thrift_project)
    assert result.status == RunStatus.SUCCESS, result.error
    assert result.output_dir == str(out)
    assert len(result.schema_files) == 2
    assert (out / "shared" / "SharedService.java").is_file()
    assert (out / "tutorial" / "InvalidOperation.java").is_file()
    assert not (out / "gen-java").exists()

    source_root = str(thrift_project / "src" / "main" / "thrift")
    assert collaborator.source_roots == [str(out)]
    assert collaborator.resource_roots == [(source_root, ["**/*.thrift"], [])]
    assert result.summary["compiled"] == 2
    assert result.summary["scope"] == "main"


def test_output_dir_is_cleaned_before_compiling(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    out = _output_dir(thrift_project)
    out.mkdir(parents=True)
    (out / "Orphan.java").write_text("stale", encoding="utf-8")

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.SUCCESS
    assert not (out / "Orphan.java").exists()


def test_repeated_runs_are_stable(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    def snapshot() -> List[str]:
        out = _output_dir(thrift_project)
        return sorted(os.path.relpath(os.path.join(d, f), out) for d, _, fs in os.walk(out) for f in fs)

    run_pipeline(base_config, collaborator)
    first = snapshot()
    run_pipeline(base_config, collaborator)

    assert snapshot() == first


def test_dependency_archive_feeds_import_path(
        base_config: Dict[str, Any],
        thrift_project: Path,
        shared_archive: Path,
        collaborator: RecordingCollaborator,
) -> None:
    """'tutorial.thrift' resolves its include only through the extracted archive."""
    (thrift_project / "src" / "main" / "thrift" / "shared.thrift").unlink()
    base_config["dependency_archives"] = [str(shared_archive)]

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.SUCCESS, result.error
    assert result.summary["extracted_import_roots"] == 1
    assert (_output_dir(thrift_project) / "tutorial" / "Calculator.java").is_file()
    assert not _scratch_dir(thrift_project).exists()


def test_host_supplied_archive_is_used(
        base_config: Dict[str, Any],
        thrift_project: Path,
        shared_archive: Path,
        collaborator: RecordingCollaborator,
) -> None:
    (thrift_project / "src" / "main" / "thrift" / "shared.thrift").unlink()

    result = run_pipeline(base_config, collaborator, dependency_archives=[str(shared_archive)])
    assert result.status == RunStatus.SUCCESS, result.error


def test_unresolved_include_is_compile_failure(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    (thrift_project / "src" / "main" / "thrift" / "shared.thrift").unlink()

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.COMPILE_FAILURE
    assert result.exit_status == 1
    assert "tutorial.thrift" in result.error
    assert result.ok is False
    assert collaborator.source_roots == []


def test_additional_import_path(
        base_config: Dict[str, Any],
        thrift_project: Path,
        collaborator: RecordingCollaborator,
) -> None:
    shared_dir = thrift_project / "common"
    shared_dir.mkdir()
    shutil.move(str(thrift_project / "src" / "main" / "thrift" / "shared.thrift"), str(shared_dir))
    base_config["import_paths"] = ["common"]

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.SUCCESS, result.error
    assert os.path.realpath(shared_dir) in result.import_paths


def test_test_scope_uses_test_layout(
        base_config: Dict[str, Any], thrift_project: Path, idl_dir: Path, collaborator: RecordingCollaborator
) -> None:
    test_root = thrift_project / "src" / "test" / "thrift"
    test_root.mkdir(parents=True)
    shutil.copy(idl_dir / "shared.thrift", test_root / "shared.thrift")
    base_config["scope"] = "test"

    result = run_pipeline(base_config, collaborator)

    test_out = thrift_project / "target" / "generated-test-sources" / "thrift"
    assert result.status == RunStatus.SUCCESS, result.error
    assert (test_out / "shared" / "SharedService.java").is_file()
    assert not _output_dir(thrift_project).exists()
    assert collaborator.source_roots == [str(test_out)]

# -----------------------------------------------------------------------------
# FAILURES
# -----------------------------------------------------------------------------

def test_forced_compiler_failure_reports_status(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    (thrift_project / "src" / "main" / "thrift" / "aaa.thrift").write_text("#exit 4\n", encoding="utf-8")

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.COMPILE_FAILURE
    assert result.exit_status == 4
    assert result.summary["failed_file"].endswith("aaa.thrift")
    assert not _scratch_dir(thrift_project).exists()


def test_missing_executable_is_error(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    base_config["executable"] = str(thrift_project / "no-such-thrift")

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.ERROR
    assert result.error_kind == "ProcessInvocationError"
    assert not _scratch_dir(thrift_project).exists()


def test_bad_archive_is_error(
        base_config: Dict[str, Any], tmp_path: Path, collaborator: RecordingCollaborator
) -> None:
    bogus = tmp_path / "bogus.jar"
    bogus.write_text("garbage", encoding="utf-8")
    base_config["dependency_archives"] = [str(bogus)]

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.ERROR
    assert result.error_kind == "InvalidArgumentError"
    assert collaborator.source_roots == []


def test_corrupted_archive_entry_is_error(
        base_config: Dict[str, Any],
        thrift_project: Path,
        tmp_path: Path,
        collaborator: RecordingCollaborator,
) -> None:
    """A readable archive whose schema entry fails its CRC check is reported, not raised."""
    damaged = tmp_path / "damaged.jar"
    with zipfile.ZipFile(damaged, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("idl/damaged.thrift", "namespace java damaged")
    damaged.write_bytes(damaged.read_bytes().replace(b"namespace java damaged", b"namespace java DAMAGED"))
    base_config["dependency_archives"] = [str(damaged)]

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.ERROR
    assert result.error_kind == "InvalidArgumentError"
    assert "was not a readable artifact" in result.error
    assert collaborator.source_roots == []
    assert not _scratch_dir(thrift_project).exists()


def test_output_dir_as_file_is_configuration_error(
        base_config: Dict[str, Any], thrift_project: Path, collaborator: RecordingCollaborator
) -> None:
    (thrift_project / "target").mkdir()
    (thrift_project / "target" / "out").write_text("", encoding="utf-8")
    base_config["output_dir"] = "target/out"

    result = run_pipeline(base_config, collaborator)

    assert result.status == RunStatus.ERROR
    assert result.error_kind == "ConfigurationError"
