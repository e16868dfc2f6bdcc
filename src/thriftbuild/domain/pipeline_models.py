from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result of a complete run and the factory functions the
orchestrator uses to build it, so interface layers (CLI, host builds)
receive one uniform structure whatever the outcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class RunStatus(Enum):
    """Terminal outcome of a run."""
    NO_FILES_FOUND = "NO_FILES_FOUND"
    SUCCESS = "SUCCESS"
    COMPILE_FAILURE = "COMPILE_FAILURE"
    ERROR = "ERROR"

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RunResult:
    """
    Unified result of one orchestrated run.

    Attributes:
        status: Terminal outcome.
        exit_status: Compiler exit status (non-zero only for COMPILE_FAILURE).
        error_kind: Error class name for ERROR results.
        error: Human-readable message for COMPILE_FAILURE and ERROR results.
        source_root: Absolute schema source root of the run.
        output_dir: Absolute output directory of the run.
        schema_files: Discovered schema files, sorted.
        import_paths: Effective import path, sorted.
        summary: Execution statistics for reporting.
    """
    status: RunStatus
    exit_status: int = 0
    error_kind: str = ""
    error: str = ""

    source_root: str = ""
    output_dir: str = ""
    schema_files: List[str] = field(default_factory=list)
    import_paths: List[str] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True for outcomes that must not fail the surrounding build."""
        return self.status in (RunStatus.SUCCESS, RunStatus.NO_FILES_FOUND)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_no_files_result(source_root: str, output_dir: str, reason: str) -> RunResult:
    """Create a result for a run that had nothing to compile."""
    return RunResult(
        status=RunStatus.NO_FILES_FOUND,
        source_root=source_root,
        output_dir=output_dir,
        summary={"reason": reason},
    )


def create_success_result(
        source_root: str,
        output_dir: str,
        schema_files: Iterable[str],
        import_paths: Iterable[str],
        summary_extra: Optional[Dict[str, Any]] = None,
) -> RunResult:
    """Create a result for a run whose every invocation and relocation succeeded."""
    return RunResult(
        status=RunStatus.SUCCESS,
        source_root=source_root,
        output_dir=output_dir,
        schema_files=sorted(schema_files),
        import_paths=sorted(import_paths),
        summary=summary_extra or {},
    )


def create_compile_failure_result(
        exit_status: int,
        source_root: str,
        output_dir: str,
        schema_files: Iterable[str],
        import_paths: Iterable[str],
        failed_file: Optional[str] = None,
) -> RunResult:
    """Create a result carrying the first non-zero compiler exit status."""
    message = f"thrift did not exit cleanly (status {exit_status})."
    if failed_file:
        message += f" Failed on {failed_file}."
    message += " Review output for more information."
    return RunResult(
        status=RunStatus.COMPILE_FAILURE,
        exit_status=exit_status,
        error=message,
        source_root=source_root,
        output_dir=output_dir,
        schema_files=sorted(schema_files),
        import_paths=sorted(import_paths),
        summary={"failed_file": failed_file} if failed_file else {},
    )


def create_error_result(
        error_kind: str,
        error: str,
        source_root: str = "",
        output_dir: str = "",
) -> RunResult:
    """Create a result for a run aborted by an exception."""
    return RunResult(
        status=RunStatus.ERROR,
        error_kind=error_kind,
        error=error,
        source_root=source_root,
        output_dir=output_dir,
    )
