from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates one compile run:
1. Validates configuration and resolves paths.
2. Discovers schema files below the source root.
3. Extracts schemas bundled in dependency archives (scoped scratch dir).
4. Recreates an empty output directory.
5. Builds the CompileUnit and runs the compiler invoker.
6. Attaches the generated sources and schema resources to the build.
"""

import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Protocol

from thriftbuild.core.compiler.invoker import CompilerInvoker, LineSink
from thriftbuild.core.pipeline.stages.validator import check_parameters, validate_config
from thriftbuild.core.services.extractor import extract_import_roots
from thriftbuild.core.services.scanner import find_schema_files_in_directory
from thriftbuild.domain.compile_models import CompileUnitBuilder
from thriftbuild.domain.constants import RESOURCE_EXCLUDES, RESOURCE_INCLUDES
from thriftbuild.domain.errors import ThriftBuildError
from thriftbuild.domain.pipeline_models import (
    RunResult,
    create_compile_failure_result,
    create_error_result,
    create_no_files_result,
    create_success_result,
)
from thriftbuild.infra.fs import clean_directory, safe_mkdir, scratch_directory

logger = logging.getLogger(__name__)


class BuildCollaborator(Protocol):
    """Callbacks supplied by the surrounding build, invoked only after success."""

    def register_generated_source_root(self, path: str) -> None:
        ...

    def register_resource_root(self, path: str, includes: List[str], excludes: List[str]) -> None:
        ...


def run_pipeline(
        config: Optional[Dict[str, Any]],
        collaborator: BuildCollaborator,
        dependency_archives: Iterable[str] = (),
        *,
        line_sink: Optional[LineSink] = None,
) -> RunResult:
    """
    Execute a full discovery, extraction and compilation run.

    Args:
        config: The configuration dictionary (raw or partial).
        collaborator: Receives the generated source root and resource root on success.
        dependency_archives: Archives supplied by the host build, added to
                             the ones named in the configuration.
        line_sink: Optional receiver for compiler output lines.

    Returns:
        RunResult: NO_FILES_FOUND, SUCCESS, COMPILE_FAILURE or ERROR.
    """
    logger.info("Thrift compilation run started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    try:
        settings = check_parameters(cfg)
    except ThriftBuildError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return create_error_result(type(e).__name__, str(e))

    source_root = settings.source_root
    output_dir = settings.output_dir

    # -------------------------------------------------------------------------
    # 1) Discovery
    # -------------------------------------------------------------------------
    if not os.path.exists(source_root):
        msg = f"{source_root} does not exist. Review the configuration or consider disabling the plugin."
        logger.info(msg)
        return create_no_files_result(source_root, output_dir, msg)

    schema_files = find_schema_files_in_directory(
        source_root,
        list(settings.include_patterns),
        list(settings.exclude_patterns),
    )
    if not schema_files:
        msg = "No thrift files to compile."
        logger.info(msg)
        return create_no_files_result(source_root, output_dir, msg)

    logger.info(f"Found {len(schema_files)} thrift file(s) in {source_root}")

    archives = list(settings.dependency_archives) + [os.path.abspath(a) for a in dependency_archives]

    # -------------------------------------------------------------------------
    # 2) Extraction, compilation and attachment
    # -------------------------------------------------------------------------
    try:
        with scratch_directory(settings.scratch_dir) as scratch_dir:
            extracted_roots = extract_import_roots(scratch_dir, archives)

            ok, err = safe_mkdir(output_dir)
            if not ok:
                raise OSError(f"Failed to create output directory {output_dir}: {err}")
            clean_directory(output_dir)

            unit = (
                CompileUnitBuilder(settings.executable, output_dir, settings.generator)
                .add_import_path(source_root)
                .add_import_paths(sorted(extracted_roots))
                .add_import_paths(settings.import_paths)
                .add_schema_files(sorted(schema_files))
                .build()
            )

            invoker = CompilerInvoker(unit, line_sink=line_sink)
            exit_status = invoker.compile()

            if exit_status != 0:
                result = create_compile_failure_result(
                    exit_status, source_root, output_dir,
                    unit.schema_files, unit.import_paths,
                    failed_file=invoker.current_file,
                )
                logger.error(result.error)
                return result

    except ThriftBuildError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return create_error_result(type(e).__name__, str(e), source_root, output_dir)
    except OSError as e:
        logger.error(f"An IO error occurred: {e}")
        return create_error_result("IOError", f"An IO error occurred: {e}", source_root, output_dir)

    collaborator.register_generated_source_root(output_dir)
    collaborator.register_resource_root(source_root, list(RESOURCE_INCLUDES), list(RESOURCE_EXCLUDES))

    summary = {
        "compiled": len(unit.schema_files),
        "extracted_import_roots": len(extracted_roots),
        "archives": len(archives),
        "generator": unit.generator,
        "scope": settings.scope,
    }

    logger.info(f"Compiled {len(unit.schema_files)} thrift file(s) into {output_dir}")
    return create_success_result(
        source_root, output_dir, unit.schema_files, unit.import_paths, summary
    )
