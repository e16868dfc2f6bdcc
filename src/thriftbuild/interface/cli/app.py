from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of
configuration sources (defaults, JSON file, command-line overrides),
pipeline execution with a manifest-recording collaborator, and result
rendering.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from thriftbuild.core.pipeline.engine import run_pipeline
from thriftbuild.core.pipeline.stages.validator import validate_config
from thriftbuild.domain.config import get_default_config, load_config
from thriftbuild.domain.errors import ConfigurationError
from thriftbuild.domain.pipeline_models import RunResult, RunStatus
from thriftbuild.infra.logging import LoggingConfig, configure_logging, get_logger
from thriftbuild.interface.cli import args as cli_args
from thriftbuild.interface.cli.manifest import ManifestCollaborator

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success or nothing to do, 1 failure,
             2 configuration error, 130 interrupted).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 1. Resolve base configuration (defaults vs. configuration file)
    try:
        base_conf = get_default_config() if args.use_defaults else load_config(args.config_file)
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    # 2. Merge command-line overrides and normalize
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    # 3. Pipeline execution
    collaborator = ManifestCollaborator(clean_conf["scope"])
    try:
        result = run_pipeline(clean_conf, collaborator)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    if args.manifest_path and result.status == RunStatus.SUCCESS:
        try:
            collaborator.write(args.manifest_path)
        except OSError as e:
            logger.error(f"Failed to write manifest '{args.manifest_path}': {e}")
            print(f"ERROR: Failed to write manifest: {e}", file=sys.stderr)
            return EXIT_FAILURE

    # 4. Output rendering
    if args.json_output:
        payload = asdict(result)
        payload["status"] = result.status.value
        payload["manifest"] = collaborator.to_dict()
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result, collaborator)

    if result.status == RunStatus.ERROR and result.error_kind == ConfigurationError.__name__:
        return EXIT_CONFIG_ERROR
    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge override values into the base configuration.

    Only known keys with a non-None value are merged.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "executable", "generator", "base_dir", "scope",
        "source_root", "output_dir", "test_source_root", "test_output_dir",
        "scratch_dir", "import_paths", "dependency_archives",
        "include_patterns", "exclude_patterns",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: RunResult, collaborator: ManifestCollaborator) -> None:
    """
    Print the run result to the standard output (errors to stderr).

    Args:
        result: The run result to render.
        collaborator: Manifest holding the registered roots.
    """
    if result.status == RunStatus.NO_FILES_FOUND:
        print(result.summary.get("reason", "No thrift files to compile."))
        return

    if result.status == RunStatus.COMPILE_FAILURE:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    if result.status == RunStatus.ERROR:
        print(f"ERROR: [{result.error_kind}] {result.error}", file=sys.stderr)
        return

    print(f"Compiled {len(result.schema_files)} thrift file(s).")
    print(f"Output directory: {result.output_dir}")
    for root in collaborator.source_roots:
        print(f"  - source root: {root}")
    for res in collaborator.resource_roots:
        print(f"  - resource root: {res['path']} ({', '.join(res['includes'])})")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
