from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
argparse namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from thriftbuild.domain.constants import SCOPE_TEST, VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the thriftbuild CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="thriftbuild",
        description="Compile Thrift schemas with the external thrift compiler "
                    "and flatten the generated sources into an output directory.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    # --- Configuration Sources ---
    p.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="JSON configuration file (default: ./thriftbuild.json when present).",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore any configuration file and start from built-in defaults.",
    )

    # --- Path Management ---
    p.add_argument(
        "-b", "--base-dir",
        dest="base_dir",
        default=None,
        help="Directory that relative paths are resolved against.",
    )
    p.add_argument(
        "--source-root",
        dest="source_root",
        default=None,
        help="Directory holding the .thrift files to compile.",
    )
    p.add_argument(
        "-o", "--output",
        dest="output_dir",
        default=None,
        help="Directory receiving the generated sources (cleaned before each run).",
    )
    p.add_argument(
        "--scratch-dir",
        dest="scratch_dir",
        default=None,
        help="Staging directory for schemas extracted from dependency archives.",
    )
    p.add_argument(
        "--test",
        action="store_true",
        help="Use the test source root and test output directory.",
    )

    # --- Import Path ---
    p.add_argument(
        "-I", "--import-path",
        dest="import_paths",
        action="append",
        default=None,
        help="Additional import path directory (repeatable).",
    )
    p.add_argument(
        "--dep",
        dest="dependency_archives",
        action="append",
        default=None,
        help="Dependency archive (jar/zip) whose .thrift entries join the import path (repeatable).",
    )

    # --- Compiler ---
    p.add_argument(
        "--executable",
        dest="executable",
        default=None,
        help="Compiler executable (default: thrift).",
    )
    p.add_argument(
        "--gen",
        dest="generator",
        default=None,
        help="Generator passed to --gen, e.g. 'java' or 'java:private-members,hashcode'.",
    )

    # --- Discovery Filters ---
    p.add_argument(
        "--include",
        dest="include_patterns",
        default=None,
        help="Comma-separated include globs (default: **/*.thrift).",
    )
    p.add_argument(
        "--exclude",
        dest="exclude_patterns",
        default=None,
        help="Comma-separated exclude globs.",
    )

    # --- Reporting and Diagnostics ---
    p.add_argument(
        "--manifest",
        dest="manifest_path",
        default=None,
        help="Write the registered source/resource roots to this JSON file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the run result as JSON.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset (None means "not given").
    """
    overrides: Dict[str, Any] = {}

    overrides["base_dir"] = args.base_dir
    overrides["executable"] = args.executable
    overrides["generator"] = args.generator
    overrides["scratch_dir"] = args.scratch_dir

    # Paths apply to whichever scope is selected
    if args.test:
        overrides["scope"] = SCOPE_TEST
        overrides["test_source_root"] = args.source_root
        overrides["test_output_dir"] = args.output_dir
    else:
        overrides["source_root"] = args.source_root
        overrides["output_dir"] = args.output_dir

    if args.import_paths:
        overrides["import_paths"] = list(args.import_paths)
    if args.dependency_archives:
        overrides["dependency_archives"] = list(args.dependency_archives)

    if args.include_patterns:
        overrides["include_patterns"] = _split_csv(args.include_patterns)
    if args.exclude_patterns:
        overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of sanitized strings."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
