from __future__ import annotations

"""
Configuration Domain Management.

Provides the default run configuration and loads project-level overrides
from a JSON file. Paths are kept as raw strings here; they are resolved
against 'base_dir' by the orchestrator.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from thriftbuild.domain.constants import (
    DEFAULT_EXECUTABLE,
    DEFAULT_GENERATOR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SCRATCH_DIR,
    DEFAULT_SOURCE_ROOT,
    DEFAULT_TEST_OUTPUT_DIR,
    DEFAULT_TEST_SOURCE_ROOT,
    SCOPE_MAIN,
)
from thriftbuild.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "thriftbuild.json"


@dataclass(frozen=True)
class RunSettings:
    """
    Resolved, checked parameters of one run (all paths absolute).

    Attributes:
        executable: Compiler executable.
        generator: Value passed with '--gen'.
        scope: 'main' or 'test'.
        source_root: Schema source root for the selected scope.
        output_dir: Output directory for the selected scope.
        scratch_dir: Staging directory for dependency schemas.
        import_paths: Additional import path directories.
        dependency_archives: Archives searched for bundled schemas.
        include_patterns: Discovery include globs.
        exclude_patterns: Discovery exclude globs.
    """
    executable: str
    generator: str
    scope: str
    source_root: str
    output_dir: str
    scratch_dir: str
    import_paths: Tuple[str, ...] = ()
    dependency_archives: Tuple[str, ...] = ()
    include_patterns: Tuple[str, ...] = ()
    exclude_patterns: Tuple[str, ...] = ()


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default run configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Compiler
        "executable": DEFAULT_EXECUTABLE,
        "generator": DEFAULT_GENERATOR,

        # Layout
        "base_dir": os.getcwd(),
        "scope": SCOPE_MAIN,
        "source_root": DEFAULT_SOURCE_ROOT,
        "output_dir": DEFAULT_OUTPUT_DIR,
        "test_source_root": DEFAULT_TEST_SOURCE_ROOT,
        "test_output_dir": DEFAULT_TEST_OUTPUT_DIR,
        "scratch_dir": DEFAULT_SCRATCH_DIR,

        # Import path
        "import_paths": [],
        "dependency_archives": [],

        # Filtering
        "include_patterns": ["**/*.thrift"],
        "exclude_patterns": [],
    }


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a JSON configuration file merged over the defaults.

    Without an explicit path, './thriftbuild.json' is used when present.
    A relative 'base_dir' inside the file is anchored to the file's own
    directory; a missing one defaults to that directory.

    Args:
        path: Optional explicit configuration file.

    Returns:
        Dict[str, Any]: Merged configuration.

    Raises:
        ConfigurationError: If an explicit file is missing, unreadable or not a JSON object.
    """
    config = get_default_config()

    explicit = path is not None
    config_path = os.path.abspath(path or DEFAULT_CONFIG_FILE)

    if not os.path.exists(config_path):
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        logger.debug("No configuration file found. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to read configuration '{config_path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration '{config_path}' must contain a JSON object.")

    config.update(data)

    config_dir = os.path.dirname(config_path)
    base_dir = data.get("base_dir")
    if not base_dir:
        config["base_dir"] = config_dir
    elif isinstance(base_dir, str) and not os.path.isabs(base_dir):
        config["base_dir"] = os.path.join(config_dir, base_dir)

    logger.debug(f"Configuration loaded from {config_path}")
    return config
