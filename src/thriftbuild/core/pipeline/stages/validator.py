from __future__ import annotations

"""
Configuration Validation Service.

Two gates stand before any filesystem mutation:
1. validate_config: coerces untrusted input (CLI, JSON file, host build)
   into the expected types and fills in defaults, collecting warnings.
2. check_parameters: resolves every path against 'base_dir' and rejects
   structurally impossible layouts with ConfigurationError.
"""

import logging
import os
from typing import Any, Dict, List, Tuple

from thriftbuild.core.pipeline.components.filters import (
    default_exclude_patterns,
    default_include_patterns,
)
from thriftbuild.domain.config import RunSettings, get_default_config
from thriftbuild.domain.constants import SCOPE_TEST, SCOPES
from thriftbuild.domain.errors import ConfigurationError
from thriftbuild.infra.fs import normalize_path, resolve_against

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise TypeError/ValueError on mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and the warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    string_fields = [
        "executable", "generator", "base_dir", "scope",
        "source_root", "output_dir", "test_source_root", "test_output_dir",
        "scratch_dir",
    ]

    list_fields_map = {
        "import_paths": [],
        "dependency_archives": [],
        "include_patterns": default_include_patterns(),
        "exclude_patterns": default_exclude_patterns(),
    }

    for field in string_fields:
        merged[field] = _as_str(
            merged.get(field), defaults.get(field, ""), field, warnings, strict
        )

    for field, fallback in list_fields_map.items():
        merged[field] = _as_list_str(
            merged.get(field), fallback, field, warnings, strict
        )

    merged["scope"] = _normalize_scope(merged["scope"], defaults["scope"], warnings, strict)

    return merged, warnings


def check_parameters(cfg: Dict[str, Any]) -> RunSettings:
    """
    Resolve paths and reject layouts that cannot work.

    The source root may be missing (the run then has nothing to do), but
    it, the scratch directory and the output directory must not be files.

    Args:
        cfg: Configuration already passed through validate_config.

    Returns:
        RunSettings: Absolute, checked parameters for the selected scope.

    Raises:
        ConfigurationError: On a missing executable or a path that is a file.
    """
    executable = (cfg.get("executable") or "").strip()
    if not executable:
        raise ConfigurationError("executable must be set")

    base_dir = normalize_path(cfg.get("base_dir"), os.getcwd())
    if cfg.get("scope") == SCOPE_TEST:
        source_key, output_key = "test_source_root", "test_output_dir"
    else:
        source_key, output_key = "source_root", "output_dir"

    source_root = resolve_against(base_dir, cfg.get(source_key))
    output_dir = resolve_against(base_dir, cfg.get(output_key))
    scratch_dir = resolve_against(base_dir, cfg.get("scratch_dir"))

    if os.path.isfile(source_root):
        raise ConfigurationError(f"{source_key} is a file, not a directory: {source_root}")
    if os.path.isfile(scratch_dir):
        raise ConfigurationError(f"scratch_dir is a file, not a directory: {scratch_dir}")
    if os.path.isfile(output_dir):
        raise ConfigurationError(f"{output_key} is a file, not a directory: {output_dir}")

    import_paths = tuple(resolve_against(base_dir, p) for p in cfg.get("import_paths", []))
    for p in import_paths:
        if not os.path.isdir(p):
            raise ConfigurationError(f"import path is not a directory: {p}")

    archives = tuple(resolve_against(base_dir, p) for p in cfg.get("dependency_archives", []))

    return RunSettings(
        executable=executable,
        generator=cfg.get("generator") or "",
        scope=cfg.get("scope") or "",
        source_root=source_root,
        output_dir=output_dir,
        scratch_dir=scratch_dir,
        import_paths=import_paths,
        dependency_archives=archives,
        include_patterns=tuple(cfg.get("include_patterns") or default_include_patterns()),
        exclude_patterns=tuple(cfg.get("exclude_patterns") or ()),
    )


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out if out else list(fallback)

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _normalize_scope(scope: str, fallback: str, warnings: List[str], strict: bool) -> str:
    """Restrict the scope to the known values."""
    s = scope.strip().lower()
    if s in SCOPES:
        return s
    msg = f"Invalid scope '{scope}': expected one of {', '.join(SCOPES)}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using '{fallback}'.")
    return fallback
