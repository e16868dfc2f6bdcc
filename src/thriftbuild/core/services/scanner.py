from __future__ import annotations

"""
Schema File Discovery Service.

Walks source roots and returns the schema files selected by the
include/exclude globs. Enumeration is sorted so that repeated calls on
an unchanged tree observe files in the same order.
"""

import logging
import os
from typing import FrozenSet, Iterable, Iterator, Set, Tuple

from thriftbuild.core.pipeline.components.filters import (
    PatternInput,
    compile_patterns,
    default_exclude_patterns,
    default_include_patterns,
    matches_any,
    split_patterns,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API (DISCOVERY SERVICES)
# ==============================================================================

def find_schema_files_in_directory(
        directory: str,
        includes: PatternInput = None,
        excludes: PatternInput = None,
) -> FrozenSet[str]:
    """
    Collect every file below a root that matches an include and no exclude.

    Args:
        directory: Root directory to scan.
        includes: Ant-style include globs (list or CSV). None means '**/*.thrift'.
        excludes: Ant-style exclude globs (list or CSV). None means no exclusion.

    Returns:
        FrozenSet[str]: Absolute paths of the selected files.

    Raises:
        NotADirectoryError: If 'directory' is not an existing directory.
    """
    root = os.path.abspath(directory)
    if not os.path.isdir(root):
        raise NotADirectoryError(f"{root} is not a directory")

    inc = split_patterns(includes)
    exc = split_patterns(excludes)
    include_rx = compile_patterns(inc if inc is not None else default_include_patterns())
    exclude_rx = compile_patterns(exc if exc is not None else default_exclude_patterns())

    found: Set[str] = set()
    for file_path, rel_path in _walk_files(root):
        if not matches_any(rel_path, include_rx):
            continue
        if matches_any(rel_path, exclude_rx):
            continue
        found.add(file_path)

    logger.debug(f"Discovered {len(found)} schema file(s) in {root}")
    return frozenset(found)


def find_schema_files_in_directories(
        directories: Iterable[str],
        includes: PatternInput = None,
        excludes: PatternInput = None,
) -> FrozenSet[str]:
    """
    Union of find_schema_files_in_directory over several roots.

    Args:
        directories: Root directories to scan.
        includes: Include globs shared by every root.
        excludes: Exclude globs shared by every root.

    Returns:
        FrozenSet[str]: Absolute paths of the selected files.
    """
    found: Set[str] = set()
    for directory in directories:
        found.update(find_schema_files_in_directory(directory, includes, excludes))
    return frozenset(found)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _walk_files(root: str) -> Iterator[Tuple[str, str]]:
    """
    Yield (absolute path, '/'-relative path) for every regular file under root.

    Symlinked directories are followed. A directory whose canonical path
    was already visited is skipped, so link cycles terminate.
    """
    visited: Set[str] = {os.path.realpath(root)}
    for current, dirs, files in os.walk(root, followlinks=True):
        kept = []
        for dir_name in sorted(dirs):
            real = os.path.realpath(os.path.join(current, dir_name))
            if real in visited:
                logger.debug(f"Skipping already visited directory: {os.path.join(current, dir_name)}")
                continue
            visited.add(real)
            kept.append(dir_name)
        dirs[:] = kept
        files.sort()
        for file_name in files:
            file_path = os.path.join(current, file_name)
            if not os.path.isfile(file_path):
                continue
            rel_path = os.path.relpath(file_path, root).replace(os.sep, "/")
            yield file_path, rel_path
