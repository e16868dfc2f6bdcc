from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, directory cleaning, ancestry
checks and the scoped scratch directory used while dependency schemas
are staged. Acts as an abstraction over 'os' and 'shutil' so the
orchestration layers behave uniformly on Windows and Unix-like systems.
"""

import contextlib
import hashlib
import logging
import os
import shutil
from typing import AbstractSet, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def resolve_against(base_dir: str, path: Optional[str]) -> str:
    """
    Resolve a possibly relative path against a base directory.

    Args:
        base_dir: Directory that relative paths are anchored to.
        path: Raw path (absolute, relative, or using ~ / $VAR).

    Returns:
        str: Absolute normalized path. Empty input resolves to base_dir.
    """
    p = os.path.expandvars(os.path.expanduser((path or "").strip()))
    if not p:
        return os.path.abspath(base_dir)
    if not os.path.isabs(p):
        p = os.path.join(base_dir, p)
    return os.path.abspath(p)


def flatten_archive_name(archive_path: str) -> str:
    """
    Turn an archive path into a single, collision-free directory name.

    Path separators and drive colons are replaced with '_' so that the
    result can be used as one child of the scratch directory on every OS.
    The replacement alone maps 'a_b/c.jar' and 'a/b_c.jar' to the same
    name, so a short digest of the absolute path is appended.

    Args:
        archive_path: Path to the dependency archive.

    Returns:
        str: Flattened directory name, e.g. 'home_user_shared-1.0.jar-3f9a0c1d2e4b'.
    """
    absolute = os.path.abspath(archive_path)
    digest = hashlib.sha256(absolute.encode("utf-8")).hexdigest()[:12]

    name = absolute
    for ch in {os.sep, "/", "\\", ":"}:
        name = name.replace(ch, "_")
    return f"{name.strip('_') or 'archive'}-{digest}"


def find_enclosing_root(directory: str, roots: AbstractSet[str]) -> Optional[str]:
    """
    Walk up a directory's ancestry until one of the given roots is met.

    Iterative on canonicalized paths so link cycles cannot cause
    unbounded recursion.

    Args:
        directory: Starting directory (inclusive).
        roots: Canonical (realpath) candidate ancestors.

    Returns:
        Optional[str]: The matching root, or None once the filesystem root is passed.
    """
    current = os.path.realpath(directory)
    while True:
        if current in roots:
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent

# -----------------------------------------------------------------------------
# FILESYSTEM MUTATION API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def remove_path(path: str) -> None:
    """
    Delete a file, symlink or directory tree.

    Raises:
        OSError: If the path exists and cannot be removed.
    """
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)


def clean_directory(path: str) -> None:
    """
    Remove every entry inside a directory, keeping the directory itself.

    Args:
        path: Directory to empty.

    Raises:
        OSError: If an entry cannot be removed.
    """
    for name in os.listdir(path):
        remove_path(os.path.join(path, name))


@contextlib.contextmanager
def scratch_directory(path: str) -> Iterator[str]:
    """
    Own a scratch directory for the duration of a run.

    The directory is removed on every exit path (success, failure or
    exception). A removal failure is logged and never propagated.

    Args:
        path: Absolute path of the scratch directory.

    Yields:
        str: The same path, for use inside the 'with' block.
    """
    try:
        yield path
    finally:
        if os.path.lexists(path):
            try:
                remove_path(path)
                logger.debug(f"Scratch directory removed: {path}")
            except OSError as e:
                logger.warning(f"Failed to remove scratch directory '{path}': {e}")
