from __future__ import annotations

"""
Schema File Pattern Engine.

Translates Ant-style include/exclude globs ('**/*.thrift', 'legacy/**')
into compiled regular expressions and evaluates them against
'/'-separated paths relative to a discovery root.
"""

import re
from typing import List, Optional, Union

from thriftbuild.domain.constants import DEFAULT_EXCLUDES, DEFAULT_INCLUDES

PatternInput = Union[None, str, List[str]]

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_include_patterns() -> List[str]:
    """
    Get the default inclusion globs.

    Returns:
        List[str]: Every file below the root ending in the schema suffix.
    """
    return list(DEFAULT_INCLUDES)


def default_exclude_patterns() -> List[str]:
    """Get the default exclusion globs (none)."""
    return list(DEFAULT_EXCLUDES)

# -----------------------------------------------------------------------------
# PATTERN NORMALIZATION
# -----------------------------------------------------------------------------

def split_patterns(patterns: PatternInput) -> Optional[List[str]]:
    """
    Accept patterns as a list or as a comma-separated string.

    Args:
        patterns: Raw pattern input from config or CLI.

    Returns:
        Optional[List[str]]: Stripped, non-empty patterns, or None when no input was given.
    """
    if patterns is None:
        return None
    if isinstance(patterns, str):
        items = patterns.split(",")
    else:
        items = list(patterns)
    return [p.strip() for p in items if p and p.strip()]

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def glob_to_regex(glob_pattern: str) -> str:
    """
    Translate an Ant-style glob into an anchored Python regex.

    Rules:
    - '**' matches any number of path segments (including none).
    - '*' matches within a single segment; '?' matches one character.
    - A trailing '/' is shorthand for '/**'.
    - Backslashes are treated as separators.

    Args:
        glob_pattern: Raw glob.

    Returns:
        str: Regex source that must match the whole relative path.
    """
    pattern = glob_pattern.strip().replace("\\", "/")
    if pattern.endswith("/"):
        pattern += "**"
    pattern = pattern.lstrip("/")

    out: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return "^" + "".join(out) + "$"


def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Compile raw globs into regex objects.

    Args:
        patterns: List of Ant-style globs.

    Returns:
        List[re.Pattern]: Compiled regex objects, one per glob.
    """
    return [re.compile(glob_to_regex(p)) for p in patterns if p.strip()]


def matches_any(rel_path: str, compiled_patterns: List[re.Pattern]) -> bool:
    """
    Verify if a relative path matches at least one compiled pattern.

    Args:
        rel_path: Path relative to the discovery root, '/'-separated.
        compiled_patterns: Pre-compiled regex objects.

    Returns:
        bool: True if any pattern matches the whole path.
    """
    return any(rx.match(rel_path) for rx in compiled_patterns)
