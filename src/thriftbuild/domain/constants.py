from __future__ import annotations

"""
Domain Constants.

Centralizes the schema suffix, compiler defaults, conventional build
layout and the patterns used when the generated output is attached to
the surrounding build.
"""

from typing import List

VERSION = "0.3.0"

# -----------------------------------------------------------------------------
# SCHEMA AND COMPILER
# -----------------------------------------------------------------------------

THRIFT_FILE_SUFFIX = ".thrift"
DEFAULT_INCLUDES: List[str] = ["**/*" + THRIFT_FILE_SUFFIX]
DEFAULT_EXCLUDES: List[str] = []

DEFAULT_EXECUTABLE = "thrift"
DEFAULT_GENERATOR = "java"

# The compiler writes into "gen-<language>" below the directory given with -o
GENERATED_DIR_PREFIX = "gen-"

# -----------------------------------------------------------------------------
# BUILD LAYOUT
# -----------------------------------------------------------------------------

SCOPE_MAIN = "main"
SCOPE_TEST = "test"
SCOPES = (SCOPE_MAIN, SCOPE_TEST)

DEFAULT_SOURCE_ROOT = "src/main/thrift"
DEFAULT_TEST_SOURCE_ROOT = "src/test/thrift"
DEFAULT_OUTPUT_DIR = "target/generated-sources/thrift"
DEFAULT_TEST_OUTPUT_DIR = "target/generated-test-sources/thrift"
DEFAULT_SCRATCH_DIR = "target/thrift-dependencies"

# Resource patterns registered for the schema tree after a successful run
RESOURCE_INCLUDES: List[str] = ["**/*" + THRIFT_FILE_SUFFIX]
RESOURCE_EXCLUDES: List[str] = []


def generated_dir_name(generator: str) -> str:
    """
    Resolve the compiler's generated-output directory name for a generator.

    Generator options after ':' do not change the directory, so
    'java:private-members,hashcode' still writes into 'gen-java'.

    Args:
        generator: Generator selector passed to '--gen'.

    Returns:
        str: Directory name such as 'gen-java'.
    """
    language = (generator or DEFAULT_GENERATOR).split(":", 1)[0].strip()
    return GENERATED_DIR_PREFIX + (language or DEFAULT_GENERATOR)
