from __future__ import annotations

"""
Compilation Domain Models.

Defines the immutable CompileUnit handed to the compiler invoker and the
builder that validates import paths and schema files while the unit is
assembled.
"""

import os
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Set

from thriftbuild.domain.constants import (
    DEFAULT_GENERATOR,
    THRIFT_FILE_SUFFIX,
    generated_dir_name,
)
from thriftbuild.domain.errors import InvalidArgumentError, InvalidStateError
from thriftbuild.infra.fs import find_enclosing_root

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CompileUnit:
    """
    Everything needed to run the compiler over a set of schema files.

    Attributes:
        executable: Compiler executable (name on PATH or absolute path).
        import_paths: Directories passed with '-I'.
        schema_files: Schema files compiled one invocation each.
        output_dir: Directory passed with '-o'; receives the flattened output.
        generator: Value passed with '--gen' (language plus optional options).
    """
    executable: str
    import_paths: FrozenSet[str]
    schema_files: FrozenSet[str]
    output_dir: str
    generator: str = DEFAULT_GENERATOR

    @property
    def sorted_import_paths(self) -> List[str]:
        """Import paths in the order they appear on the command line."""
        return sorted(self.import_paths)

    @property
    def sorted_schema_files(self) -> List[str]:
        """Schema files in invocation order."""
        return sorted(self.schema_files)

    @property
    def generated_dir(self) -> str:
        """Absolute path of the compiler's generated-output subdirectory."""
        return os.path.join(self.output_dir, generated_dir_name(self.generator))

# -----------------------------------------------------------------------------
# BUILDER
# -----------------------------------------------------------------------------

class CompileUnitBuilder:
    """
    Incrementally assemble and validate a CompileUnit.

    Import paths must be declared before the schema files that live under
    them: adding a schema file checks its ancestry against the import
    paths known at that moment.
    """

    def __init__(self, executable: str, output_dir: str, generator: str = DEFAULT_GENERATOR) -> None:
        if not executable:
            raise InvalidArgumentError("executable must not be empty")
        if not output_dir or not os.path.isdir(output_dir):
            raise InvalidArgumentError(f"{output_dir} is not a directory")
        self._executable = executable
        self._output_dir = os.path.abspath(output_dir)
        self._generator = generator or DEFAULT_GENERATOR
        self._import_paths: Set[str] = set()
        self._schema_files: Set[str] = set()

    def add_import_path(self, directory: str) -> CompileUnitBuilder:
        """
        Declare a directory searched by the compiler for imported schemas.

        Raises:
            InvalidArgumentError: If the directory does not exist.
        """
        if not directory or not os.path.isdir(directory):
            raise InvalidArgumentError(f"{directory} is not a directory")
        self._import_paths.add(os.path.realpath(directory))
        return self

    def add_import_paths(self, directories: Iterable[str]) -> CompileUnitBuilder:
        for directory in directories:
            self.add_import_path(directory)
        return self

    def add_schema_file(self, schema_file: str) -> CompileUnitBuilder:
        """
        Schedule a schema file for compilation.

        Raises:
            InvalidArgumentError: If the path is not a file or lacks the schema suffix.
            InvalidStateError: If no declared import path is an ancestor of the file.
        """
        if not schema_file or not os.path.isfile(schema_file):
            raise InvalidArgumentError(f"{schema_file} is not a file")
        if not schema_file.endswith(THRIFT_FILE_SUFFIX):
            raise InvalidArgumentError(
                f"{schema_file} does not end with {THRIFT_FILE_SUFFIX}"
            )

        parent = os.path.dirname(os.path.abspath(schema_file))
        if find_enclosing_root(parent, self._import_paths) is None:
            raise InvalidStateError(
                f"{schema_file} is not located under any import path"
            )
        self._schema_files.add(os.path.abspath(schema_file))
        return self

    def add_schema_files(self, schema_files: Iterable[str]) -> CompileUnitBuilder:
        for schema_file in schema_files:
            self.add_schema_file(schema_file)
        return self

    def build(self) -> CompileUnit:
        """
        Freeze the collected state.

        Raises:
            InvalidStateError: If no schema file was added.
        """
        if not self._schema_files:
            raise InvalidStateError("no schema files were added to the compile unit")
        return CompileUnit(
            executable=self._executable,
            import_paths=frozenset(self._import_paths),
            schema_files=frozenset(self._schema_files),
            output_dir=self._output_dir,
            generator=self._generator,
        )
