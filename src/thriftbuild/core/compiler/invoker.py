from __future__ import annotations

"""
Compiler Invocation Service.

Runs the external schema compiler once per schema file, strictly in
sequence, and stops at the first non-zero exit status. When every
invocation succeeds, the compiler's generated-output subdirectory
('gen-java' for the Java generator) is flattened into the output
directory.

Standard output and standard error of each child are drained by two
threads while the invoker waits, so a chatty compiler can never block on
a full pipe.
"""

import logging
import os
import shutil
import subprocess
import threading
from enum import Enum
from typing import IO, Callable, List, Optional

from thriftbuild.domain.compile_models import CompileUnit
from thriftbuild.domain.errors import ProcessInvocationError, RelocationFailedError
from thriftbuild.infra.fs import remove_path

logger = logging.getLogger(__name__)

# Receives (stream name, line without trailing newline)
LineSink = Callable[[str, str], None]

STDOUT = "stdout"
STDERR = "stderr"


# -----------------------------------------------------------------------------
# INVOKER STATE DEFINITIONS
# -----------------------------------------------------------------------------

class InvokerState(Enum):
    """Lifecycle of a single compile run."""
    IDLE = "IDLE"
    INVOKING = "INVOKING"
    RELOCATING = "RELOCATING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


def log_line_sink(stream: str, line: str) -> None:
    """Default sink: compiler stdout at INFO, stderr at WARNING."""
    if stream == STDERR:
        logger.warning(f"[thrift] {line}")
    else:
        logger.info(f"[thrift] {line}")


# -----------------------------------------------------------------------------
# COMPILER INVOKER SERVICE
# -----------------------------------------------------------------------------

class CompilerInvoker:
    """
    Executes a CompileUnit against the external compiler.

    An invoker is single-use: 'compile' drives it from IDLE to either
    SUCCEEDED or FAILED.
    """

    def __init__(self, unit: CompileUnit, line_sink: Optional[LineSink] = None) -> None:
        self._unit = unit
        self._line_sink = line_sink or log_line_sink
        self._state = InvokerState.IDLE
        self._current_file: Optional[str] = None

    @property
    def unit(self) -> CompileUnit:
        return self._unit

    @property
    def state(self) -> InvokerState:
        """Current lifecycle state."""
        return self._state

    @property
    def current_file(self) -> Optional[str]:
        """Schema file being compiled, or the one that failed."""
        return self._current_file

    def build_command(self, schema_file: str) -> List[str]:
        """
        Build the full command line for one schema file.

        Pure function of the unit: no filesystem access, no state change.

        Args:
            schema_file: Schema file to compile.

        Returns:
            List[str]: argv, executable first.
        """
        command: List[str] = [self._unit.executable]
        for import_path in self._unit.sorted_import_paths:
            command.extend(["-I", import_path])
        command.extend(["-o", self._unit.output_dir])
        command.extend(["--gen", self._unit.generator])
        command.append(schema_file)
        return command

    def compile(self) -> int:
        """
        Compile every schema file, then relocate the generated output.

        Returns:
            int: 0 on full success, otherwise the first non-zero exit status.

        Raises:
            ProcessInvocationError: If the compiler cannot be started.
            RelocationFailedError: If the generated output cannot be flattened.
        """
        self._state = InvokerState.INVOKING

        for schema_file in self._unit.sorted_schema_files:
            self._current_file = schema_file
            command = self.build_command(schema_file)
            logger.debug(f"Executing: {' '.join(command)}")

            try:
                status = self._execute(command)
            except ProcessInvocationError:
                self._state = InvokerState.FAILED
                raise

            if status != 0:
                logger.error(f"Compiler exited with status {status} for {schema_file}")
                self._state = InvokerState.FAILED
                return status

        self._current_file = None
        self._state = InvokerState.RELOCATING
        try:
            self._move_generated_files()
        except RelocationFailedError:
            self._state = InvokerState.FAILED
            raise

        self._state = InvokerState.SUCCEEDED
        return 0

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS: PROCESS EXECUTION
    # -------------------------------------------------------------------------

    def _execute(self, command: List[str]) -> int:
        """Run one command to completion while draining both output streams."""
        try:
            proc = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ProcessInvocationError(
                f"Failed to start '{command[0]}': {e}"
            ) from e

        drains = [
            threading.Thread(
                target=self._drain,
                args=(proc.stdout, STDOUT),
                name="thrift-stdout",
                daemon=True,
            ),
            threading.Thread(
                target=self._drain,
                args=(proc.stderr, STDERR),
                name="thrift-stderr",
                daemon=True,
            ),
        ]
        for t in drains:
            t.start()

        try:
            status = proc.wait()
        except OSError as e:
            proc.kill()
            raise ProcessInvocationError(f"Lost contact with '{command[0]}': {e}") from e
        finally:
            for t in drains:
                t.join()

        return status

    def _drain(self, stream: Optional[IO[str]], name: str) -> None:
        """Forward every line of a child stream to the sink until EOF."""
        if stream is None:
            return
        with stream:
            for line in stream:
                try:
                    self._line_sink(name, line.rstrip("\r\n"))
                except Exception as e:
                    # Keep reading to EOF; a stalled pipe would block the child
                    logger.warning(f"Output sink failed on {name} line: {e}")

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS: RELOCATION
    # -------------------------------------------------------------------------

    def _move_generated_files(self) -> None:
        """Flatten the generated-output subdirectory into the output directory."""
        gen_dir = self._unit.generated_dir
        if not os.path.isdir(gen_dir):
            logger.warning(f"Compiler produced no generated-output directory at {gen_dir}")
            return

        for name in sorted(os.listdir(gen_dir)):
            source = os.path.join(gen_dir, name)
            target = os.path.join(self._unit.output_dir, name)

            if os.path.lexists(target):
                logger.debug(f"Overwriting existing output: {target}")
                try:
                    remove_path(target)
                except OSError as e:
                    raise RelocationFailedError(f"File Overwrite Failed: {target}") from e

            try:
                shutil.move(source, target)
            except OSError as e:
                raise RelocationFailedError(f"Rename Failed: {target}") from e

        try:
            os.rmdir(gen_dir)
        except OSError as e:
            raise RelocationFailedError(f"Failed to delete directory: {gen_dir}") from e
