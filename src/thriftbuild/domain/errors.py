from __future__ import annotations

"""
Error Taxonomy.

Defines the exception hierarchy raised by the discovery, extraction,
compilation and orchestration layers. A compiler returning a non-zero
status is NOT an exception: it travels as a plain exit status and is
reported through the run result.
"""


class ThriftBuildError(Exception):
    """Base class for every failure raised by this package."""


class ConfigurationError(ThriftBuildError):
    """Bad paths or parameters, detected before any filesystem mutation."""


class InvalidArgumentError(ThriftBuildError, ValueError):
    """An input (archive, schema file, directory) is not what the caller claimed."""


class InvalidStateError(ThriftBuildError, RuntimeError):
    """Builder misuse: empty schema set or schema file outside the import path."""


class ProcessInvocationError(ThriftBuildError):
    """The external compiler could not be started or communicated with."""


class RelocationFailedError(ThriftBuildError):
    """Generated output could not be moved into the output directory."""
