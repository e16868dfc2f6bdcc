from __future__ import annotations

"""
Dependency Schema Extraction Service.

Unpacks the schema files bundled inside dependency archives (jar/zip)
into a scratch directory, one subdirectory per archive, and reports the
directories that now hold them so they can be added to the compiler's
import path.
"""

import logging
import os
import posixpath
import shutil
import zipfile
from typing import FrozenSet, Iterable, Set

from thriftbuild.domain.constants import THRIFT_FILE_SUFFIX
from thriftbuild.domain.errors import InvalidArgumentError
from thriftbuild.infra.fs import clean_directory, flatten_archive_name

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def extract_import_roots(scratch_dir: str, archives: Iterable[str]) -> FrozenSet[str]:
    """
    Extract every schema entry of the given archives into the scratch directory.

    The scratch directory is emptied first when it already exists, so a
    previous run can never leak stale schemas into this one. Each archive
    gets its own subdirectory named after the archive path; entries are
    written below it with their in-archive path and overwritten if present.

    Args:
        scratch_dir: Directory owned by the current run.
        archives: Paths of dependency archives.

    Returns:
        FrozenSet[str]: Parent directories of the extracted schema files.

    Raises:
        InvalidArgumentError: If an archive is not a regular file, is not a
                              readable zip/jar, or holds an entry that would
                              escape its extraction directory.
    """
    archive_list = list(archives)
    for archive in archive_list:
        if not os.path.isfile(archive):
            raise InvalidArgumentError(f"{archive} is not a file")

    if os.path.isdir(scratch_dir):
        clean_directory(scratch_dir)

    import_roots: Set[str] = set()
    for archive in archive_list:
        import_roots.update(_extract_archive(scratch_dir, archive))

    logger.debug(
        f"Extracted schemas from {len(archive_list)} archive(s) into "
        f"{len(import_roots)} import root(s)"
    )
    return frozenset(import_roots)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _extract_archive(scratch_dir: str, archive: str) -> Set[str]:
    """Copy the schema entries of one archive and return their parent directories."""
    try:
        zf = zipfile.ZipFile(archive, "r")
    except (zipfile.BadZipFile, OSError) as e:
        raise InvalidArgumentError(f"{archive} was not a readable artifact") from e

    archive_root = os.path.join(scratch_dir, flatten_archive_name(archive))
    directories: Set[str] = set()

    with zf:
        for info in zf.infolist():
            if info.is_dir() or not info.filename.endswith(THRIFT_FILE_SUFFIX):
                continue

            destination = _destination_for(archive_root, archive, info.filename)
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            try:
                with zf.open(info, "r") as src, open(destination, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
                # CRC mismatch, unsupported compression or encrypted entry
                raise InvalidArgumentError(
                    f"{archive} was not a readable artifact ({info.filename}: {e})"
                ) from e

            directories.add(os.path.dirname(destination))
            logger.debug(f"Extracted {info.filename} from {archive}")

    return directories


def _destination_for(archive_root: str, archive: str, entry_name: str) -> str:
    """
    Map an archive entry name to a path below the archive's extraction root.

    Raises:
        InvalidArgumentError: If the entry is absolute or climbs out via '..'.
    """
    normalized = posixpath.normpath(entry_name.replace("\\", "/"))
    if (
            normalized.startswith("/")
            or normalized == ".."
            or normalized.startswith("../")
            or ":" in normalized.split("/", 1)[0]
    ):
        raise InvalidArgumentError(
            f"{archive} contains an entry outside its root: {entry_name}"
        )
    return os.path.join(archive_root, *normalized.split("/"))
