from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A stand-in compiler executable that mimics the thrift command line
   closely enough for discovery, invocation and relocation tests.
3. Project layouts seeded with the sample schemas under 'resources/idl'.
"""

import os
import shutil
import stat
import sys
import textwrap
import zipfile
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

IDL_DIR = Path(__file__).resolve().parent / "resources" / "idl"

# -----------------------------------------------------------------------------
# Fake Compiler
# -----------------------------------------------------------------------------

# Behaves like 'thrift -I <dir>... -o <out> --gen <lang[:opts]> <file>':
# - resolves every 'include' against the file's directory and the -I paths,
# - writes one <Name>.java per struct/enum/exception/service into
#   <out>/gen-<lang>/<java namespace as path>/,
# - exits 1 for a missing file or unresolved include,
# - exits with N when the file contains a '#exit N' line.
_FAKE_THRIFT_BODY = textwrap.dedent(
    '''
    import os
    import re
    import sys

    args = sys.argv[1:]
    includes, out, gen, files = [], None, "java", []
    i = 0
    while i < len(args):
        if args[i] == "-I":
            includes.append(args[i + 1])
            i += 2
        elif args[i] == "-o":
            out = args[i + 1]
            i += 2
        elif args[i] == "--gen":
            gen = args[i + 1]
            i += 2
        else:
            files.append(args[i])
            i += 1

    if len(files) != 1 or out is None:
        sys.stderr.write("usage: thrift [options] file\\n")
        sys.exit(1)

    source = files[0]
    if not os.path.isfile(source):
        sys.stderr.write("[FAILURE:arguments] Could not open input file with realpath: " + source + "\\n")
        sys.exit(1)

    with open(source, encoding="utf-8") as f:
        text = f.read()

    forced = re.search(r"^#exit (\\d+)", text, re.M)
    if forced:
        sys.stderr.write("forced failure\\n")
        sys.exit(int(forced.group(1)))

    for inc in re.findall(r'^include "([^"]+)"', text, re.M):
        candidates = [os.path.dirname(source)] + includes
        if not any(os.path.isfile(os.path.join(d, inc)) for d in candidates):
            sys.stderr.write("[ERROR] Could not find include file " + inc + "\\n")
            sys.exit(1)

    ns = re.search(r"^namespace java (\\S+)", text, re.M)
    package_dir = ns.group(1).replace(".", os.sep) if ns else ""
    target = os.path.join(out, "gen-" + gen.split(":")[0], package_dir)
    os.makedirs(target, exist_ok=True)
    for name in re.findall(r"^(?:struct|enum|exception|service)\\s+(\\w+)", text, re.M):
        with open(os.path.join(target, name + ".java"), "w", encoding="utf-8") as f:
            f.write("// generated with --gen " + gen + "\\n")
    sys.stdout.write("compiled " + os.path.basename(source) + "\\n")
    '''
)


@pytest.fixture
def fake_thrift(tmp_path: Path) -> str:
    """
    Write an executable stand-in for the thrift compiler.

    Returns:
        str: Absolute path of the executable script.
    """
    if sys.platform.startswith("win"):
        pytest.skip("Script-based fake compiler requires a POSIX shebang.")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "thrift"
    script.write_text(f"#!{sys.executable}\n{_FAKE_THRIFT_BODY}", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)

# -----------------------------------------------------------------------------
# Project Layout Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def idl_dir() -> Path:
    """Directory holding the sample schemas."""
    return IDL_DIR


@pytest.fixture
def thrift_project(tmp_path: Path) -> Path:
    """
    Create a project with the conventional layout.

    Structure:
    /project
      /src/main/thrift
        shared.thrift
        tutorial.thrift
    """
    base = tmp_path / "project"
    source_root = base / "src" / "main" / "thrift"
    source_root.mkdir(parents=True)
    for name in ("shared.thrift", "tutorial.thrift"):
        shutil.copy(IDL_DIR / name, source_root / name)
    return base


@pytest.fixture
def shared_archive(tmp_path: Path) -> Path:
    """A dependency jar bundling 'shared.thrift' next to unrelated entries."""
    archive = tmp_path / "deps" / "shared-1.0.jar"
    archive.parent.mkdir(parents=True)
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        zf.writestr("idl/", "")
        zf.write(IDL_DIR / "shared.thrift", "idl/shared.thrift")
        zf.writestr("shared/SharedService.class", b"\xca\xfe\xba\xbe")
    return archive


@pytest.fixture
def base_config(thrift_project: Path, fake_thrift: str) -> Dict[str, Any]:
    """Configuration dictionary pointing at the sample project and the fake compiler."""
    return {
        "executable": fake_thrift,
        "generator": "java",
        "base_dir": str(thrift_project),
        "scope": "main",
        "import_paths": [],
        "dependency_archives": [],
    }
