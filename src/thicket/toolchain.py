"""External toolchain collaborators: source formatting and compilation.

Both run as subprocesses and block until they finish.  A non-zero exit
becomes a :class:`ToolchainError` carrying the tool's output verbatim.

- Format: ``ruff format`` over the generated package.
- Compile: ``compileall`` over the generated package (surfaces syntax
  errors), then ``zipapp`` to archive the package, together with copies
  of the pure-Python libraries its runtime imports, into one executable.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Iterable
from pathlib import Path

from thicket.errors import ToolchainError

logger = logging.getLogger("thicket.toolchain")

BINARY_MODE = 0o750
INTERPRETER = "/usr/bin/env python3"

# Libraries the generated runtime imports; markdown pages add patitas
RUNTIME_PACKAGES = ("kida",)
MARKDOWN_PACKAGES = ("patitas",)

_SKIP_CACHES = shutil.ignore_patterns("__pycache__", "*.pyc")
_NATIVE_SUFFIXES = frozenset({".so", ".pyd", ".dylib"})


def _run(tool: str, args: list[str], *, cwd: Path | None = None) -> str:
    """Run ``python -m <args>`` and return its combined output."""
    cmd = [sys.executable, "-m", *args]
    logger.debug("running %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise ToolchainError(tool, str(exc)) from exc

    output = (completed.stdout + completed.stderr).strip()
    if completed.returncode != 0:
        logger.error("%s exited with %d", tool, completed.returncode)
        raise ToolchainError(tool, output, completed.returncode)
    return output


def format_sources(package_dir: str | Path) -> None:
    """Normalize the formatting of every module in *package_dir*.

    Running it again on formatted output changes nothing.
    """
    _run("ruff format", ["ruff", "format", "--quiet", str(package_dir)])
    logger.info("formatted %s", package_dir)


def compile_package(
    src_root: str | Path,
    gen_package: str,
    binary: str | Path,
    runtime_packages: Iterable[str] = RUNTIME_PACKAGES,
) -> Path:
    """Byte-compile the generated package and archive it as an executable.

    The archive holds the generated package plus a copy of every
    installed package named in *runtime_packages*, so it runs on any
    ``python3`` of the same minor version without an install step.

    Args:
        src_root: Directory holding the ``gen_package`` directory.
        gen_package: Name of the generated package.
        binary: Path of the executable to produce.
        runtime_packages: Import names of the libraries the generated
            runtime imports.

    Returns:
        Path of the executable, with mode ``0o750``.

    Raises:
        ToolchainError: A tool failed, or a runtime package is not
            installed in the building interpreter.
    """
    src_root = Path(src_root)
    binary = Path(binary)

    _run("compileall", ["compileall", "-q", str(src_root / gen_package)])

    binary.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix="thicket-zipapp-") as staging:
        stage = Path(staging)
        shutil.copytree(src_root / gen_package, stage / gen_package, ignore=_SKIP_CACHES)
        for name in runtime_packages:
            bundle_package(name, stage)
        _run(
            "zipapp",
            [
                "zipapp",
                str(stage),
                "--output",
                str(binary),
                "--python",
                INTERPRETER,
                "--main",
                f"{gen_package}.__main__:main",
            ],
        )
    try:
        os.chmod(binary, BINARY_MODE)
    except OSError as exc:
        raise ToolchainError("zipapp", f"cannot set permissions on {binary}: {exc}") from exc

    logger.info("compiled %s", binary)
    return binary


def bundle_package(name: str, stage: Path) -> Path:
    """Copy the installed top-level package *name* into *stage*.

    Zip imports only load pure-Python modules, so a package shipping
    extension modules is refused.
    """
    spec = importlib.util.find_spec(name)
    if spec is None or spec.origin is None:
        raise ToolchainError("zipapp", f"runtime package {name!r} is not installed")

    if spec.submodule_search_locations:
        source = Path(spec.origin).parent
        target = stage / name
        shutil.copytree(source, target, ignore=_SKIP_CACHES)
        native = [path.name for path in target.rglob("*") if path.suffix in _NATIVE_SUFFIXES]
        if native:
            raise ToolchainError(
                "zipapp", f"runtime package {name!r} ships extension modules: {native[0]}"
            )
    else:
        source = Path(spec.origin)
        if source.suffix != ".py":
            raise ToolchainError("zipapp", f"runtime module {name!r} is not pure Python")
        target = stage / source.name
        shutil.copy2(source, target)

    logger.debug("bundled %s from %s", name, source)
    return target
