"""Content tree walking.

Walks a site root and parses every content file into a
:class:`PageResource`.  Iteration is lazy and restartable: each
``iter()`` starts a fresh walk.  A file that fails to read or parse is
reported as a :class:`WalkEntry` carrying the error, and the walk goes
on; the consumer decides whether to stop.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from thicket.config import ParseDefaults
from thicket.errors import ConfigurationError, PathError, ResourceIOError, ThicketError
from thicket.resources.parser import parse_resource, relative_resource_path
from thicket.resources.types import PageResource

logger = logging.getLogger("thicket.walker")

# Directory and file names never treated as content
_SKIP_NAMES = frozenset({"__pycache__"})

# File suffixes never treated as content (build metadata, editor backups)
_SKIP_SUFFIXES = (".pyc", "~")


def is_content_name(name: str) -> bool:
    """Return True if a file or directory name can hold content.

    Hidden names (``.git``, ``.thicket-index.json``), ``__pycache__``,
    bytecode and editor backups are skipped.
    """
    if name.startswith("."):
        return False
    if name in _SKIP_NAMES:
        return False
    return not name.endswith(_SKIP_SUFFIXES)


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """One file visited by the walker.

    Exactly one of ``resource`` and ``error`` is set.

    Attributes:
        path: Absolute path of the file.
        resource: The parsed resource, on success.
        error: The read or parse failure, attributed to ``path``.
    """

    path: Path
    resource: PageResource | None = None
    error: ThicketError | None = None

    def __post_init__(self) -> None:
        if (self.resource is None) == (self.error is None):
            raise ValueError("a walk entry holds exactly one of resource and error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> PageResource:
        """Return the resource or raise the recorded error."""
        if self.resource is None:
            raise self.error
        return self.resource


class TreeWalker:
    """Walks a site root, yielding one :class:`WalkEntry` per content file.

    Usage::

        walker = TreeWalker("thicket_gen", "www")
        for entry in walker:
            resource = entry.unwrap()

    Args:
        gen_package: Name of the package the resources are generated into.
        root: Site root directory.
        defaults: Parsing defaults handed to the parser.
        exclude: Paths skipped during the walk (e.g. an output root
            nested inside the site root).

    Raises:
        ConfigurationError: *gen_package* is empty.
        PathError: *root* does not exist or is not a directory.
    """

    __slots__ = ("_defaults", "_exclude", "gen_package", "root")

    def __init__(
        self,
        gen_package: str,
        root: str | Path,
        defaults: ParseDefaults | None = None,
        *,
        exclude: Iterable[str | Path] = (),
    ) -> None:
        if not gen_package:
            raise ConfigurationError("generated package name must not be empty")

        path = Path(os.path.abspath(root))
        if not path.exists():
            raise PathError(str(root), "site root does not exist")
        if not path.is_dir():
            raise PathError(str(root), "site root is not a directory")

        self.gen_package = gen_package
        self.root = path
        self._defaults = defaults or ParseDefaults()
        self._exclude = frozenset(Path(os.path.abspath(p)) for p in exclude)

    def __iter__(self) -> Iterator[WalkEntry]:
        logger.debug("walking %s", self.root)
        for file in self._files(self.root):
            yield self._visit(file)

    def resources(self) -> Iterator[PageResource]:
        """Yield resources, raising the first error encountered."""
        for entry in self:
            yield entry.unwrap()

    def _files(self, directory: Path) -> Iterator[Path]:
        """Yield content files below *directory*, depth-first, sorted."""
        try:
            children = sorted(directory.iterdir())
        except OSError as exc:
            raise ResourceIOError(str(directory), f"cannot list directory: {exc}") from exc

        for item in children:
            if not is_content_name(item.name) or item in self._exclude:
                continue
            if item.is_dir():
                yield from self._files(item)
            elif item.is_file():
                yield item

    def _visit(self, file: Path) -> WalkEntry:
        """Read and parse one file.  The handle is closed before returning."""
        try:
            content = file.read_bytes()
        except OSError as exc:
            error = ResourceIOError(
                relative_resource_path(self.root, file), f"cannot read: {exc}"
            )
            error.__cause__ = exc
            logger.debug("%s", error)
            return WalkEntry(path=file, error=error)

        try:
            resource = parse_resource(self.root, file, content, self._defaults)
        except ThicketError as exc:
            logger.debug("%s", exc)
            return WalkEntry(path=file, error=exc)
        return WalkEntry(path=file, resource=resource)
