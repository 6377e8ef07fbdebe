"""Site builder: walks a site root and compiles it into a server package.

Stages run strictly in sequence::

    VALIDATED -> WALKING -> GENERATING -> WRITING -> [FORMATTING] -> [COMPILING] -> DONE

Walking starts by removing the generated modules and docroot of any
earlier build, so the output only ever holds the current site.
Generation and writing happen per resource, so a failure late in the
walk leaves every earlier unit of this build on disk.  The first error
moves the builder to ``FAILED`` (recorded in :attr:`SiteBuilder.failure`)
and propagates unchanged.

Output layout::

    <output_root>/src/<gen_package>/<escaped-name>.py   generated units
    <output_root>/src/<gen_package>/__init__.py          route table (+ shell)
    <output_root>/docroot/<relative path>                static copies
    <output_root>/bin/<gen_package>-http-server          compiled server
"""

from __future__ import annotations

import keyword
import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from thicket.codegen.generator import (
    SHELL_TEMPLATES,
    CodeGenerator,
    GeneratedUnit,
    ShellRoute,
    url_path_for,
)
from thicket.config import BuildConfig
from thicket.errors import ConfigurationError, GenerationError, PathError, ResourceIOError
from thicket.resources.types import PageResource
from thicket.resources.walker import TreeWalker
from thicket.toolchain import (
    MARKDOWN_PACKAGES,
    RUNTIME_PACKAGES,
    compile_package,
    format_sources,
)

logger = logging.getLogger("thicket.build")

# Subdirectories of the output root written by a build
OUTPUT_DIRS = ("src", "docroot", "bin")


class BuildStage(Enum):
    VALIDATED = "validated"
    WALKING = "walking"
    GENERATING = "generating"
    WRITING = "writing"
    FORMATTING = "formatting"
    COMPILING = "compiling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StageFailure:
    """The stage a build failed in and the error that stopped it."""

    stage: BuildStage
    cause: BaseException


@dataclass(slots=True)
class BuildResult:
    """What a build produced.

    Attributes:
        units: Paths of the generated modules, in walk order.
        statics: Paths of the static copies, in walk order.
        shell: Paths of the server shell files.
        binary: The compiled server, when compiling was requested.
        formatted: Whether the format pass ran.
    """

    units: list[Path] = field(default_factory=list)
    statics: list[Path] = field(default_factory=list)
    shell: list[Path] = field(default_factory=list)
    binary: Path | None = None
    formatted: bool = False


def parse_bind(bind: str) -> tuple[str, int]:
    """Split a ``[host]:port`` bind address.

    Raises:
        ConfigurationError: The address has no port, or the port is not
            an integer in 1-65535.
    """
    host, sep, port_text = bind.rpartition(":")
    if not sep:
        raise ConfigurationError(f"server bind address {bind!r} must look like [host]:port")
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigurationError(f"server bind address {bind!r} has a non-numeric port") from None
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"server bind address {bind!r} port must be in 1-65535")
    return host, port


class SiteBuilder:
    """Compiles a site root into a generated package and server binary.

    Usage::

        builder = SiteBuilder(BuildConfig(site_root="www", output_root="build",
                                          mk_out_dir=True))
        result = builder.build()

    All configuration is validated here; ``build()`` never sees an
    invalid config.

    Raises:
        PathError: The site root is missing or not a directory, or the
            output root is missing (without ``mk_out_dir``) or not a
            directory.
        ConfigurationError: Invalid package name or bind address.
    """

    def __init__(self, config: BuildConfig) -> None:
        gen_package = config.gen_package
        if not gen_package.isidentifier() or keyword.iskeyword(gen_package):
            raise ConfigurationError(
                f"generated package name {gen_package!r} is not a valid Python identifier"
            )
        parse_bind(config.server_bind)

        output_root = Path(os.path.abspath(config.output_root))
        # Validates the site root up front; build outputs are never content
        self._walker = TreeWalker(
            gen_package,
            config.site_root,
            config.defaults,
            exclude=[output_root / name for name in OUTPUT_DIRS],
        )

        if not output_root.exists():
            if not config.mk_out_dir:
                raise PathError(str(config.output_root), "output root does not exist")
            try:
                output_root.mkdir(parents=True)
            except OSError as exc:
                raise PathError(
                    str(config.output_root), f"cannot create output root: {exc}"
                ) from exc
            logger.info("created output root %s", output_root)
        elif not output_root.is_dir():
            raise PathError(str(config.output_root), "output root is not a directory")

        self.config = config
        self.site_root = self._walker.root
        self.output_root = output_root
        self.gen_package = gen_package
        self.generator = CodeGenerator(gen_package)
        self.stage = BuildStage.VALIDATED
        self.failure: StageFailure | None = None

    @property
    def package_dir(self) -> Path:
        return self.output_root / "src" / self.gen_package

    @property
    def docroot(self) -> Path:
        return self.output_root / "docroot"

    @property
    def binary_path(self) -> Path:
        return self.output_root / "bin" / f"{self.gen_package}-http-server"

    def build(self) -> BuildResult:
        """Run every stage.  See the module docstring for the order."""
        try:
            return self._build()
        except Exception as exc:
            self.failure = StageFailure(stage=self.stage, cause=exc)
            logger.error("build failed while %s: %s", self.stage.value, exc)
            self.stage = BuildStage.FAILED
            raise

    def _build(self) -> BuildResult:
        result = BuildResult()
        routes: list[ShellRoute] = []
        claimed = {file_name: "the server shell" for file_name in SHELL_TEMPLATES}
        uses_markdown = False

        self._enter(BuildStage.WALKING)
        self._clear_previous_output()
        self._mkdir(self.package_dir)
        for entry in self._walker:
            resource = entry.unwrap()

            if resource.is_static:
                self._enter(BuildStage.WRITING)
                result.statics.append(self._copy_static(resource))
                routes.append(
                    ShellRoute(
                        url_path=url_path_for(resource),
                        kind="static",
                        target=resource.relative_path,
                    )
                )
                self._enter(BuildStage.WALKING)
                continue

            self._enter(BuildStage.GENERATING)
            unit = self.generator.generate(resource)
            self._claim(claimed, unit)
            uses_markdown = uses_markdown or any(
                page.spec.renderer == "markdown" for page in resource.template_pages
            )

            self._enter(BuildStage.WRITING)
            result.units.append(self._write(self.package_dir / unit.output_name, unit.source))
            routes.append(
                ShellRoute(
                    url_path=url_path_for(resource),
                    kind="module",
                    target=unit.module,
                    handler=unit.func_name,
                )
            )
            self._enter(BuildStage.WALKING)

        self._enter(BuildStage.WRITING)
        shell = self.generator.generate_shell(
            routes,
            bind=self.config.server_bind,
            docroot=self.docroot,
            site_root=self.site_root,
        )
        for file_name, source in shell.items():
            result.shell.append(self._write(self.package_dir / file_name, source))
        logger.info(
            "wrote %d unit(s) and %d static file(s) to %s",
            len(result.units),
            len(result.statics),
            self.output_root,
        )

        if self.config.format:
            self._enter(BuildStage.FORMATTING)
            format_sources(self.package_dir)
            result.formatted = True

        if self.config.compile:
            self._enter(BuildStage.COMPILING)
            runtime_packages = RUNTIME_PACKAGES + (MARKDOWN_PACKAGES if uses_markdown else ())
            result.binary = compile_package(
                self.output_root / "src", self.gen_package, self.binary_path, runtime_packages
            )

        self._enter(BuildStage.DONE)
        return result

    def _enter(self, stage: BuildStage) -> None:
        if stage is not self.stage:
            logger.debug("stage: %s -> %s", self.stage.value, stage.value)
            self.stage = stage

    def _claim(self, claimed: dict[str, str], unit: GeneratedUnit) -> None:
        """Refuse two resources that map to the same output file."""
        path = unit.resource.relative_path
        previous = claimed.setdefault(unit.output_name, path)
        if previous != path:
            raise GenerationError(
                path, f"output name {unit.output_name!r} is already used by {previous!r}"
            )

    def _clear_previous_output(self) -> None:
        """Remove what an earlier build left in the package dir and docroot.

        Only generated modules, byte-code caches and the docroot are
        removed.  Other files in the package dir are left alone.
        """
        try:
            for path in self.package_dir.glob("*.py"):
                path.unlink()
            shutil.rmtree(self.package_dir / "__pycache__", ignore_errors=True)
            if self.docroot.is_dir():
                shutil.rmtree(self.docroot)
        except OSError as exc:
            raise ResourceIOError(
                str(self.output_root), f"cannot clear previous output: {exc}"
            ) from exc

    def _mkdir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ResourceIOError(str(directory), f"cannot create directory: {exc}") from exc

    def _write(self, path: Path, source: str) -> Path:
        try:
            path.write_text(source, encoding="utf-8")
        except OSError as exc:
            raise ResourceIOError(str(path), f"cannot write: {exc}") from exc
        logger.debug("wrote %s", path)
        return path

    def _copy_static(self, resource: PageResource) -> Path:
        """Mirror a static resource into the served docroot."""
        target = self.docroot / resource.relative_path
        self._mkdir(target.parent)
        try:
            if resource.source_path is not None:
                shutil.copy2(resource.source_path, target)
            elif isinstance(resource.body, bytes):
                target.write_bytes(resource.body)
            else:
                target.write_text(resource.body, encoding="utf-8")
        except OSError as exc:
            raise ResourceIOError(resource.relative_path, f"cannot copy to docroot: {exc}") from exc
        logger.debug("copied %s", resource.relative_path)
        return target
