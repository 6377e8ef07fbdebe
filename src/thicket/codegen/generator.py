"""Code generation: turns a parsed resource into a Python module.

One kida template per resource type renders the unit; the resource's
init page becomes module-level code, its logic page the body of the
handler function, and its template pages string constants rendered at
request time.  Every unit is checked with :func:`ast.parse` before it
leaves the generator, and every failure inside the template engine is
converted to :class:`GenerationError` at this boundary.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kida import Environment, FileSystemLoader

from thicket.codegen.filters import GENERATOR_FILTERS, module_code
from thicket.codegen.naming import (
    check_identifier,
    const_name,
    escape_path,
    func_name,
    output_name,
)
from thicket.config import DEFAULT_GEN_PACKAGE
from thicket.errors import GenerationError
from thicket.resources.types import PageResource, ResourceType

if TYPE_CHECKING:
    from typing import TextIO

logger = logging.getLogger("thicket.codegen")

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Renderers the generated runtime knows how to run
RENDERERS = frozenset({"kida", "markdown", "raw"})

# Renderers whose page bodies are kida template source
_KIDA_RENDERERS = frozenset({"kida", "markdown"})

_UNIT_TEMPLATES = {
    ResourceType.JSON: "json.py.kida",
    ResourceType.RENDERED: "rendered.py.kida",
    ResourceType.NEGOTIATED: "negotiated.py.kida",
}

# Shell file name -> template name
SHELL_TEMPLATES = {
    "__init__.py": "shell_init.py.kida",
    "__main__.py": "shell_main.py.kida",
    "_runtime.py": "shell_runtime.py.kida",
}


@dataclass(frozen=True, slots=True)
class GeneratedUnit:
    """A rendered source unit ready to be written.

    Attributes:
        resource: The resource the unit was generated from.
        output_name: File name inside the generated package.
        module: Module name inside the generated package.
        func_name: Name of the handler function.
        const_name: Prefix of the module-level constants.
        source: Python source text.
    """

    resource: PageResource
    output_name: str
    module: str
    func_name: str
    const_name: str
    source: str


@dataclass(frozen=True, slots=True)
class ShellRoute:
    """One entry of the generated server's route table.

    Attributes:
        url_path: Request path, e.g. ``/shill/cans.txt``.
        kind: ``"module"`` for generated units, ``"static"`` for copies.
        target: Module name, or path below the served docroot.
        handler: Handler function name; ``None`` for statics.
    """

    url_path: str
    kind: str
    target: str
    handler: str | None = None


def url_path_for(resource: PageResource) -> str:
    return "/" + resource.relative_path


def create_environment() -> Environment:
    """Create the kida Environment holding the generation templates."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.update_filters(GENERATOR_FILTERS)
    return env


class CodeGenerator:
    """Renders page-resources into modules of one generated package.

    Usage::

        generator = CodeGenerator("thicket_gen")
        unit = generator.generate(resource)
        (package_dir / unit.output_name).write_text(unit.source)

    Args:
        gen_package: Name of the generated package the units import from.
    """

    __slots__ = ("_env", "_page_env", "gen_package")

    def __init__(self, gen_package: str = DEFAULT_GEN_PACKAGE) -> None:
        self.gen_package = gen_package
        self._env = create_environment()
        # Compiles template-page bodies to catch syntax errors at build time
        self._page_env = Environment()

    def generate(self, resource: PageResource) -> GeneratedUnit:
        """Render *resource* into a :class:`GeneratedUnit`.

        Raises:
            GenerationError: The resource is static, its name cannot be a
                Python identifier, a template page is invalid, or the
                rendered source does not parse.
        """
        path = resource.relative_path
        template_name = _UNIT_TEMPLATES.get(resource.resource_type)
        if template_name is None:
            raise GenerationError(
                path, f"{resource.resource_type.value} resources are served as-is, not generated"
            )

        escaped = escape_path(path)
        func = check_identifier(func_name(escaped), path)
        const = check_identifier(const_name(escaped), path)
        self._check_template_pages(resource)
        future, init = split_future_imports(
            resource.init_page.body if resource.init_page else "", path
        )

        context: dict[str, Any] = {
            "package": self.gen_package,
            "relative_path": path,
            "content_type": resource.content_type,
            "future": future,
            "init": init,
            "logic": resource.logic_page.body if resource.logic_page else "",
            "pages": list(resource.template_pages),
            "func": func,
            "const": const,
        }
        source = self._render(template_name, context, path)
        _check_syntax(source, path)

        logger.debug("%s: generated %s (%d bytes)", path, func, len(source))
        return GeneratedUnit(
            resource=resource,
            output_name=output_name(resource),
            module=escaped,
            func_name=func,
            const_name=const,
            source=source,
        )

    def render_to(self, resource: PageResource, stream: TextIO) -> GeneratedUnit:
        """Generate *resource* and write its source to *stream*.

        Nothing is written unless generation succeeds completely.
        """
        unit = self.generate(resource)
        stream.write(unit.source)
        return unit

    def generate_shell(
        self,
        routes: Sequence[ShellRoute],
        *,
        bind: str,
        docroot: str | Path,
        site_root: str | Path = "",
    ) -> dict[str, str]:
        """Render the server shell files of the generated package.

        Returns:
            Mapping of file name (``__init__.py``, ``__main__.py``,
            ``_runtime.py``) to source text.
        """
        context = {
            "package": self.gen_package,
            "routes": sorted(routes, key=lambda route: route.url_path),
            "bind": bind,
            "docroot": str(docroot),
            "site_root": str(site_root),
        }
        shell: dict[str, str] = {}
        for file_name, template_name in SHELL_TEMPLATES.items():
            source = self._render(template_name, context, file_name)
            _check_syntax(source, file_name)
            shell[file_name] = source
        return shell

    def _render(self, template_name: str, context: dict[str, Any], path: str) -> str:
        """Render a generation template; engine failures become GenerationError."""
        try:
            template = self._env.get_template(template_name)
            source = template.render(context)
        except Exception as exc:
            raise GenerationError(path, f"rendering {template_name} failed: {exc}") from exc
        return source.rstrip("\n") + "\n"

    def _check_template_pages(self, resource: PageResource) -> None:
        """Validate renderers and compile kida page bodies."""
        for index, page in enumerate(resource.template_pages):
            renderer = page.spec.renderer
            if renderer not in RENDERERS:
                known = ", ".join(sorted(RENDERERS))
                raise GenerationError(
                    resource.relative_path,
                    f"template page {index} uses unknown renderer {renderer!r} (known: {known})",
                )
            if renderer not in _KIDA_RENDERERS:
                continue
            try:
                self._page_env.from_string(page.body)
            except Exception as exc:
                raise GenerationError(
                    resource.relative_path,
                    f"template page {index} ({page.spec.content_type or 'default'}) "
                    f"does not compile: {exc}",
                ) from exc


def split_future_imports(init: str, path: str) -> tuple[str, str]:
    """Split an init page into its ``__future__`` imports and the rest.

    Only imports leading the page (after an optional docstring) are
    hoisted above the generated runtime import, the only place the
    compiler accepts them.  A late one is left where it is and fails the
    compile check, as it would in a hand-written module.

    Raises:
        GenerationError: The init page is not valid Python.
    """
    init = module_code(init)
    try:
        tree = ast.parse(init, filename=path)
    except SyntaxError as exc:
        raise GenerationError(
            path, f"init page is not valid Python: {exc.msg} (line {exc.lineno})"
        ) from exc

    body = tree.body
    if body and isinstance(body[0], ast.Expr) and isinstance(body[0].value, ast.Constant):
        body = body[1:]
    future_rows: set[int] = set()
    for node in body:
        if not (isinstance(node, ast.ImportFrom) and node.module == "__future__"):
            break
        future_rows.update(range(node.lineno, (node.end_lineno or node.lineno) + 1))
    if not future_rows:
        return "", init

    lines = init.splitlines()
    future = [line for row, line in enumerate(lines, start=1) if row in future_rows]
    rest = [line for row, line in enumerate(lines, start=1) if row not in future_rows]
    return "\n".join(future), "\n".join(rest)


def _check_syntax(source: str, path: str) -> None:
    """Compile *source*, catching what the parser alone lets through."""
    try:
        compile(source, path, "exec", dont_inherit=True)
    except (SyntaxError, ValueError) as exc:
        line = getattr(exc, "lineno", None)
        detail = getattr(exc, "msg", None) or str(exc)
        raise GenerationError(
            path, f"generated source is not valid Python: {detail} (line {line})"
        ) from exc
