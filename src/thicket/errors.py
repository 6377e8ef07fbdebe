"""Thicket exception hierarchy.

Shared across the parser, tree walker, code generator and site builder
so every stage raises and catches the same types.  Errors that belong
to a single resource carry its path so failures are never anonymous.
"""


class ThicketError(Exception):
    """Base for all thicket-specific errors."""


class ConfigurationError(ThicketError):
    """Raised when builder or walker configuration is invalid.

    Always raised at construction time, never deferred to ``build()``.
    """


class PathError(ThicketError):
    """A root directory is missing, or a path falls outside the site root."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class ParseError(ThicketError):
    """A page-resource could not be parsed."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class MalformedResourceError(ParseError):
    """Section layout contradicts the resource type (e.g. missing template)."""


class SpecError(ParseError):
    """A specline is malformed, or two pages negotiate the same media type."""

    def __init__(self, path: str, detail: str, specline: str = "") -> None:
        self.specline = specline
        super().__init__(path, detail)


class GenerationError(ThicketError):
    """A resource could not be turned into a generated source unit."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class ResourceIOError(ThicketError):
    """Reading a source file or writing an output file failed.

    The underlying ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {detail}")


class ToolchainError(ThicketError):
    """The format or compile collaborator failed.

    ``diagnostic`` holds the tool's output verbatim.
    """

    def __init__(self, tool: str, diagnostic: str, returncode: int | None = None) -> None:
        self.tool = tool
        self.diagnostic = diagnostic
        self.returncode = returncode
        message = f"{tool} failed"
        if returncode is not None:
            message += f" (exit {returncode})"
        if diagnostic:
            message += f":\n{diagnostic}"
        super().__init__(message)
