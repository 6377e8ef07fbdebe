"""Output and symbol naming for generated units.

A resource's relative path is flattened into an escaped name by
replacing each reserved character with a fixed token.  The escaped name
is the module file name (plus ``.py``) and the source of the handler
function and constant names inside the module.

::

    "shill/cans.txt"  ->  "shill-SLASH-cans-DOT-txt"
                      ->  ShillSlashCansDotTxt, SHILL_SLASH_CANS_DOT_TXT
"""

import keyword
import posixpath

from thicket.errors import GenerationError
from thicket.resources.types import PageResource

GENERATED_EXTENSION = ".py"

# Tokens never contain the characters they replace.  "%" has no leading
# dash so a path segment starting with it stays a valid identifier part.
ESCAPES: tuple[tuple[str, str], ...] = (
    (".", "-DOT-"),
    ("/", "-SLASH-"),
    (" ", "-SPACE-"),
    ("%", "PCT-"),
)


def escape_path(relative_path: str) -> str:
    """Clean *relative_path* and replace reserved characters with tokens."""
    escaped = posixpath.normpath(relative_path)
    for char, token in ESCAPES:
        escaped = escaped.replace(char, token)
    return escaped


def output_name(resource: PageResource) -> str:
    """File name of the resource's output.

    Static resources keep their relative path; everything else becomes
    a flat module name.
    """
    if resource.is_static:
        return resource.relative_path
    return escape_path(resource.relative_path) + GENERATED_EXTENSION


def func_name(escaped: str) -> str:
    """Camel-case each ``-`` separated segment of an escaped name."""
    return "".join(part[0].upper() + part[1:].lower() for part in escaped.split("-") if part)


def const_name(escaped: str) -> str:
    """Upper-snake-case form of an escaped name."""
    return escaped.upper().replace("-", "_")


def check_identifier(name: str, relative_path: str) -> str:
    """Return *name* if it is a usable Python identifier.

    Paths whose escaped form starts with a digit, keeps punctuation, or
    lands on a keyword are refused rather than rewritten.

    Raises:
        GenerationError: *name* is not a valid identifier or is a keyword.
    """
    if not name.isidentifier():
        raise GenerationError(
            relative_path, f"escaped name {name!r} is not a valid Python identifier"
        )
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        raise GenerationError(relative_path, f"escaped name {name!r} is a Python keyword")
    return name
