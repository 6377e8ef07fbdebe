"""Specline parsing for template pages.

A specline is the first line of a template page.  What it may contain
depends on the resource type:

- rendered:   ``[renderer]``
- negotiated: ``media/type [renderer]``

Renderer tokens may carry a ``#!`` prefix (``#!kida``); the prefix is
dropped so the stored renderer is the bare identifier.
"""

from thicket.config import ParseDefaults
from thicket.errors import SpecError
from thicket.resources.types import PageSpec, ResourceType

SEPARATOR = "\f"

_RENDERER_PREFIX = "#!"


def clean_specline(raw: str) -> str:
    """Strip separator characters and surrounding whitespace."""
    return raw.replace(SEPARATOR, "").strip()


def renderer_name(token: str) -> str:
    """Return the bare renderer identifier for a specline token."""
    return token.removeprefix(_RENDERER_PREFIX)


def parse_spec(
    resource_type: ResourceType,
    prior_content_type: str,
    specline: str,
    defaults: ParseDefaults | None = None,
    *,
    path: str = "",
) -> PageSpec:
    """Parse a specline into a :class:`PageSpec`.

    Args:
        resource_type: Type of the resource that owns the page.
        prior_content_type: Content type inferred for the resource.
        specline: First line of the page, already cleaned.
        defaults: Parsing defaults (default renderer).
        path: Resource path, used in error messages.

    Raises:
        SpecError: A negotiated specline does not have one or two tokens.
    """
    defaults = defaults or ParseDefaults()

    match resource_type:
        case ResourceType.STATIC:
            return PageSpec()
        case ResourceType.JSON:
            return PageSpec(
                content_type=prior_content_type,
                renderer=defaults.default_renderer,
            )
        case ResourceType.RENDERED:
            renderer = renderer_name(specline) if specline else ""
            return PageSpec(
                content_type=prior_content_type,
                renderer=renderer or defaults.default_renderer,
            )
        case ResourceType.NEGOTIATED:
            parts = specline.split()
            if len(parts) == 1:
                return PageSpec(content_type=parts[0], renderer=defaults.default_renderer)
            if len(parts) == 2:
                return PageSpec(content_type=parts[0], renderer=renderer_name(parts[1]))
            raise SpecError(
                path,
                "a negotiated resource specline must have one or two parts: "
                f"media/type [#!renderer]. Yours is {specline!r}",
                specline=specline,
            )

    raise SpecError(path, f"can't make a page spec for resource type {resource_type!r}")
