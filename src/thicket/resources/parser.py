"""Page-resource parsing.

A page-resource is a text file split into sections by form feeds
(``\\f``).  The number of separators decides the resource type:

====== =====================================================
breaks type
====== =====================================================
0      static: served verbatim, nothing generated
1, 2   json (``application/json`` files) or rendered
> 2    negotiated: one template page per section after logic
====== =====================================================

The first two sections of a non-static resource are the init page
(module-level setup) and the logic page (handler body).  Template pages
start with a specline declaring how, and for which media type, they
render.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from pathlib import Path, PurePosixPath

from thicket.config import ParseDefaults
from thicket.errors import MalformedResourceError, PathError, SpecError
from thicket.resources.spec import SEPARATOR, clean_specline, parse_spec
from thicket.resources.types import Page, PageResource, ResourceType

logger = logging.getLogger("thicket.parser")

JSON_CONTENT_TYPE = "application/json"


def relative_resource_path(site_root: str | Path, path: str | Path) -> str:
    """Return *path* relative to *site_root* as a cleaned POSIX string.

    Raises:
        PathError: *path* is not strictly below *site_root*.
    """
    root = Path(os.path.normpath(os.path.abspath(site_root)))
    absolute = Path(os.path.normpath(os.path.abspath(path)))
    try:
        relative = absolute.relative_to(root)
    except ValueError:
        raise PathError(str(path), f"not under site root {root}") from None
    if not relative.parts:
        raise PathError(str(path), "is the site root itself, not a resource")
    return relative.as_posix()


def guess_content_type(relative_path: str, defaults: ParseDefaults | None = None) -> str:
    """Infer a MIME type from the file extension.  Unknown -> ``""``."""
    suffix = PurePosixPath(relative_path).suffix
    if not suffix:
        return ""
    if defaults is not None:
        override = defaults.content_types.get(suffix) or defaults.content_types.get(
            suffix.lower()
        )
        if override:
            return override
    content_type, _encoding = mimetypes.guess_type(f"resource{suffix}")
    return content_type or ""


def parse_resource(
    site_root: str | Path,
    path: str | Path,
    content: str | bytes,
    defaults: ParseDefaults | None = None,
) -> PageResource:
    """Parse raw file content into a :class:`PageResource`.

    Args:
        site_root: Root of the content tree.
        path: Path of the file being parsed (absolute, or relative to cwd).
        content: File content.  ``bytes`` that are not valid UTF-8 are
            treated as a binary static resource.
        defaults: Parsing defaults (renderer, extra content types).

    Raises:
        PathError: *path* is outside *site_root*.
        MalformedResourceError: Sections don't add up to a valid resource.
        SpecError: A template specline is malformed or repeats a media type.
    """
    defaults = defaults or ParseDefaults()
    relative = relative_resource_path(site_root, path)
    root = Path(os.path.normpath(os.path.abspath(site_root)))
    source = root / relative
    content_type = guess_content_type(relative, defaults)

    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("%s: binary content, treating as static", relative)
            return PageResource(
                site_root=root,
                relative_path=relative,
                resource_type=ResourceType.STATIC,
                content_type=content_type,
                body=content,
                source_path=source,
            )

    raw_pages = content.split(SEPARATOR)
    breaks = len(raw_pages) - 1

    if breaks == 0:
        return PageResource(
            site_root=root,
            relative_path=relative,
            resource_type=ResourceType.STATIC,
            content_type=content_type,
            body=content,
            source_path=source,
        )

    init_page = Page(body=raw_pages[0])
    logic_page = Page(body=raw_pages[1])

    if breaks <= 2:
        if content_type == JSON_CONTENT_TYPE:
            resource_type = ResourceType.JSON
            templates: tuple[Page, ...] = ()
        else:
            resource_type = ResourceType.RENDERED
            if breaks < 2:
                raise MalformedResourceError(
                    relative,
                    "rendered resource has init and logic pages but no template page",
                )
            templates = (
                _template_page(raw_pages[2], resource_type, content_type, defaults, relative),
            )
    else:
        resource_type = ResourceType.NEGOTIATED
        templates = tuple(
            _template_page(raw, resource_type, content_type, defaults, relative)
            for raw in raw_pages[2:]
        )
        _check_unique_media_types(templates, relative)

    logger.debug(
        "%s: %s resource with %d template page(s)", relative, resource_type.value, len(templates)
    )
    return PageResource(
        site_root=root,
        relative_path=relative,
        resource_type=resource_type,
        content_type=content_type,
        init_page=init_page,
        logic_page=logic_page,
        template_pages=templates,
        body=content,
        source_path=source,
    )


def _template_page(
    raw: str,
    resource_type: ResourceType,
    content_type: str,
    defaults: ParseDefaults,
    relative: str,
) -> Page:
    """Split a raw template section into specline and body, then parse the spec."""
    specline, newline, body = raw.partition("\n")
    if not newline:
        raise MalformedResourceError(
            relative, f"template page has no body after its specline {specline!r}"
        )
    spec = parse_spec(
        resource_type,
        content_type,
        clean_specline(specline),
        defaults,
        path=relative,
    )
    return Page(body=body, spec=spec)


def _check_unique_media_types(templates: tuple[Page, ...], relative: str) -> None:
    """Reject negotiated resources that declare a media type twice."""
    seen: set[str] = set()
    for page in templates:
        media_type = page.spec.content_type
        if media_type in seen:
            raise SpecError(
                relative,
                f"media type {media_type!r} is declared by more than one template page",
                specline=media_type,
            )
        seen.add(media_type)
