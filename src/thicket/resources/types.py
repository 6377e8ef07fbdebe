"""Data models for page-resources.

Immutable frozen dataclasses built once per source file per build.
A resource owns its pages; each page keeps a non-owning back-reference
to the resource, attached when the resource is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from thicket.errors import MalformedResourceError


class ResourceType(Enum):
    """How a page-resource is served, decided by its section count."""

    STATIC = "static"
    RENDERED = "rendered"
    JSON = "json"
    NEGOTIATED = "negotiated"


@dataclass(frozen=True, slots=True)
class PageSpec:
    """Content-negotiation declaration for a template page.

    Attributes:
        content_type: MIME type this page renders for.
        renderer: Rendering engine identifier (``"kida"``, ``"markdown"``,
            ``"raw"``).  Empty for the no-op spec of non-template pages.
    """

    content_type: str = ""
    renderer: str = ""


@dataclass(frozen=True, slots=True)
class Page:
    """One section of a page-resource.

    Attributes:
        body: Raw text of the section (specline removed for template pages).
        spec: Negotiation declaration; empty for init and logic pages.
        parent: Owning resource.  Excluded from equality and repr.
    """

    body: str
    spec: PageSpec = field(default_factory=PageSpec)
    parent: PageResource | None = field(default=None, compare=False, repr=False)


# Allowed template-page counts per type: (minimum, maximum or None).
_TEMPLATE_COUNTS: dict[ResourceType, tuple[int, int | None]] = {
    ResourceType.STATIC: (0, 0),
    ResourceType.JSON: (0, 0),
    ResourceType.RENDERED: (1, 1),
    ResourceType.NEGOTIATED: (1, None),
}


@dataclass(frozen=True, slots=True)
class PageResource:
    """A parsed page-resource bound to one source path.

    Attributes:
        site_root: Absolute site root the resource was found under.
        relative_path: Cleaned POSIX path relative to ``site_root``.
            Identity key of the resource.
        resource_type: Static, rendered, JSON or negotiated.
        content_type: MIME type inferred from the file extension.
        init_page: Setup/import code.  ``None`` for static resources.
        logic_page: Response-construction code.  ``None`` for static
            resources.
        template_pages: Output templates in declaration order, which is
            also the negotiation priority order.
        body: Raw content, verbatim.  ``bytes`` only for binary statics.
        source_path: Absolute path the content was read from.
    """

    site_root: Path
    relative_path: str
    resource_type: ResourceType
    content_type: str = ""
    init_page: Page | None = None
    logic_page: Page | None = None
    template_pages: tuple[Page, ...] = ()
    body: str | bytes = ""
    source_path: Path | None = None

    def __post_init__(self) -> None:
        has_code = self.init_page is not None and self.logic_page is not None
        if self.resource_type is ResourceType.STATIC:
            if self.init_page is not None or self.logic_page is not None:
                raise MalformedResourceError(
                    self.relative_path, "static resources carry no code pages"
                )
        elif not has_code:
            raise MalformedResourceError(
                self.relative_path,
                f"{self.resource_type.value} resources need an init page and a logic page",
            )

        low, high = _TEMPLATE_COUNTS[self.resource_type]
        count = len(self.template_pages)
        if count < low or (high is not None and count > high):
            raise MalformedResourceError(
                self.relative_path,
                f"{self.resource_type.value} resource cannot have {count} template page(s)",
            )

        for page in self.pages:
            object.__setattr__(page, "parent", self)

    @property
    def pages(self) -> tuple[Page, ...]:
        """All pages in file order: init, logic, then templates."""
        head = tuple(p for p in (self.init_page, self.logic_page) if p is not None)
        return head + self.template_pages

    @property
    def is_static(self) -> bool:
        return self.resource_type is ResourceType.STATIC
