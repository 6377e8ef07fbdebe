"""Page-resource model, parsing and content-tree walking."""

from thicket.resources.parser import guess_content_type, parse_resource
from thicket.resources.spec import SEPARATOR, parse_spec
from thicket.resources.types import Page, PageResource, PageSpec, ResourceType
from thicket.resources.walker import TreeWalker, WalkEntry

__all__ = [
    "SEPARATOR",
    "Page",
    "PageResource",
    "PageSpec",
    "ResourceType",
    "TreeWalker",
    "WalkEntry",
    "guess_content_type",
    "parse_resource",
    "parse_spec",
]
