"""Build configuration.

Frozen dataclasses, immutable after creation.  Parsing defaults are
passed explicitly to the parser and walker instead of living in
module-level tables, so tests can override them without leaking state.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

DEFAULT_RENDERER = "kida"
DEFAULT_GEN_PACKAGE = "thicket_gen"
DEFAULT_SERVER_BIND = ":9182"


@dataclass(frozen=True, slots=True)
class ParseDefaults:
    """Defaults consulted while parsing page-resources.

    Override what you need::

        defaults = ParseDefaults(
            default_renderer="raw",
            content_types={".spt": "text/html"},
        )

    Attributes:
        default_renderer: Renderer used when a specline names none.
        content_types: Extension -> MIME type entries consulted before
            the :mod:`mimetypes` table (keys include the leading dot).
    """

    default_renderer: str = DEFAULT_RENDERER
    content_types: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Site builder configuration.  Validated by ``SiteBuilder``.

    Example::

        config = BuildConfig(
            site_root="www",
            output_root="build",
            format=True,
            compile=True,
            mk_out_dir=True,
        )
    """

    site_root: str | Path
    output_root: str | Path
    gen_package: str = DEFAULT_GEN_PACKAGE
    server_bind: str = DEFAULT_SERVER_BIND

    # Stages
    format: bool = False
    compile: bool = False
    mk_out_dir: bool = False

    defaults: ParseDefaults = field(default_factory=ParseDefaults)
