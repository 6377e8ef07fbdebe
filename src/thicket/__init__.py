"""Thicket: compiles a tree of page-resources into a Python site server.

Each file under the site root is a page-resource: plain static content,
or form-feed separated sections of setup code, handler logic, and one or
more output templates.  Thicket generates one Python module per
resource, adds a thin HTTP server shell, and can archive the result into
a single executable.

Basic usage::

    from thicket import BuildConfig, SiteBuilder

    builder = SiteBuilder(BuildConfig(site_root="www", output_root="build",
                                      compile=True, mk_out_dir=True))
    result = builder.build()
    print(result.binary)   # build/bin/thicket_gen-http-server

Parsing a single resource::

    from thicket import parse_resource

    resource = parse_resource("www", "www/hello.txt", "import time\\f...")
"""

__version__ = "0.1.0"
__all__ = [
    "BuildConfig",
    "BuildResult",
    "CodeGenerator",
    "ConfigurationError",
    "GenerationError",
    "MalformedResourceError",
    "PageResource",
    "ParseDefaults",
    "ParseError",
    "PathError",
    "ResourceIOError",
    "ResourceType",
    "SiteBuilder",
    "SpecError",
    "ThicketError",
    "ToolchainError",
    "TreeWalker",
    "parse_resource",
    "parse_spec",
]

# Public name -> defining module
_LAZY_IMPORTS = {
    "BuildConfig": "thicket.config",
    "ParseDefaults": "thicket.config",
    "BuildResult": "thicket.builder",
    "SiteBuilder": "thicket.builder",
    "CodeGenerator": "thicket.codegen.generator",
    "PageResource": "thicket.resources.types",
    "ResourceType": "thicket.resources.types",
    "TreeWalker": "thicket.resources.walker",
    "parse_resource": "thicket.resources.parser",
    "parse_spec": "thicket.resources.spec",
    "ConfigurationError": "thicket.errors",
    "GenerationError": "thicket.errors",
    "MalformedResourceError": "thicket.errors",
    "ParseError": "thicket.errors",
    "PathError": "thicket.errors",
    "ResourceIOError": "thicket.errors",
    "SpecError": "thicket.errors",
    "ThicketError": "thicket.errors",
    "ToolchainError": "thicket.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import thicket`` fast; kida is only imported when code
    generation is actually used.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
