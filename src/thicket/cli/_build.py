"""``thicket build``: generate, format and compile a site."""

import argparse
import logging
import sys

from thicket.builder import SiteBuilder
from thicket.config import BuildConfig
from thicket.errors import ThicketError


def run_build(args: argparse.Namespace) -> None:
    """Build the site described by *args*.

    Configuration and build errors print ``Error: ...`` to stderr and
    exit with status 1.
    """
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = BuildConfig(
        site_root=args.www_root,
        output_root=args.output_root,
        gen_package=args.package,
        server_bind=args.bind,
        format=args.format,
        compile=args.compile,
        mk_out_dir=args.mkdir,
    )
    try:
        builder = SiteBuilder(config)
        result = builder.build()
    except ThicketError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"Generated {len(result.units)} module(s), copied {len(result.statics)} static file(s)")
    print(f"  package: {builder.package_dir}")
    if result.binary is not None:
        print(f"  server:  {result.binary}")
