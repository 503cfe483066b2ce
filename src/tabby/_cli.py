"""Tabby CLI — tabby build / tabby serve / tabby run.

Entry point for the ``tabby`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tabby CLI."""
    parser = argparse.ArgumentParser(
        prog="tabby",
        description="Content build engine with a live-reloading dev server.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("--quiet", action="store_true", default=None, help="Suppress status output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tabby build
    build_parser = subparsers.add_parser(
        "build",
        help="Build the site into the destination directory",
    )
    build_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    build_parser.add_argument("--dest", default=None, help="Output directory")
    build_parser.add_argument("--location", default=None, help="Public URL of the site")
    build_parser.add_argument("--dev", action="store_true", default=None, help="Include draft pages")

    # tabby serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Build, serve and live reload the site",
    )
    serve_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument("--open", action="store_true", default=None, help="Open a browser")
    serve_parser.add_argument(
        "--single-client",
        action="store_true",
        help="Only live reload the most recently opened page",
    )

    # tabby run
    run_parser = subparsers.add_parser(
        "run",
        help="Run a script registered in _config.py",
    )
    run_parser.add_argument("name", help="Script name")
    run_parser.add_argument("root", nargs="?", default=".", help="Site root directory")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from tabby import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from tabby._errors import TabbyError
    from tabby.app import build, dev, run

    try:
        if args.command == "build":
            build(
                args.root,
                dest=args.dest,
                location=args.location,
                dev=args.dev,
                quiet=args.quiet,
            )
        elif args.command == "serve":
            dev(
                args.root,
                host=args.host,
                port=args.port,
                open_browser=args.open,
                single_client=args.single_client,
                quiet=args.quiet,
            )
        elif args.command == "run":
            if not run(args.root, args.name, quiet=args.quiet):
                sys.exit(1)
    except TabbyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
