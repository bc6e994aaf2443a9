"""Command line entry point (`kitboiler` and `python -m kitboiler`)."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import KitBoilerError
from .generate import DEFAULT_PACKAGE, generate
from .gotool import format_source
from .locate import default_locator

USAGE = """kitboiler [--pkg NAME] [--dir DIR] <iface>

kitboiler generates Go kit (https://gokit.io) endpoints, request/response types,
request decoders and http handlers based on an interface that defines a service.

Given a service definition/interface in github.com/me/mypkg/api/somefile.go:

type MyService interface {
	MyFirstFunction(name string) (err error)
	MyFirstQuery() (results []*model.QueryResult, err error)
	MySecondQuery() (result *somepkg.FooBar, err error)
}

call kitboiler like this:

kitboiler github.com/me/mypkg/api.MyService

NOTE: you HAVE to provide names for both the parameters and the return vars in
your interface definition, as those are used by kitboiler. Choose the names
wisely as they will become part of your public interface.
"""


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the exit code: 0 on success, 1 on errors, 2 on usage."""
    parser = argparse.ArgumentParser(
        prog="kitboiler",
        usage=USAGE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("iface", nargs="?", help="Interface: import/path.Name, or pkg.Name to infer the path.")
    parser.add_argument("--pkg", default=DEFAULT_PACKAGE, help="Name of the resulting package.")
    parser.add_argument(
        "--dir",
        default=None,
        help="Package source directory, useful for vendored code (default: current directory).",
    )
    parser.add_argument(
        "--locator",
        choices=["go", "module"],
        default=None,
        help="Package discovery: `go list` or plain go.mod/GOPATH lookup (default: KITBOILER_LOCATOR or auto).",
    )
    parser.add_argument("--no-format", action="store_true", help="Do not run gofmt on the output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution steps to stderr.")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.iface:
        sys.stderr.write(USAGE)
        return 2

    src_dir = Path(args.dir) if args.dir else Path.cwd()
    try:
        src = generate(
            args.iface,
            package=args.pkg,
            src_dir=src_dir,
            locator=default_locator(args.locator),
            formatter=None if args.no_format else format_source,
        )
    except KitBoilerError as e:
        print(e, file=sys.stderr)
        return 1

    sys.stdout.write(src)
    return 0
