import argparse
import logging
import sys

from .command_registry import registered_commands
from .render import RenderError

# importing these modules registers their commands
from . import preview, render, server  # noqa: F401


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mdprev",
        description="Preview markdown files in the browser with live reload.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug messages"
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True
    for name, spec in sorted(registered_commands().items()):
        subparser = subparsers.add_parser(
            name, help=spec["help"], description=spec["description"]
        )
        for argument in spec["arguments"]:
            subparser.add_argument(*argument["flags"], **argument["kwargs"])
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    spec = registered_commands()[args.command]
    kwargs = {
        argument["dest"]: getattr(args, argument["dest"])
        for argument in spec["arguments"]
    }
    try:
        spec["handler"](**kwargs)
    except RenderError as exc:
        parser.exit(1, f"error: {exc}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
