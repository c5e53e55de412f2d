"""The ``rtfdoc`` command.

Three subcommands::

    rtfdoc convert notes.md                      # writes notes.rtf
    rtfdoc convert notes.md -o - --title Notes   # RTF on stdout
    cat notes.md | rtfdoc convert - -o notes.rtf --style business
    rtfdoc styles                                # preset names
    rtfdoc styles academic --json > styles.json  # editable definitions
    rtfdoc check styles.json                     # validate a stylesheet

``convert`` renders Markdown through a style preset, optionally patched by a
JSON stylesheet. ``styles --json`` prints a preset's stylesheet definitions
so they can be edited and passed back with ``--stylesheet``. ``check`` loads
a stylesheet file into an empty document, commits it and prints the handle
each style received.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from rtfdoc import __version__
from rtfdoc.converter import INFORMATION_FIELDS, RTF_ENCODING, Converter
from rtfdoc.document import Document
from rtfdoc.logger import configure, get_logger
from rtfdoc.style_manager import StyleManager
from rtfdoc.stylesheet import Stylesheet

logger = get_logger(__name__)

STDIO = "-"


def _add_convert(subparsers) -> None:
    cmd = subparsers.add_parser("convert", help="Convert a Markdown file to RTF.")
    cmd.add_argument("input", help="Markdown file, or - for standard input.")
    cmd.add_argument(
        "-o", "--output",
        help="RTF file to write, or - for standard output. "
             "Defaults to the input path with an .rtf suffix.",
    )
    cmd.add_argument("-s", "--style", default="default", choices=StyleManager.PRESETS,
                     help="Style preset (default: %(default)s).")
    cmd.add_argument("--stylesheet", type=Path,
                     help="JSON style definitions merged over the preset by id.")
    cmd.add_argument("-e", "--encoding", default="utf-8",
                     help="Encoding of the Markdown input (default: %(default)s).")
    cmd.add_argument("--no-images", dest="load_images", action="store_false",
                     help="Write image alt text instead of embedding pictures.")
    info = cmd.add_argument_group("document information")
    info.add_argument("--title", help="Title; the first top-level heading otherwise.")
    info.add_argument("--author")
    info.add_argument("--company")
    info.add_argument("--comments")
    cmd.set_defaults(handler=_convert)


def _add_styles(subparsers) -> None:
    cmd = subparsers.add_parser("styles", help="List presets or print one as JSON.")
    cmd.add_argument("preset", nargs="?", choices=StyleManager.PRESETS)
    cmd.add_argument("--json", action="store_true",
                     help="Print the preset's stylesheet definitions as JSON.")
    cmd.set_defaults(handler=_styles)


def _add_check(subparsers) -> None:
    cmd = subparsers.add_parser("check", help="Validate a JSON stylesheet.")
    cmd.add_argument("stylesheet", type=Path)
    cmd.set_defaults(handler=_check)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtfdoc",
        description="Write Rich Text Format documents from Markdown.",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug output to stderr.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
    _add_convert(subparsers)
    _add_styles(subparsers)
    _add_check(subparsers)
    return parser


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def _convert(args: argparse.Namespace) -> int:
    if args.input == STDIO:
        markdown = sys.stdin.read()
        base_path = Path.cwd()
        default_output = None
    else:
        source = Path(args.input)
        markdown = source.read_text(encoding=args.encoding)
        base_path = source.parent
        default_output = source.with_suffix(".rtf")

    output = args.output or default_output
    if output is None:
        raise ValueError("--output is required when reading from standard input")

    converter = Converter(style_preset=args.style, stylesheet_path=args.stylesheet,
                          load_images=args.load_images)
    information = {field: getattr(args, field) for field in INFORMATION_FIELDS}
    rtf = converter.build_document(markdown, base_path, information).to_rtf()

    if output == STDIO:
        sys.stdout.write(rtf)
        return 0
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rtf, encoding=RTF_ENCODING)
    logger.debug("Wrote %d characters to %s", len(rtf), output)
    print(f"Converted: {output}", file=sys.stderr)
    return 0


def _styles(args: argparse.Namespace) -> int:
    if args.preset is None:
        if args.json:
            raise ValueError("--json needs a preset name")
        for preset in StyleManager.PRESETS:
            print(preset)
        return 0
    manager = StyleManager(args.preset)
    if args.json:
        print(json.dumps(manager.stylesheet_entries(), indent=2))
    else:
        for name in manager.list_style_names():
            print(name)
    return 0


def _check(args: argparse.Namespace) -> int:
    resolved = Stylesheet.from_json(Document(), args.stylesheet).commit()
    for entry in resolved.entries:
        print(f"{entry.handle:>4}  {entry.id}")
    print(f"{len(resolved)} styles OK", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``rtfdoc`` command; returns the exit status."""
    args = _build_parser().parse_args(argv)
    configure(args.verbose)
    try:
        return args.handler(args)
    except (ValueError, LookupError, OSError) as exc:
        print(f"rtfdoc {args.command}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
