"""Entrypoints for tputfmt

This module contains the command-line-interface of `tputfmt`. The
`tputfmt_cli()` entrypoint can be safely used from tests to run the cli.
"""


import argparse
import json
import sys
import typing
from typing import List, Optional

import tputfmt
from tputfmt import config
from tputfmt.formatter import Formatter
from tputfmt.resolver import Attribute, NullResolver, describe, detect
from tputfmt.styles import StyleError, StyleSheet, ValidationResult, validate


def color_index(value: str) -> int:
    try:
        index = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid color index '{value}'") from None
    if index < 0:
        raise argparse.ArgumentTypeError(f"invalid color index '{value}'")
    return index


def make_formatter(args: argparse.Namespace, styles: StyleSheet) -> Formatter:
    """Formatter for stdout, honoring --force / --no-color"""
    if args.no_color:
        return Formatter(NullResolver(), styles)

    if not (args.force or config.force() or sys.stdout.isatty()):
        return Formatter(NullResolver(), styles)

    return Formatter(detect(), styles)


def load_styles(path: Optional[str]) -> StyleSheet:
    styles = StyleSheet.default()
    path = path or config.styles_path()
    if path:
        styles = styles.merge(StyleSheet.load(path))
    return styles


def write(text: str) -> None:
    """Write `text` to stdout, keeping escape sequences that are not valid UTF-8"""
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(text)
        return
    sys.stdout.flush()
    encoding = sys.stdout.encoding or "utf8"
    buffer.write(text.encode(encoding, "surrogateescape"))
    buffer.flush()


def show_validation(vt: Formatter, result: ValidationResult, name: str) -> None:
    write(vt.attribute("bold", name) + " ")

    if result:
        write("is " + vt.style("success", "valid") + "\n")
        return

    write("has " + vt.style("error", "errors") + ":\n\n")

    for error in result:
        write(vt.attribute("bold", error.id) + ":\n")
        write(f"  {error.message}\n\n")


def show_palette(vt: Formatter, as_json: bool) -> None:
    if as_json:
        info = describe(vt.resolver)
        info["colors"] = vt.colors
        info["sequences"] = vt.cache
        json.dump(info, sys.stdout)
        sys.stdout.write("\n")
        return

    print(f"colors:\t{vt.colors}")
    for key, seq in sorted(vt.cache.items()):
        write(f"{key + ':': <11}\t{seq!r}\t{vt.wrap(seq, 'sample')}\n")


@typing.no_type_check  # see https://github.com/python/typeshed/issues/3107
def parse_arguments(sys_argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tputfmt",
                                     description="Format text with terminal colors and attributes")

    parser.add_argument("--styles", metavar="FILE", default=None,
                        help="json file with style definitions, merged over the built-in styles")
    parser.add_argument("--force", action="store_true",
                        help="format even if stdout is not a terminal")
    parser.add_argument("--no-color", action="store_true",
                        help="never format, print plain text")
    parser.add_argument("-n", dest="newline", action="store_false",
                        help="do not print the trailing newline")
    parser.add_argument("--version", action="version",
                        help="return the version of tputfmt",
                        version="%(prog)s " + tputfmt.__version__)

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("fg", help="set the foreground color")
    p.add_argument("index", metavar="INDEX", type=color_index, help="color index")
    p.add_argument("text", metavar="TEXT", nargs="*", help="text to format")

    p = sub.add_parser("bg", help="set the background color")
    p.add_argument("index", metavar="INDEX", type=color_index, help="color index")
    p.add_argument("text", metavar="TEXT", nargs="*", help="text to format")

    p = sub.add_parser("attr", help="apply a text attribute")
    p.add_argument("name", metavar="NAME",
                   help="one of: " + ", ".join(a.name.lower() for a in Attribute))
    p.add_argument("text", metavar="TEXT", nargs="*", help="text to format")

    p = sub.add_parser("style", help="apply a named style")
    p.add_argument("name", metavar="NAME", help="name of the style")
    p.add_argument("text", metavar="TEXT", nargs="*", help="text to format")

    p = sub.add_parser("palette", help="show the resolved sequences")
    p.add_argument("--json", action="store_true",
                   help="output results in JSON format")

    p = sub.add_parser("validate", help="validate a style sheet")
    p.add_argument("path", metavar="FILE", help="json style sheet to validate")
    p.add_argument("--json", action="store_true",
                   help="output results in JSON format")

    return parser.parse_args(sys_argv[1:])


def validate_file(vt: Formatter, path: str, as_json: bool) -> int:
    try:
        with open(path, encoding="utf8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        res = ValidationResult(path)
        res.fail(f"invalid JSON: {e}")
    else:
        res = validate(data, path)

    if as_json:
        json.dump(res.as_dict(), sys.stdout)
        sys.stdout.write("\n")
    else:
        show_validation(vt, res, path)

    return 0 if res else 1


def tputfmt_cli(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(sys.argv if argv is None else argv)

    try:
        styles = load_styles(args.styles)
        vt = make_formatter(args, styles)
    except (StyleError, ValueError, RuntimeError, OSError) as e:
        print(f"tputfmt: {e}", file=sys.stderr)
        return 1

    if args.command == "palette":
        show_palette(vt, args.json)
        return 0

    if args.command == "validate":
        try:
            return validate_file(vt, args.path, args.json)
        except OSError as e:
            print(f"tputfmt: {e}", file=sys.stderr)
            return 1

    text = " ".join(args.text)
    if args.command == "fg":
        out = vt.foreground(args.index, text)
    elif args.command == "bg":
        out = vt.background(args.index, text)
    elif args.command == "attr":
        out = vt.attribute(args.name, text)
    else:
        out = vt.style(args.name, text)

    if args.newline:
        out += "\n"
    write(out)

    return 0
