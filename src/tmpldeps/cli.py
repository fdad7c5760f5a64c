"""Command-line interface.

Usage:
    tmpldeps extract config.tmpl --defaults
    tmpldeps extract - --variant utility --json < app.tmpl
    tmpldeps render app.tmpl --set port=9090 --values values.json
    tmpldeps functions --variant utility

Exit codes: 0 success, 1 template error, 2 usage or input error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from tmpldeps.analysis.results import VariableInfo
from tmpldeps.config import ExtractionConfig
from tmpldeps.environment.core import Environment
from tmpldeps.environment.exceptions import TemplateError
from tmpldeps.functions.variants import BuildVariant

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TEMPLATE_ERROR = 1
EXIT_USAGE = 2


def _variant(name: str) -> BuildVariant:
    try:
        return BuildVariant.from_name(name)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _environment(args: argparse.Namespace) -> Environment:
    overrides: dict[str, Any] = {}
    if args.variant is not None:
        overrides["variant"] = args.variant
    if getattr(args, "max_depth", None) is not None:
        overrides["max_depth"] = args.max_depth
    return Environment(ExtractionConfig.from_env(**overrides))


def _unique_infos(infos: Sequence[VariableInfo]) -> list[VariableInfo]:
    seen: set[str] = set()
    result: list[VariableInfo] = []
    for info in infos:
        if info.name not in seen:
            seen.add(info.name)
            result.append(info)
    return result


def _run_extract(args: argparse.Namespace) -> int:
    env = _environment(args)
    source = _read_source(args.file)
    infos = env.extract_with_defaults(source)
    if args.unique:
        infos = _unique_infos(infos)

    if args.json:
        payload: list[Any]
        if args.defaults:
            payload = [info.to_dict() for info in infos]
        else:
            payload = [info.name for info in infos]
        print(json.dumps(payload, indent=2))
        return EXIT_OK

    for info in infos:
        line = info.name
        if args.defaults and info.default_value is not None:
            line += f"={info.default_value}"
        print(line)
    return EXIT_OK


def _parse_assignment(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise ValueError(f"--set expects KEY=VALUE, got {text!r}")
    return key, value


def _run_render(args: argparse.Namespace) -> int:
    env = _environment(args)
    values: dict[str, Any] = {}
    if args.values:
        with open(args.values, encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"{args.values} must hold a JSON object")
        values.update(loaded)
    for assignment in args.set or ():
        key, value = _parse_assignment(assignment)
        values[key] = value

    source = _read_source(args.file)
    output = env.from_string(source, name=None if args.file == "-" else args.file).render(values)
    sys.stdout.write(output)
    return EXIT_OK


def _run_functions(args: argparse.Namespace) -> int:
    env = _environment(args)
    definitions = env.registry.definitions()
    if not definitions:
        print(f"variant {env.variant.value!r} defines no functions")
        return EXIT_OK
    width = max(len(d.name) for d in definitions)
    for definition in definitions:
        print(f"{definition.name:<{width}}  {definition.description}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmpldeps",
        description="List the variables a text template depends on, or render it.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--variant",
        type=_variant,
        default=None,
        help="function vocabulary: none, accessor or utility (default from TMPLDEPS_VARIANT)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    extract = subparsers.add_parser(
        "extract", parents=[common], help="list variables a template reads"
    )
    extract.add_argument("file", nargs="?", default="-", help="template file, '-' for stdin")
    extract.add_argument("--defaults", action="store_true", help="show literal defaults")
    extract.add_argument("--unique", action="store_true", help="drop repeated names")
    extract.add_argument("--json", action="store_true", help="emit JSON")
    extract.add_argument("--max-depth", type=int, default=None, help="nesting ceiling")
    extract.set_defaults(handler=_run_extract)

    render = subparsers.add_parser("render", parents=[common], help="render a template")
    render.add_argument("file", nargs="?", default="-", help="template file, '-' for stdin")
    render.add_argument("--values", metavar="JSON_FILE", help="JSON object of values")
    render.add_argument(
        "--set", action="append", metavar="KEY=VALUE", help="set one value (repeatable)"
    )
    render.set_defaults(handler=_run_render)

    functions = subparsers.add_parser(
        "functions", parents=[common], help="list functions a variant provides"
    )
    functions.set_defaults(handler=_run_functions)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    try:
        return args.handler(args)
    except TemplateError as exc:
        print(exc.format_compact(), file=sys.stderr)
        return EXIT_TEMPLATE_ERROR
    except (OSError, ValueError) as exc:
        logger.debug(f"{args.command} failed: {exc!r}")
        print(f"tmpldeps: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
