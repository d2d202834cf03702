"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import importlib
import logging
import sys

from enumkit.internals.errors import ERR, EnumKitError
from enumkit.internals.version import print_banner


def load_enum(target: str):
    """Import ``package.module:Class`` (nested attributes allowed: ``mod:Outer.Inner``)."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"expected MODULE:CLASS, got {target!r}")
    obj = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


def cmd_ir(args: argparse.Namespace) -> int:
    from enumkit.backend.codegen import generate_module_ir
    from enumkit.semantics.typesys import IntKind

    kinds = [IntKind.from_tag(tag) for tag in args.kind] if args.kind else None
    print(generate_module_ir(kinds))
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    from enumkit.toolkit import EnumInfo

    info = EnumInfo(load_enum(args.target), backend=args.backend)

    print(f"Enum: {info.name}")
    print(f"Representation: {info.representation}")
    print(f"Flags: {'yes' if info.has_flags else 'no'}")
    print(f"Backend: {info.bitwise.backend_name}")
    print()

    if not info.values:
        print("No defined values.")
        return 0

    print(f"Values ({len(info.values)}):")
    for value in info.values:
        line = f"  {info.name_of(value)} = {value}"
        display = info.display_name(value)
        if display is not None:
            line += f"  [{display}]"
        description = info.description(value)
        if description is not None:
            line += f"  - {description}"
        print(line)
    print()

    print(f"Names: {', '.join(info.names)}")
    print(f"Min: {info.min_value}")
    print(f"Max: {info.max_value}")
    if info.has_flags:
        mask = info.flags_mask
        print(f"Flags mask: {mask} ({info.representation.to_pattern(mask):#x})")
    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    from enumkit.toolkit import EnumInfo

    info = EnumInfo(load_enum(args.target), backend=args.backend)
    value = info.parse(args.text, only_defined=not args.allow_undefined,
                       ignore_case=args.ignore_case)
    print(f"{value} ({info.format_value(value)})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="enumkit",
        description="Inspect enumerations and the width primitives behind them",
    )
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Log resolver and JIT activity to stderr")
    ap.add_argument("--traceback", action="store_true",
                    help="Print full traceback on errors (for debugging)")

    sub = ap.add_subparsers(dest="command")

    ir_cmd = sub.add_parser("ir", help="Dump the generated LLVM IR")
    ir_cmd.add_argument("--kind", action="append", metavar="KIND",
                        help="Only emit functions for this kind (repeatable, e.g. u8)")
    ir_cmd.set_defaults(func=cmd_ir)

    inspect_cmd = sub.add_parser("inspect", help="Print the metadata of an enumeration")
    inspect_cmd.add_argument("target", metavar="MODULE:CLASS")
    inspect_cmd.add_argument("--backend", choices=["native", "python"],
                             help="Width primitives backend (default: configured)")
    inspect_cmd.set_defaults(func=cmd_inspect)

    parse_cmd = sub.add_parser("parse", help="Parse text as a value of an enumeration")
    parse_cmd.add_argument("target", metavar="MODULE:CLASS")
    parse_cmd.add_argument("text")
    parse_cmd.add_argument("--allow-undefined", action="store_true",
                           help="Accept in-range values that are not defined")
    parse_cmd.add_argument("--ignore-case", action="store_true",
                           help="Match member names case-insensitively")
    parse_cmd.add_argument("--backend", choices=["native", "python"],
                           help="Width primitives backend (default: configured)")
    parse_cmd.set_defaults(func=cmd_parse)

    return ap


def main(argv: list[str] | None = None) -> int:
    """Main enumkit entry point."""
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.version:
        print_banner()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        ap.print_usage(sys.stderr)
        return 2

    try:
        return args.func(args)
    except EnumKitError as e:
        if args.traceback:
            raise
        msg = ERR[e.code]
        print(f"{msg.severity.value}: {e}", file=sys.stderr)
        if args.verbose and msg.doc:
            print(f"  {msg.doc}", file=sys.stderr)
        return 2
    except (ImportError, AttributeError, ValueError) as e:
        if args.traceback:
            raise
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
