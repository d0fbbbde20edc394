"""phptypes/cli.py: command-line front end.

Usage examples
--------------
    # Canonical rendering of declarations
    python -m phptypes decl '?Foo' 'int|string[]' '(A&B)|null'

    # Hierarchy closure of declarations described in JSON
    python -m phptypes hierarchy classes.json

    # Built-in return types
    python -m phptypes builtin strlen
    python -m phptypes builtin ArrayIterator::current

Exit codes
----------
    0   Success.
    1   A declaration or name could not be resolved.
    2   Infrastructure failure (bad file, bad JSON, ...).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from phptypes import __version__
from phptypes.builtins import BuiltinSignatures
from phptypes.declparser import from_decl, parse_decl
from phptypes.errors import InvalidDeclaration, PhpTypesError
from phptypes.graph import Block, ClassStmt, Func, InterfaceStmt, Script, TraitStmt
from phptypes.state import State

_log = logging.getLogger("phptypes")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``phptypes`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("phptypes")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root.addHandler(handler)


# ---------------------------------------------------------------------------
# decl
# ---------------------------------------------------------------------------

def _cmd_decl(args: argparse.Namespace) -> int:
    status = EXIT_OK
    for text in args.declarations:
        if args.strict:
            try:
                t = parse_decl(text)
            except InvalidDeclaration as exc:
                sys.stderr.write(f"{exc}\n")
                status = EXIT_ERROR
                continue
        else:
            t = from_decl(text)
        sys.stdout.write(f"{t}\n")
    return status


# ---------------------------------------------------------------------------
# hierarchy
# ---------------------------------------------------------------------------

def _load_declarations(data: Mapping[str, Any]) -> Script:
    block = Block()
    for entry in data.get("interfaces", []):
        block.append(InterfaceStmt(entry["name"], extends=entry.get("extends") or []))
    for entry in data.get("classes", []):
        block.append(ClassStmt(
            entry["name"],
            extends=entry.get("extends"),
            implements=entry.get("implements") or [],
            uses=entry.get("uses") or [],
        ))
    for entry in data.get("traits", []):
        block.append(TraitStmt(entry["name"], uses=entry.get("uses") or []))
    return Script("<json>", Func("{main}", blocks=[block]))


def _cmd_hierarchy(args: argparse.Namespace) -> int:
    path = Path(args.file)
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        script = _load_declarations(data)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        _log.error("Cannot load declarations from %s: %s", path, exc)
        return EXIT_INFRA

    state = State([script])
    local = sorted(c.class_name.lower() for c in state.index.class_likes())
    result: Dict[str, Dict[str, List[str]]] = {"resolves": {}, "resolved_by": {}}
    for name in local:
        result["resolves"][name] = sorted(state.closure.ancestors(name))
        result["resolved_by"][name] = sorted(state.closure.descendants(name))
    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return EXIT_OK


# ---------------------------------------------------------------------------
# builtin
# ---------------------------------------------------------------------------

def _cmd_builtin(args: argparse.Namespace) -> int:
    builtins = BuiltinSignatures.load(args.builtins)
    name: str = args.name
    if "::" in name:
        class_name, _, member = name.partition("::")
        t = builtins.method_return(class_name, member)
    else:
        t = builtins.function_return(name)
    if t is None:
        sys.stderr.write(f"No built-in return type known for {name}\n")
        return EXIT_ERROR
    sys.stdout.write(f"{t}\n")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Parser & main
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phptypes",
        description="Static type reconstruction helpers for PHP.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              phptypes decl '?Foo' 'int|float'
              phptypes hierarchy classes.json
              phptypes builtin ArrayIterator::current
        """),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    sub = parser.add_subparsers(title="commands")

    p_decl = sub.add_parser("decl", help="Parse declarations and print their canonical form.")
    p_decl.add_argument("declarations", nargs="+", metavar="TEXT")
    p_decl.add_argument("--strict", action="store_true",
                        help="Fail on malformed text instead of printing mixed.")
    p_decl.set_defaults(func=_cmd_decl)

    p_hier = sub.add_parser("hierarchy", help="Print the hierarchy closure of JSON declarations.")
    p_hier.add_argument("file", metavar="FILE.json")
    p_hier.set_defaults(func=_cmd_hierarchy)

    p_builtin = sub.add_parser("builtin", help="Look up a built-in function or method return type.")
    p_builtin.add_argument("name", metavar="NAME")
    p_builtin.add_argument("--builtins", type=Path, default=None,
                           help="Extra signature JSON merged over the packaged one.")
    p_builtin.set_defaults(func=_cmd_builtin)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the phptypes CLI; returns the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except PhpTypesError as exc:
        _log.error("%s", exc)
        return EXIT_ERROR
    except OSError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
