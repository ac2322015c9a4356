"""emvlua CLI: read, check and rewrite EMV lighting files.

Usage:
    emvlua summary vehicle.lua             # what tables are in the file
    emvlua format vehicle.lua              # re-emit every table found
    emvlua format vehicle.lua -o out.lua   # ...into a file
    emvlua check vehicle.lua               # advisory issues
    emvlua remove vehicle.lua 3            # drop Auto #3 and renumber
    emvlua config                          # merged config with sources
    emvlua config set log_level debug      # store a global setting
    emvlua config init                     # starter .emvlua.json here

FILE may be - to read stdin.
"""

import argparse
import atexit
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from emvlua.config import (
    DEFAULTS, get_value, init_project_config, list_config, load_config, set_value,
)
from emvlua.edit import remove_component
from emvlua.encode import encode_auto, encode_document, encode_selections
from emvlua.log import (
    enable_console_export, error, flush_sink, info, set_console, set_level, warn,
)
from emvlua.parser import ParseCache
from emvlua.validate import find_issues

console = Console()


# ============================================================
# HELPERS
# ============================================================

def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _emit(text: str, output: str = ""):
    """write Lua text to a file or stdout. never through rich markup."""
    if output:
        Path(output).write_text(text, encoding="utf-8")
        info("cli", f"wrote {output}")
    else:
        sys.stdout.write(text)


def _usage_flag(args, config) -> bool:
    if getattr(args, "no_usage", False):
        return False
    return bool(config.get("usage_comments"))


# ============================================================
# COMMANDS
# ============================================================

def cmd_summary(args, config, cache):
    doc = cache.parse(_read(args.file))
    table = Table(title=escape(args.file))
    table.add_column("table")
    table.add_column("records", justify="right")
    table.add_row("EMV.Auto", str(len(doc.auto)))
    table.add_row("EMV.Selections", str(len(doc.selections)))
    table.add_row("  options", str(sum(len(g.options) for g in doc.selections)))
    if doc.lamps_meta:
        table.add_row("EMV.Lamps (named)", str(len(doc.lamps_meta)))
    else:
        table.add_row("EMV.Lamps", str(len(doc.lamps)))
    table.add_row("EMV.Sequences", str(len(doc.sequences)))
    table.add_row("EMV.Sections", str(len(doc.sections or {})))
    table.add_row("EMV.Patterns", str(len(doc.patterns or {})))
    if doc.indicators is not None:
        table.add_row("PI.States", str(len(doc.indicators.states)))
        table.add_row("PI.Positions", str(len(doc.indicators.positions or {})))
        table.add_row("PI.Meta", str(len(doc.indicators.meta or {})))
    console.print(table)
    return 0


def cmd_format(args, config, cache):
    doc = cache.parse(_read(args.file))
    _emit(encode_document(doc, usage=_usage_flag(args, config)), args.output)
    return 0


def cmd_check(args, config, cache):
    doc = cache.parse(_read(args.file))
    issues = find_issues(doc)
    if not issues:
        console.print("[green]no issues[/green]")
        return 0
    for issue in issues:
        console.print(f"  [yellow]![/yellow] {escape(issue.summary())}")
    warn("cli", f"{len(issues)} issue(s) in {args.file}")
    return 1 if args.strict else 0


def cmd_remove(args, config, cache):
    doc = cache.parse(_read(args.file))
    if doc.component(args.index) is None:
        raise ValueError(f"no Auto item #{args.index} (file has {len(doc.auto)})")
    doc = remove_component(doc, args.index)
    usage = _usage_flag(args, config)
    text = encode_auto(doc.auto, doc.selections, usage=usage)
    text += "\n\n" + encode_selections(doc.selections) + "\n"
    _emit(text, args.output)
    return 0


def cmd_config(args, config, cache):
    table = Table(title="emvlua config")
    table.add_column("key")
    table.add_column("value")
    table.add_column("source")
    for key, entry in list_config(args.root).items():
        table.add_row(key, escape(str(entry["value"])), entry["source"])
    console.print(table)
    return 0


def cmd_config_get(args, config, cache):
    if args.key not in DEFAULTS:
        raise KeyError(f"unknown config key '{args.key}'")
    print(json.dumps(get_value(args.key, args.root)))
    return 0


def cmd_config_set(args, config, cache):
    stored = set_value(args.key, args.value, root=args.root, project=args.project)
    where = "project" if args.project else "global"
    info("cli", f"{args.key} = {json.dumps(stored)} ({where})")
    return 0


def cmd_config_init(args, config, cache):
    path = init_project_config(args.root)
    info("cli", f"project config at {path}")
    return 0


def _build_parsers(subparsers):
    """register all subcommands."""
    p = subparsers.add_parser("summary", aliases=["info"], help="Count the records in each table")
    p.add_argument("file", help="Lua file, or - for stdin")
    p.set_defaults(func=cmd_summary)

    p = subparsers.add_parser("format", aliases=["fmt"], help="Re-emit every table found")
    p.add_argument("file", help="Lua file, or - for stdin")
    p.add_argument("--output", "-o", default="", help="Write here instead of stdout")
    p.add_argument("--no-usage", action="store_true", help="Skip usage comments on EMV.Auto")
    p.set_defaults(func=cmd_format)

    p = subparsers.add_parser("check", help="Advisory selection/auto issues")
    p.add_argument("file", help="Lua file, or - for stdin")
    p.add_argument("--strict", action="store_true", help="Exit 1 when any issue is found")
    p.set_defaults(func=cmd_check)

    p = subparsers.add_parser("remove", aliases=["rm"], help="Remove an Auto item and renumber")
    p.add_argument("file", help="Lua file, or - for stdin")
    p.add_argument("index", type=int, help="1-based Auto index")
    p.add_argument("--output", "-o", default="", help="Write here instead of stdout")
    p.add_argument("--no-usage", action="store_true", help="Skip usage comments on EMV.Auto")
    p.set_defaults(func=cmd_remove)

    # -- config (subcommand group) --
    cfg = subparsers.add_parser("config", help="Show or change settings")
    cfg.set_defaults(func=cmd_config, root=".")
    cfg_sub = cfg.add_subparsers(dest="config_command")

    p = cfg_sub.add_parser("show", help="Merged config and where each value came from")
    p.add_argument("--root", default=".", help="Project root")
    p.set_defaults(func=cmd_config)

    p = cfg_sub.add_parser("get", help="Print one merged value as JSON")
    p.add_argument("key")
    p.add_argument("--root", default=".", help="Project root")
    p.set_defaults(func=cmd_config_get)

    p = cfg_sub.add_parser("set", help="Store a value in the global config")
    p.add_argument("key")
    p.add_argument("value")
    p.add_argument("--project", action="store_true", help="Store in the project .emvlua.json instead")
    p.add_argument("--root", default=".", help="Project root")
    p.set_defaults(func=cmd_config_set)

    p = cfg_sub.add_parser("init", help="Write a starter .emvlua.json")
    p.add_argument("--root", default=".", help="Project root")
    p.set_defaults(func=cmd_config_init)


def main(argv=None):
    load_dotenv()
    parser = argparse.ArgumentParser(
        prog="emvlua",
        description="Parse, check and rewrite EMV lighting tables in Lua files.",
    )
    subparsers = parser.add_subparsers(dest="command")
    _build_parsers(subparsers)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    config = load_config()
    set_level(str(config.get("log_level")))
    if config.get("trace"):
        enable_console_export()
    atexit.register(flush_sink)
    cache = ParseCache(max_entries=int(config.get("cache_size") or 0))
    if getattr(args, "output", None) == "":
        set_console(sys.stderr)  # stdout carries the Lua text

    try:
        return args.func(args, config, cache)
    except (OSError, ValueError, KeyError) as e:
        error("cli", str(e))
        return 1
    finally:
        set_console(None)


if __name__ == "__main__":
    sys.exit(main())
