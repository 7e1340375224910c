from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import List

from .core.config import load_repo_config
from .core.document import dump_rules_document
from .core.errors import RulesError
from .core.events import DebugObserver, LoadObserver
from .core.rules_engine import (
    Rules,
    available_packs,
    latest_pack,
    load_rules,
    load_rules_from_paths,
)


def _rule_line(rule) -> str:
    if isinstance(rule, dict):
        rid = rule.get("id", "-")
        name = rule.get("name", "")
        return f"{rid}\t{name}"
    return str(rule)


def _load(args, observer: LoadObserver | None) -> Rules:
    rules = Rules()
    if args.builtin:
        rules.merge(load_rules(args.rulepack, observer))
    rules.merge(load_rules_from_paths(args.paths, observer))
    return rules


def _add_load_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Rules YAML files or directories to load (in order)",
    )
    p.add_argument(
        "--rulepack", default="latest", help="Bundled rulepack label (e.g., latest, v0.1)"
    )
    p.add_argument(
        "--no-builtin",
        dest="builtin",
        action="store_false",
        help="Do not load the bundled rulepack",
    )
    p.add_argument(
        "--config-dir",
        type=Path,
        default=Path("."),
        help="Directory holding .rulepackrc.yaml",
    )
    p.add_argument("--debug", action="store_true", help="Print debug info")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rulepack", description="Load and merge detection rule definitions"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_list = sub.add_parser("list", help="List the loaded rules")
    _add_load_args(p_list)
    p_list.add_argument("--json", action="store_true", help="Print rules as JSON")

    p_dump = sub.add_parser("dump", help="Print the merged rules as one YAML document")
    _add_load_args(p_dump)

    sub.add_parser("packs", help="List bundled rulepacks")

    args = parser.parse_args(argv)

    if args.cmd == "packs":
        latest = latest_pack()
        for label in available_packs():
            print(f"{label} (latest)" if label == latest else label)
        return 0

    # Merge repo config AFTER parsing; explicit flags win.
    try:
        cfg = load_repo_config(args.config_dir.resolve())
    except RulesError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    if args.rulepack == "latest" and cfg.get("rulepack"):
        args.rulepack = str(cfg["rulepack"])
    if args.builtin and cfg.get("builtin") is False:
        args.builtin = False
    if not args.paths and cfg.get("rules"):
        args.paths = cfg["rules"]
    if not args.debug and bool(cfg.get("debug")):
        args.debug = True

    observer = DebugObserver() if args.debug else None
    try:
        rules = _load(args, observer)
    except RulesError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.cmd == "dump":
        sys.stdout.write(dump_rules_document(rules))
        return 0

    if args.json:
        print(json.dumps(list(rules), indent=2, ensure_ascii=False, default=str))
        return 0
    for rule in rules:
        print(_rule_line(rule))
    print(f"Rules: {len(rules)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
