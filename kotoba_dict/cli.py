"""
CLI interface for kotoba-dict.

Usage:
    kotoba-dict import dicts/jmdict_english.zip dicts/kanjidic
    kotoba-dict tags dicts/jmdict_english.zip
    kotoba-dict lookup 家
    kotoba-dict lookup --mode prefix --json いえ
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from kotoba_dict import __version__, settings
from kotoba_dict.entry import Entry
from kotoba_dict.errors import DictionaryImportError
from kotoba_dict.importer import discover_dicts, import_dict, import_dicts
from kotoba_dict.index import SearchMode
from kotoba_dict.store import load_store, save_store

logger = logging.getLogger("kotoba_dict")


# ============================================================================
# Output formats
# ============================================================================

def format_entry(entry: Entry) -> str:
    """Human readable, multi-line entry."""
    head = entry.expression
    if entry.reading and entry.reading != entry.expression:
        head += f" 【{entry.reading}】"
    if entry.tags:
        head += f"  [{', '.join(entry.tags)}]"
    if entry.origin:
        head += f"  ({entry.origin})"

    lines = [head]
    for form, reading in zip(entry.extra_forms, entry.extra_readings):
        lines.append(f"  also: {form}" + (f" 【{reading}】" if reading else ""))
    for num, eng in enumerate(entry.english, 1):
        line = f"  {num}. {'; '.join(eng.glossary)}"
        if eng.tags:
            line += f"  ({', '.join(eng.tags)})"
        lines.append(line)
        for info in eng.info:
            lines.append(f"     - {info}")
        for link in eng.links:
            if link.is_see_also:
                lines.append(f"     -> see {link.text}")
            else:
                lines.append(f"     -> {link.text} <{link.uri}>")
    return "\n".join(lines)


def format_json(entries: List[Entry]) -> str:
    return json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False, indent=2)


# ============================================================================
# Commands
# ============================================================================

def cmd_import(args) -> int:
    paths = args.paths or discover_dicts(args.import_dir)
    if not paths:
        logger.error(f"No dictionaries to import in {args.import_dir}")
        return 1

    batch = import_dicts(paths, max_workers=args.workers)
    for path, error in batch.failures.items():
        print(f"Error: {path}: {error}", file=sys.stderr)
    if not batch.dicts:
        return 1

    save_store(args.output, batch.entries())
    return 0 if batch.ok else 2


def cmd_tags(args) -> int:
    try:
        imported = import_dict(args.path, max_workers=args.workers)
    except DictionaryImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"=> Tags for {imported.title}:")
    for tag in sorted(imported.tags, key=lambda it: it.name):
        print(f"   - {tag.name} ({tag.category}/{tag.order}/{tag.score}) {tag.notes}")

    for usage, names in imported.undefined_tags().items():
        logger.warning(f"{usage.capitalize()} tags not defined in {imported.title}: {', '.join(names)}")
    return 0


def cmd_lookup(args) -> int:
    try:
        store = load_store(args.store)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    entries = store.lookup(args.text, mode=args.mode, limit=args.limit)
    if args.json:
        print(format_json(entries))
    elif not entries:
        print(f"No entries for {args.text}")
    else:
        print("\n\n".join(format_entry(entry) for entry in entries))
    return 0


# ============================================================================
# Main
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kotoba-dict",
        description="Japanese dictionary aggregation and normalization",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"kotoba-dict {__version__}",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=settings.IMPORT_WORKERS,
        help=f"Threads used to read bank files (default: {settings.IMPORT_WORKERS})",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    p_import = commands.add_parser("import", help="Import dictionaries into a store")
    p_import.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Dictionary directories or .zip files (default: all in the import directory)",
    )
    p_import.add_argument(
        "--import-dir",
        type=Path,
        default=settings.IMPORT_DIR,
        help=f"Directory scanned when no paths are given (default: {settings.IMPORT_DIR})",
    )
    p_import.add_argument(
        "--output", "-o",
        type=Path,
        default=settings.STORE_DIR,
        help=f"Output store directory (default: {settings.STORE_DIR})",
    )
    p_import.set_defaults(func=cmd_import)

    p_tags = commands.add_parser("tags", help="List the tags of a dictionary")
    p_tags.add_argument("path", type=Path, help="Dictionary directory or .zip file")
    p_tags.set_defaults(func=cmd_tags)

    p_lookup = commands.add_parser("lookup", help="Look up entries in a store")
    p_lookup.add_argument("text", help="Japanese form or reading")
    p_lookup.add_argument(
        "--store", "-s",
        type=Path,
        default=settings.STORE_DIR,
        help=f"Store directory (default: {settings.STORE_DIR})",
    )
    p_lookup.add_argument(
        "--mode", "-m",
        choices=[mode.value for mode in SearchMode],
        default=SearchMode.EXACT.value,
        help="How to match the text (default: exact)",
    )
    p_lookup.add_argument("--limit", "-n", type=int, default=None, help="Maximum number of entries")
    p_lookup.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    p_lookup.set_defaults(func=cmd_lookup)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
