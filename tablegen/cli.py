"""Regenerate AArch64 instruction tables in place."""
from __future__ import annotations

import argparse
import pathlib
import sys
from typing import List, Optional

from .a64 import DATABASE_FILE, DEFAULT_FILES, create_generator
from .errors import TableGenError
from .isa import IsaDescription


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Regenerate instruction tables from INST(...) data")
    parser.add_argument(
        "--root", type=pathlib.Path, default=pathlib.Path.cwd(), help="Source tree root"
    )
    parser.add_argument("--isa", type=pathlib.Path, help="YAML ISA description for enum comments")
    parser.add_argument("--mode", help="Only use ISA entries of this architecture (e.g. A64)")
    parser.add_argument(
        "--file",
        dest="files",
        action="append",
        help="Source file to load, relative to --root (repeatable; default: AArch64 set)",
    )
    parser.add_argument(
        "--database", default=DATABASE_FILE, help="File holding the InstInfo region"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Do not write anything; exit with 1 if a file is out of date",
    )
    parser.add_argument(
        "--no-sizes", action="store_true", help="Skip the table size report"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        isa = IsaDescription.load(args.isa) if args.isa else None
        gen = create_generator(
            args.root,
            isa,
            args.mode,
            files=args.files or list(DEFAULT_FILES),
            database=args.database,
            save=not args.check,
            dump_sizes=not args.no_sizes,
        )
        gen.run()
    except (TableGenError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.check:
        stale = gen.changed_files()
        for source in stale:
            print(f"out of date: {source.path}")
        return 1 if stale else 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
