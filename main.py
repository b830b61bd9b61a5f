#!/usr/bin/env python3
"""
flatmodel - command-line entry point.

**Purpose**: Load a delimited file into a read-only store and print matching
rows as JSON. Useful for inspecting a data file with the same header, casting
and matching rules the library applies.

**Usage**:
    From project root:
    ```bash
    python main.py csv/users.csv --where active=true --pluck name
    python main.py csv/users.csv --select id name --where id=1
    python main.py csv/users.csv --primary-key id --find 2
    python main.py data.tsv --delimiter $'\\t' --no-headers
    ```

Exit code is 0 on success and 1 when the store reports an error (the message
goes to stderr).
"""

import argparse
import json
import logging
import sys

from flatmodel.config.settings import get_settings
from flatmodel.config.store import CsvDialect, StoreConfig
from flatmodel.store.errors import CsvModelError
from flatmodel.store.model import CsvModel


def parse_condition(text: str) -> tuple[str, str]:
    """Split a COLUMN=VALUE argument."""
    column, sep, value = text.partition("=")
    if not sep or not column:
        raise argparse.ArgumentTypeError(f"expected COLUMN=VALUE, got: {text!r}")
    return column, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Query a delimited text file and print the matching rows as JSON.",
    )
    parser.add_argument("path", help="Path to the file (relative paths use FLATMODEL_BASE_DIR)")
    parser.add_argument("--delimiter", help="Field delimiter (default from FLATMODEL_DELIMITER)")
    parser.add_argument("--no-headers", action="store_true", help="File has no header line")
    parser.add_argument(
        "--where", action="append", default=[], type=parse_condition, metavar="COLUMN=VALUE",
        help="Keep rows whose COLUMN loosely equals VALUE (repeatable)",
    )
    parser.add_argument("--select", nargs="+", metavar="COLUMN", help="Only output these columns")
    parser.add_argument("--pluck", metavar="COLUMN", help="Output a flat list of one column")
    parser.add_argument("--primary-key", help="Primary key column")
    parser.add_argument("--find", metavar="VALUE", help="Look up one row by primary key")
    return parser


def main(argv=None) -> int:
    """
    Main entrypoint.

    Steps:
      1. Parse arguments and configure logging from settings
      2. Load the file into a read-only store
      3. Run the lookup or query and print JSON
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level_number,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dialect = CsvDialect.from_settings(settings)
    if args.delimiter:
        dialect = CsvDialect(delimiter=args.delimiter, enclosure=dialect.enclosure, escape=dialect.escape)

    try:
        config = StoreConfig(
            path=args.path,
            dialect=dialect,
            has_headers=not args.no_headers,
            primary_key=args.primary_key,
        )
        model = CsvModel(config, base_dir=settings.base_dir)

        if args.find is not None:
            result = model.find(args.find)
        else:
            query = model.query()
            for column, value in args.where:
                query.where(column, value)
            if args.select:
                query.select(*args.select)
            result = query.pluck(args.pluck) if args.pluck else query.get()
    except (CsvModelError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
