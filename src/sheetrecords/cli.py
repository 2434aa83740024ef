"""Command-line interface for SheetRecords."""

import argparse
import json
import logging
import sys
from typing import Optional

from .config import settings
from .errors import SheetRecordsError


def _parse_where(conditions: list[str]) -> list:
    """Turn ``field=value`` arguments into selector clauses.

    A numeric value also matches numeric cells: ``qty=3`` becomes the
    OR-group ``[{"qty": "3"}, {"qty": 3.0}]``.
    """
    clauses = []
    for condition in conditions:
        field, sep, value = condition.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected field=value, got '{condition}'")
        field = field.strip()
        try:
            number = float(value)
        except ValueError:
            clauses.append({field: value})
        else:
            clauses.append([{field: value}, {field: number}])
    return clauses


def _parse_key(key: str):
    try:
        number = float(key)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a number, got '{key}'") from None
    return int(number) if number.is_integer() else number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SheetRecords - record-style tables over Google Sheets"
    )
    parser.add_argument(
        "--spreadsheet", "-s", help="Spreadsheet ID (default: SPREADSHEET_ID from environment)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Auth command
    subparsers.add_parser("auth", help="Authenticate with Google Sheets API")

    # Show command
    show_parser = subparsers.add_parser("show", help="Print the rows of a sheet as JSON")
    show_parser.add_argument("sheet", help="Sheet name")
    show_parser.add_argument(
        "--header-row", type=int, default=None, help="Row holding the field labels (default: 1)"
    )
    show_parser.add_argument(
        "--where", "-w", action="append", default=[], help="Filter as field=value (repeatable)"
    )
    show_parser.add_argument("--sort", help="Field to sort by")
    show_parser.add_argument("--desc", action="store_true", help="Sort descending")
    show_parser.add_argument("--limit", type=int, default=None, help="Maximum rows to print")

    # Lookup command
    lookup_parser = subparsers.add_parser(
        "lookup", help="Find one value by key without loading the whole sheet"
    )
    lookup_parser.add_argument("sheet", help="Sheet name")
    lookup_parser.add_argument("key_field", help="Header of the key column")
    lookup_parser.add_argument("key", help="Key to search for")
    lookup_parser.add_argument("value_field", help="Header of the column to return")
    lookup_parser.add_argument(
        "--sorted", action="store_true", help="Key column is sorted ascending (binary search)"
    )
    lookup_parser.add_argument(
        "--number", action="store_true", help="Compare KEY as a number instead of text"
    )
    lookup_parser.add_argument("--header-row", type=int, default=None)

    return parser


def configure_logging(verbose: bool = False):
    level = logging.DEBUG if verbose or settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[list[str]] = None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "auth":
            run_auth()
        elif args.command == "show":
            run_show(
                args.spreadsheet,
                args.sheet,
                header_row=args.header_row,
                where=_parse_where(args.where),
                sort=args.sort,
                descending=args.desc,
                limit=args.limit,
            )
        elif args.command == "lookup":
            run_lookup(
                args.spreadsheet,
                args.sheet,
                args.key_field,
                _parse_key(args.key) if args.number else args.key,
                args.value_field,
                assume_sorted=args.sorted,
                header_row=args.header_row,
            )
        else:
            parser.print_help()
            sys.exit(1)
    except (SheetRecordsError, argparse.ArgumentTypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def run_auth():
    """Run the Google authentication flow."""
    from .sheets import GoogleSheetsClient

    print("Authenticating with Google Sheets API...")
    try:
        client = GoogleSheetsClient()
        # Accessing the service property triggers auth
        _ = client.service
        print("Authentication successful!")
        print("Token saved. You can now use SheetRecords with Google Sheets.")
    except Exception as e:
        print(f"Authentication failed: {e}")
        sys.exit(1)


def run_show(
    spreadsheet_id: Optional[str],
    sheet: str,
    header_row: Optional[int] = None,
    where: Optional[list] = None,
    sort: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
    store=None,
):
    """Print the rows of a sheet, optionally filtered and sorted, as JSON."""
    from .sheets import GoogleSheetsClient
    from .table import Table

    store = store or GoogleSheetsClient(spreadsheet_id)
    table = Table.from_sheet(store, sheet, header_row=header_row)
    if sort:
        table.sort_by(sort, ascending=not descending)
    rows = table.select(where or [])
    if limit is not None:
        rows = rows.limit(limit)
    print(json.dumps([item.to_record() for item in rows], indent=2, default=str))


def run_lookup(
    spreadsheet_id: Optional[str],
    sheet: str,
    key_field: str,
    key: str,
    value_field: str,
    assume_sorted: bool = False,
    header_row: Optional[int] = None,
    store=None,
):
    """Print the value found for a key, or exit 1 when it is missing."""
    from .lookup import lookup_value
    from .sheets import GoogleSheetsClient

    store = store or GoogleSheetsClient(spreadsheet_id)
    value = lookup_value(
        store, sheet, key_field, key, value_field, header_row=header_row, assume_sorted=assume_sorted
    )
    if value is None:
        print(f"No row with {key_field} = {key!r}", file=sys.stderr)
        sys.exit(1)
    print(value)


if __name__ == "__main__":
    main()
