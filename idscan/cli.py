"""
Command line interface.

    idscan scan front.jpg back.jpg --mode dual --save
    idscan scan letter.jpg --mode anchored
    idscan save --name "JOHN SMITH" --number 123456789012 --address "12 MG Road, Bangalore"
    idscan list
    idscan export --mask --output records.csv
    idscan delete 3
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config import get_config
from .exceptions import IdScanError, ValidationError
from .export.csv_export import mask, write_csv
from .logger import get_logger
from .models import CaptureMode, FieldSet, ScanResult
from .persistence import open_repository
from .processors import ScanProcessor
from .services import RecordService

console = Console()
logger = get_logger("idscan.cli")

FIELD_LABELS = [
    ("name", "Name"),
    ("document_number", "Document Number"),
    ("date_of_birth", "Date of Birth"),
    ("gender", "Gender"),
    ("phone_number", "Mobile"),
    ("address", "Address"),
]


def render_fields(fields: FieldSet, title: str = "Extracted details") -> None:
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for attr, label in FIELD_LABELS:
        value = getattr(fields, attr)
        table.add_row(label, value or "[dim]-[/dim]")
    console.print(table)


def save_fields(fields: FieldSet, existing_id: Optional[int] = None) -> int:
    with open_repository() as repo:
        result = RecordService(repo).save(fields, existing_id=existing_id)

    if result.merged:
        console.print(
            f"[yellow]Record {result.merged_from} had the same document number as record "
            f"{result.record_id}; record {result.record_id} was overwritten[/yellow]"
        )
    verb = "Saved new" if result.created else "Updated"
    console.print(f"[green]{verb} record {result.record_id}[/green]")
    return result.record_id


def cmd_scan(args: argparse.Namespace) -> int:
    processor = ScanProcessor()
    result: ScanResult = processor.scan(args.mode, args.images)

    render_fields(result.fields)
    for warning in result.warnings:
        console.print(f"[yellow]{warning}[/yellow]")

    if args.save:
        if not result.complete:
            console.print("[red]Not saving an incomplete scan; retake the back image first[/red]")
            return 1
        save_fields(result.fields)
    return 0


SAVE_OPTIONS = [
    ("name", "name"),
    ("number", "document_number"),
    ("dob", "date_of_birth"),
    ("gender", "gender"),
    ("mobile", "phone_number"),
    ("address", "address"),
]


def cmd_save(args: argparse.Namespace) -> int:
    """Save a new record, or edit `--id` keeping the stored value of any option left out."""
    given = {attr: getattr(args, option) for option, attr in SAVE_OPTIONS if getattr(args, option) is not None}

    if args.id is None:
        fields = FieldSet(**given)
    else:
        with open_repository() as repo:
            record = RecordService(repo).get(args.id)
        if record is None:
            console.print(f"[yellow]Record {args.id} not found[/yellow]")
            return 1
        fields = replace(record.to_fields(), **given)

    save_fields(fields, existing_id=args.id)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    with open_repository() as repo:
        records = RecordService(repo).list_records(newest_first=not args.oldest_first)

    if not records:
        console.print("No records saved yet.")
        return 0

    table = Table(title=f"Saved records ({len(records)})")
    for header in ("ID", "Name", "Document", "DOB", "Gender", "Mobile", "Scanned At"):
        table.add_column(header)
    for record in records:
        table.add_row(
            str(record.id),
            record.name,
            record.document_number if args.full else mask(record.document_number),
            record.date_of_birth,
            record.gender,
            record.phone_number,
            record.scanned_at,
        )
    console.print(table)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    with open_repository() as repo:
        records = RecordService(repo).list_records(newest_first=True)

    if not records:
        console.print("[yellow]No records to export.[/yellow]")
        return 1

    path = write_csv(records, path=args.output, mask=args.mask)
    console.print(f"[green]CSV saved to {path}[/green]")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    with open_repository() as repo:
        deleted = RecordService(repo).delete(args.id)
    if not deleted:
        console.print(f"[yellow]Record {args.id} not found[/yellow]")
        return 1
    console.print(f"[green]Deleted record {args.id}[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="idscan", description="Identity card scanner")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="OCR card image(s) and extract fields")
    scan.add_argument("images", nargs="+", type=Path, help="Image file(s); front then back for dual mode")
    scan.add_argument(
        "--mode",
        choices=[m.value for m in CaptureMode],
        default=CaptureMode.SINGLE.value,
        help="single card image, front+back pair, or letter-style layout",
    )
    scan.add_argument("--save", action="store_true", help="Save the extracted record")
    scan.set_defaults(func=cmd_scan)

    save = sub.add_parser("save", help="Save or edit a record manually")
    save.add_argument("--id", type=int, help="Id of the record being edited; omitted options keep their value")
    save.add_argument("--name")
    save.add_argument("--number", help="12-digit document number")
    save.add_argument("--dob")
    save.add_argument("--gender")
    save.add_argument("--mobile")
    save.add_argument("--address")
    save.set_defaults(func=cmd_save)

    lst = sub.add_parser("list", help="List saved records")
    lst.add_argument("--oldest-first", action="store_true")
    lst.add_argument("--full", action="store_true", help="Show unmasked document numbers")
    lst.set_defaults(func=cmd_list)

    export = sub.add_parser("export", help="Export records to CSV")
    export.add_argument("--output", type=Path, help="Target file (default: export dir)")
    export.add_argument(
        "--mask",
        action=argparse.BooleanOptionalAction,
        default=get_config().export.mask_by_default,
        help="Mask document numbers as xxxx-xxxx-1234",
    )
    export.set_defaults(func=cmd_export)

    delete = sub.add_parser("delete", help="Delete a record")
    delete.add_argument("id", type=int)
    delete.set_defaults(func=cmd_delete)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        return args.func(args)
    except ValidationError as e:
        for name, reason in e.errors.items():
            console.print(f"[red]{name}[/red] {reason}")
        return 1
    except IdScanError as e:
        logger.error(e.message)
        if e.recoverable:
            console.print("[yellow]Please try again (e.g. retake the image).[/yellow]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
