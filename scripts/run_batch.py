#!/usr/bin/env python3
"""Batch extraction without the HTTP server.

Reads purchase orders, matches every line against a reference catalog and
writes the spreadsheet export.

Usage:
    python scripts/run_batch.py --catalog refs.xlsx --output encomendas.xlsx orders/*.pdf
    python scripts/run_batch.py --format csv order.png
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from orderextract.core.models import DocumentStatus
from orderextract.core.pipeline import OrderSession
from orderextract.exporters import CSVExporter, ExcelExporter
from orderextract.reconciliation import missing_reference_count

MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


async def run(args: argparse.Namespace) -> int:
    """Process the given files and write the export. Returns an exit code."""
    session = OrderSession(locale=args.locale)

    if args.catalog:
        count = session.catalog.load(args.catalog.read_bytes(), args.catalog.name)
        print(f"Catalog: {count} entries from {args.catalog.name}")

    for path in args.files:
        media_type = MEDIA_TYPES.get(path.suffix.lower())
        if media_type is None:
            print(f"Skipping {path.name}: unsupported file type")
            continue
        session.submit(path.read_bytes(), path.name, media_type)

    processed = await session.process_pending()
    for slot in processed:
        if slot.status == DocumentStatus.DONE:
            print(f"  ok    {slot.filename}: {len(slot.extraction.lines)} line(s)")
        else:
            print(f"  error {slot.filename}: {slot.error_message}")

    result = session.build_rows()
    if not result.rows:
        print("No rows extracted, nothing to export.")
        return 1

    missing = missing_reference_count(result.rows)
    if missing:
        print(f"{missing} line(s) without internal reference")

    table = session.export_table()
    exporter = ExcelExporter() if args.format == "xlsx" else CSVExporter()
    output = args.output or Path(exporter.filename("encomendas"))
    output.write_bytes(exporter.render(table))

    print(f"Wrote {len(table.data)} row(s) to {output} ({exporter.format_name})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract purchase orders to a spreadsheet")
    parser.add_argument("files", nargs="+", type=Path, help="Purchase orders (PDF, PNG, JPEG)")
    parser.add_argument("--catalog", type=Path, help="Reference catalog (CSV, XLSX, XLS)")
    parser.add_argument("--output", type=Path, help="Output file")
    parser.add_argument("--format", choices=["xlsx", "csv"], default="xlsx")
    parser.add_argument("--locale", choices=["pt", "en"], default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
