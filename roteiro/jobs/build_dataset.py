"""CLI job that reads the places sheet and builds the map dataset."""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Optional

from roteiro.core.config import ConfigError, Settings, require_settings
from roteiro.etl.merge import merge_outcomes
from roteiro.etl.process import PlaceLookup, process_row
from roteiro.etl.rows import MissingColumnsError, check_columns, place_type_vocabulary
from roteiro.models import Dataset
from roteiro.vendors import google_sheets

logger = logging.getLogger(__name__)


def build_dataset(settings: Optional[Settings] = None, *, lookup: Optional[PlaceLookup] = None) -> Dataset:
    """Run the whole pipeline once.

    Sheet structure problems (missing table, range or columns) raise before
    any row is processed. Rows are looked up concurrently, then merged in
    sheet order.
    """
    settings = settings or require_settings()
    api_key = settings.google_api_key

    table_range = google_sheets.resolve_table_range(
        settings.sheet_id,
        api_key,
        sheet_index=settings.sheet_index,
        table_index=settings.table_index,
    )
    logger.info("Resolved table range %s", table_range)

    grid = google_sheets.fetch_table_grid(settings.sheet_id, api_key, table_range, table_index=settings.table_index)
    columns = grid["table"].get("columnProperties")
    if not columns:
        raise MissingColumnsError("Table has no column properties")
    check_columns(columns)
    place_types = place_type_vocabulary(columns)

    data_rows = grid["rows"][1:]
    logger.info("Processing %d data rows with %d workers", len(data_rows), settings.max_workers)

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        outcomes = list(
            executor.map(
                lambda item: process_row(item[0], item[1], columns, api_key, lookup=lookup),
                enumerate(data_rows),
            )
        )

    return merge_outcomes(outcomes, place_types=place_types)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build the places map dataset from the Google Sheet")
    parser.add_argument("--output", dest="output", help="Write the JSON dataset to this file instead of stdout")
    parser.add_argument("--sheet-index", dest="sheet_index", type=int, help="Index of the sheet holding the table")
    parser.add_argument("--table-index", dest="table_index", type=int, help="Index of the table within the sheet")
    return parser


def main(argv=None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    try:
        settings = require_settings()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc

    overrides = {
        key: value
        for key, value in (("sheet_index", args.sheet_index), ("table_index", args.table_index))
        if value is not None
    }
    if overrides:
        settings = replace(settings, **overrides)

    try:
        dataset = build_dataset(settings)
    except (google_sheets.GoogleSheetsError, MissingColumnsError) as exc:
        logger.error("Failed to build dataset: %s", exc)
        raise SystemExit(1) from exc

    payload = json.dumps(dataset.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(payload)
        logger.info("Wrote %d places and %d errors to %s", len(dataset.places), len(dataset.errors), args.output)
    else:
        sys.stdout.write(payload + "\n")


if __name__ == "__main__":
    main()
