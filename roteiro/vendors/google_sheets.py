"""Client utilities for the Google Sheets API."""

import logging
from typing import Any, Dict, List, Optional

import requests

from roteiro.core.cache import structure_cache

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class GoogleSheetsError(RuntimeError):
    """Raised when the Sheets API returns a non-successful response."""


class TableNotFoundError(GoogleSheetsError):
    """Raised when the requested sheet or table cannot be located."""


def column_letter(index: int) -> str:
    """Convert a zero-based column index into its A1 letters (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError("Index must be non-negative")

    letters = ""
    while index >= 0:
        index, remainder = divmod(index, 26)
        letters = _ALPHABET[remainder] + letters
        index -= 1
    return letters


def _get_spreadsheet(sheet_id: str, api_key: str, **extra: str) -> Dict[str, Any]:
    params = {"key": api_key, **extra}
    try:
        response = _SESSION.get(f"{_BASE_URL}/{sheet_id}", params=params, timeout=10)
        response.raise_for_status()
        payload = response.json()
    except requests.HTTPError as exc:
        logger.error("Sheets request failed: status=%s, body=%s", exc.response.status_code, exc.response.text[:500])
        raise GoogleSheetsError(f"Sheets API returned status {exc.response.status_code}") from exc
    except (requests.RequestException, ValueError) as exc:
        logger.error("Sheets request failed: %s", exc)
        raise GoogleSheetsError(str(exc)) from exc

    if not isinstance(payload, dict):
        raise GoogleSheetsError("Sheets API response is not an object")
    return payload


def _quote_title(title: Optional[str]) -> str:
    if not title:
        return ""
    return "'" + title.replace("'", "''") + "'!"


def _find_table(spreadsheet: Dict[str, Any], sheet_index: int, table_index: int) -> Dict[str, Any]:
    sheets = spreadsheet.get("sheets") or []
    if not 0 <= sheet_index < len(sheets):
        raise TableNotFoundError(f"Sheet {sheet_index} not found")
    tables = sheets[sheet_index].get("tables") or []
    if not 0 <= table_index < len(tables):
        raise TableNotFoundError(f"Table {table_index} not found in sheet {sheet_index}")
    return tables[table_index]


def table_range_to_a1(grid_range: Dict[str, Any], sheet_title: Optional[str] = None) -> str:
    """Turn a zero-based, end-exclusive GridRange into an A1 range string."""
    try:
        start_col = grid_range["startColumnIndex"]
        end_col = grid_range["endColumnIndex"]
        end_row = grid_range["endRowIndex"]
    except KeyError as exc:
        raise TableNotFoundError(f"Table range is missing {exc.args[0]}") from exc
    start_row = grid_range.get("startRowIndex", 0)

    return (
        f"{_quote_title(sheet_title)}"
        f"{column_letter(start_col)}{start_row + 1}:{column_letter(end_col - 1)}{end_row}"
    )


def resolve_table_range(sheet_id: str, api_key: str, sheet_index: int = 0, table_index: int = 0) -> str:
    """Locate a structured table in the spreadsheet and return its A1 range."""

    def load() -> str:
        spreadsheet = _get_spreadsheet(sheet_id, api_key)
        table = _find_table(spreadsheet, sheet_index, table_index)
        grid_range = table.get("range")
        if not grid_range:
            raise TableNotFoundError(f"Table {table_index} in sheet {sheet_index} has no range")
        title = (spreadsheet["sheets"][sheet_index].get("properties") or {}).get("title")
        return table_range_to_a1(grid_range, title)

    return structure_cache.get_or_set(("range", sheet_id, sheet_index, table_index), load)


def fetch_table_grid(sheet_id: str, api_key: str, table_range: str, table_index: int = 0) -> Dict[str, Any]:
    """Fetch the grid cells of ``table_range`` along with the table's column metadata.

    Returns ``{"table": {...}, "rows": [[cell, ...], ...]}``; ``rows`` still
    holds the header row.
    """

    def load() -> Dict[str, Any]:
        spreadsheet = _get_spreadsheet(
            sheet_id,
            api_key,
            ranges=table_range,
            includeGridData="true",
            fields="*",
            excludeTablesInBandedRanges="false",
        )
        table = _find_table(spreadsheet, 0, table_index)
        grid = (spreadsheet["sheets"][0].get("data") or [{}])[0]
        rows: List[List[Dict[str, Any]]] = [row.get("values") or [] for row in grid.get("rowData") or []]
        logger.info("Fetched %d grid rows for range %s", len(rows), table_range)
        return {"table": table, "rows": rows}

    return structure_cache.get_or_set(("grid", sheet_id, table_range, table_index), load)
