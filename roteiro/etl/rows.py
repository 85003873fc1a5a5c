"""Utilities for turning raw grid rows into named field records."""

import logging
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from roteiro.models import Cell, Column, FieldRecord

logger = logging.getLogger(__name__)


class MalformedRowError(ValueError):
    """Raised when a row lacks one of the recognised columns."""


class MissingColumnsError(RuntimeError):
    """Raised when the table header does not declare every recognised column."""


def extract_fields(values: Sequence[Dict[str, Any]], columns: Sequence[Dict[str, Any]]) -> Dict[str, Cell]:
    """Pair each cell with the column at the same position, keyed by column name."""
    return {column.get("columnName"): Cell(value=value or {}, column=column) for value, column in zip(values, columns)}


def to_field_record(fields: Dict[str, Cell]) -> FieldRecord:
    missing = [column.value for column in Column if column.value not in fields]
    if missing:
        raise MalformedRowError(f"Row is missing columns: {', '.join(missing)}")
    return FieldRecord(**{column.name.lower(): fields[column.value] for column in Column})


def check_columns(columns: Iterable[Dict[str, Any]]) -> None:
    """Fail the run when the header does not carry every recognised column."""
    names = {column.get("columnName") for column in columns}
    missing = [column.value for column in Column if column.value not in names]
    if missing:
        raise MissingColumnsError(f"Expected columns not found: {', '.join(missing)}")


def place_type_vocabulary(columns: Iterable[Dict[str, Any]]) -> Tuple[str, ...]:
    """Read the allowed place types from the validation rule of the ``Tipo`` column."""
    for column in columns:
        if column.get("columnName") != Column.TIPO.value:
            continue
        condition = (column.get("dataValidationRule") or {}).get("condition") or {}
        values: List[str] = [v["userEnteredValue"] for v in condition.get("values") or [] if v.get("userEnteredValue")]
        if values:
            return tuple(values)
    logger.warning("No validation rule found on the %s column; place type list is empty.", Column.TIPO.value)
    return ()
