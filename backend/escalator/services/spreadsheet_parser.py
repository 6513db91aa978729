"""
Spreadsheet Parser

Reads the first sheet of an uploaded Excel/CSV file into typed rows.

The header row must carry every required column. Header matching is
case-insensitive and ignores surrounding whitespace. Rows that are entirely
empty are skipped; any other bad row rejects the whole file with a message
naming the sheet row (header is row 1).
"""

import io
import logging
import math
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from escalator.schema.record import ParsedRow, RecordCreate

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = [
    "Department",
    "File/Activity",
    "Current Level",
    "Pending Since (Days)",
    "TAT (Days)",
    "Next Level",
    "Escalation Authority Email",
    "Remarks",
    "Mail Sent Status",
]

EXCEL_EXTENSIONS = (".xlsx", ".xls")
CSV_EXTENSIONS = (".csv",)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TRUE_STRINGS = {"true", "yes", "1", "sent"}


class ParseErrorReason(str, Enum):
    UNREADABLE = "unreadable"
    NO_DATA_ROWS = "no_data_rows"
    MISSING_COLUMNS = "missing_columns"
    INVALID_ROW = "invalid_row"


class SpreadsheetParseError(ValueError):

    def __init__(self, reason: ParseErrorReason, message: str, missing_columns: Optional[List[str]] = None):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.missing_columns = missing_columns or []


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def _is_blank(cell: Any) -> bool:
    if cell is None:
        return True
    if isinstance(cell, float) and math.isnan(cell):
        return True
    return isinstance(cell, str) and cell == ""


def _cell_text(cell: Any) -> str:
    if _is_blank(cell):
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()


def parse_number(value: Any, context: str) -> int:
    """Non-negative day count, floored."""
    if _is_blank(value) or (isinstance(value, str) and not value.strip()):
        raise SpreadsheetParseError(ParseErrorReason.INVALID_ROW, f"{context}: Value is required")

    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        number = float("nan")

    if not math.isfinite(number) or number < 0:
        raise SpreadsheetParseError(
            ParseErrorReason.INVALID_ROW,
            f"{context}: Must be a non-negative number, got: {value}"
        )

    return math.floor(number)


def parse_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    if isinstance(value, (int, float)) and not _is_blank(value):
        return value > 0
    return False


def _read_sheet(content: bytes, filename: str, is_csv: Optional[bool] = None) -> List[List[Any]]:
    if is_csv is None:
        is_csv = (filename or "").lower().endswith(CSV_EXTENSIONS)

    try:
        if is_csv:
            frame = pd.read_csv(io.BytesIO(content), header=None, dtype=str, keep_default_na=False)
        else:
            frame = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None)
    except pd.errors.EmptyDataError:
        frame = pd.DataFrame()
    except Exception as e:
        logger.error(f"Could not read {filename}: {e}")
        raise SpreadsheetParseError(ParseErrorReason.UNREADABLE, f"Failed to read file: {e}") from e

    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.values.tolist()


def _column_index(headers: Sequence[Any]) -> Dict[str, int]:
    index = {}
    for position, header in enumerate(headers):
        key = _cell_text(header).lower()
        if key and key not in index:
            index[key] = position
    return index


def parse_workbook(content: bytes, filename: str, is_csv: Optional[bool] = None) -> List[ParsedRow]:
    """Parse an uploaded sheet into rows.

    Raises:
        SpreadsheetParseError: unreadable file, missing columns or a bad row
    """
    rows = _read_sheet(content, filename, is_csv)

    if len(rows) < 2:
        raise SpreadsheetParseError(
            ParseErrorReason.NO_DATA_ROWS,
            "File must contain at least a header row and one data row"
        )

    columns = _column_index(rows[0])

    missing = [column for column in REQUIRED_COLUMNS if column.lower() not in columns]
    if missing:
        raise SpreadsheetParseError(
            ParseErrorReason.MISSING_COLUMNS,
            f"Missing required columns: {', '.join(missing)}",
            missing_columns=missing
        )

    def cell(row: List[Any], column: str) -> Any:
        position = columns[column.lower()]
        return row[position] if position < len(row) else None

    parsed: List[ParsedRow] = []

    for offset, row in enumerate(rows[1:]):
        sheet_row = offset + 2

        if all(_is_blank(value) for value in row):
            continue

        department = _cell_text(cell(row, "Department"))
        file_activity = _cell_text(cell(row, "File/Activity"))
        escalation_email = _cell_text(cell(row, "Escalation Authority Email"))

        pending_since = parse_number(cell(row, "Pending Since (Days)"), f"Row {sheet_row}, Pending Since (Days)")
        tat_days = parse_number(cell(row, "TAT (Days)"), f"Row {sheet_row}, TAT (Days)")

        if not department or not file_activity or not escalation_email:
            raise SpreadsheetParseError(
                ParseErrorReason.INVALID_ROW,
                f"Row {sheet_row}: Missing required data in Department, File/Activity, or Escalation Email"
            )

        if not is_valid_email(escalation_email):
            raise SpreadsheetParseError(
                ParseErrorReason.INVALID_ROW,
                f"Row {sheet_row}: Invalid email format: {escalation_email}"
            )

        parsed.append(ParsedRow(
            department=department,
            file_activity=file_activity,
            current_level=_cell_text(cell(row, "Current Level")),
            pending_since=pending_since,
            tat_days=tat_days,
            next_level=_cell_text(cell(row, "Next Level")),
            escalation_email=escalation_email,
            remarks=_cell_text(cell(row, "Remarks")),
            mail_sent=parse_boolean(cell(row, "Mail Sent Status"))
        ))

    logger.info(f"Parsed {len(parsed)} rows from {filename}")
    return parsed


def filter_pending(rows: List[ParsedRow]) -> List[ParsedRow]:
    # Pending Since strictly beyond TAT
    return [row for row in rows if row.pending_since > row.tat_days]


def to_record_payloads(rows: List[ParsedRow], upload_id: str) -> List[RecordCreate]:

    return [RecordCreate(upload_id=upload_id, **row.model_dump()) for row in rows]
