"""
Delimited text parsing.
Turns a header line plus data lines into field mappings keyed by normalized header names.

Fields are split on the delimiter only. Quoting is not supported, so a quoted
value containing the delimiter is split across columns.
"""
import re
from typing import Dict, List

from core.exceptions import EmptyInputError
from core.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_DELIMITER = ","

_WHITESPACE_RX = re.compile(r"\s+")
_LINE_BREAK_RX = re.compile(r"\r\n|\r|\n")


def normalize_header(name: str) -> str:
    """
    Normalize a header cell: trim, lowercase, whitespace runs to underscores.

    Args:
        name: Raw header cell

    Returns:
        Normalized field name (e.g. "Transaction Date" -> "transaction_date")
    """
    return _WHITESPACE_RX.sub("_", name.strip().lower())


def parse_delimited_text(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[Dict[str, str]]:
    """
    Parse delimited text into an ordered list of field mappings.

    The first non-empty line is the header. Blank lines are skipped. Short
    rows are padded with empty strings, extra fields are ignored.

    Args:
        text: Fully materialized input text
        delimiter: Field delimiter

    Returns:
        One dict per data line, in input order

    Raises:
        EmptyInputError: If the input has no header line
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = [line for line in _LINE_BREAK_RX.split(text) if line.strip()]
    if not lines:
        raise EmptyInputError(
            "Input contains no header line",
            details={"length": len(text)}
        )

    headers = [normalize_header(h) for h in lines[0].split(delimiter)]

    rows = []
    for line in lines[1:]:
        values = line.split(delimiter)
        row = {}
        for i, header in enumerate(headers):
            row[header] = values[i].strip() if i < len(values) else ""
        rows.append(row)

    logger.info(f"Parsed {len(rows)} rows with {len(headers)} columns")
    logger.debug(f"Columns: {headers}")

    return rows
