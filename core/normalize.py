"""
Record normalization.
Maps parsed field mappings to typed bank transactions and expense records,
using ordered fallback column names and documented defaults.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence, Tuple

from core.config import get_settings
from core.logger import setup_logger
from core.schema import BankTransaction, ExpenseRecord, RowDiagnostic

logger = setup_logger(__name__)

DEFAULT_DESCRIPTION = "Unknown"
DEFAULT_AMOUNT = Decimal("0")

# Candidate source columns per target attribute, in priority order
BANK_DATE_FIELDS = ("date", "transaction_date")
BANK_DESCRIPTION_FIELDS = ("description", "payee", "merchant")
BANK_AMOUNT_FIELDS = ("amount", "debit")

EXPENSE_DATE_FIELDS = ("date", "expense_date")
EXPENSE_DESCRIPTION_FIELDS = ("description", "vendor", "category")
EXPENSE_AMOUNT_FIELDS = ("amount", "total")

_CURRENCY_RX = re.compile(r"[\s$€£\xa0]")
_ACCOUNTING_NEGATIVE_RX = re.compile(r"^\((.*)\)$")


def first_present(row: Dict[str, str], candidates: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Find the first candidate column with a non-empty value.

    Args:
        row: Parsed field mapping
        candidates: Column names in priority order

    Returns:
        (column name, value), or (None, None) when no candidate has a value
    """
    for name in candidates:
        value = row.get(name)
        if value:
            return name, value
    return None, None


def clean_amount(value: str) -> Optional[Decimal]:
    """
    Parse an exported amount string.
    Strips whitespace and currency symbols, and reads "(12.50)" as -12.50.

    Args:
        value: Raw amount text

    Returns:
        Decimal value, or None if the text is not a finite number
    """
    cleaned = _CURRENCY_RX.sub("", value)

    negative = _ACCOUNTING_NEGATIVE_RX.match(cleaned)
    if negative:
        cleaned = "-" + negative.group(1)

    if not cleaned:
        return None

    try:
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite():
        return None
    return result


def processing_date_string(processing_date: Optional[date] = None) -> str:
    """ISO date used when a row carries no date."""
    return (processing_date or date.today()).isoformat()


def _normalize_fields(
    row: Dict[str, str],
    index: int,
    date_fields: Sequence[str],
    description_fields: Sequence[str],
    amount_fields: Sequence[str],
    default_date: str,
    diagnostics: List[RowDiagnostic],
) -> Dict[str, object]:
    """Resolve date, description and amount for one row."""
    _, date_value = first_present(row, date_fields)
    _, description = first_present(row, description_fields)
    amount_field, amount_text = first_present(row, amount_fields)

    amount = DEFAULT_AMOUNT
    if amount_text is not None:
        parsed = clean_amount(amount_text)
        if parsed is None:
            logger.warning(f"Row {index}: could not parse {amount_field} '{amount_text}', using 0")
            diagnostics.append(
                RowDiagnostic(
                    row=index,
                    field=amount_field,
                    value=amount_text,
                    message="Amount is not a number; treated as 0",
                )
            )
        else:
            amount = parsed

    return {
        "date": date_value or default_date,
        "description": description or DEFAULT_DESCRIPTION,
        "amount": amount,
    }


def normalize_bank_transactions(
    rows: List[Dict[str, str]],
    id_prefix: Optional[str] = None,
    processing_date: Optional[date] = None,
) -> Tuple[List[BankTransaction], List[RowDiagnostic]]:
    """
    Normalize parsed bank statement rows.

    Args:
        rows: Output of parse_delimited_text
        id_prefix: Id prefix (defaults to configured BANK_ID_PREFIX)
        processing_date: Date used for rows without one (defaults to today)

    Returns:
        (transactions, diagnostics); every transaction starts unreported
    """
    if id_prefix is None:
        id_prefix = get_settings().bank_id_prefix
    default_date = processing_date_string(processing_date)

    diagnostics: List[RowDiagnostic] = []
    transactions = [
        BankTransaction(
            id=f"{id_prefix}{idx}",
            reported=False,
            **_normalize_fields(
                row, idx,
                BANK_DATE_FIELDS, BANK_DESCRIPTION_FIELDS, BANK_AMOUNT_FIELDS,
                default_date, diagnostics,
            ),
        )
        for idx, row in enumerate(rows)
    ]

    logger.info(f"Normalized {len(transactions)} bank transactions ({len(diagnostics)} coerced values)")
    return transactions, diagnostics


def normalize_expense_records(
    rows: List[Dict[str, str]],
    id_prefix: Optional[str] = None,
    processing_date: Optional[date] = None,
) -> Tuple[List[ExpenseRecord], List[RowDiagnostic]]:
    """
    Normalize parsed expense report rows.

    Args:
        rows: Output of parse_delimited_text
        id_prefix: Id prefix (defaults to configured EXPENSE_ID_PREFIX)
        processing_date: Date used for rows without one (defaults to today)

    Returns:
        (records, diagnostics)
    """
    if id_prefix is None:
        id_prefix = get_settings().expense_id_prefix
    default_date = processing_date_string(processing_date)

    diagnostics: List[RowDiagnostic] = []
    records = [
        ExpenseRecord(
            id=f"{id_prefix}{idx}",
            **_normalize_fields(
                row, idx,
                EXPENSE_DATE_FIELDS, EXPENSE_DESCRIPTION_FIELDS, EXPENSE_AMOUNT_FIELDS,
                default_date, diagnostics,
            ),
        )
        for idx, row in enumerate(rows)
    ]

    logger.info(f"Normalized {len(records)} expense records ({len(diagnostics)} coerced values)")
    return records, diagnostics
