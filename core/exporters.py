"""
Excel export of a classified bank batch.
One row per bank transaction in statement order, with a Status column.
"""
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from core.config import get_settings
from core.exceptions import ExportError
from core.logger import setup_logger
from core.schema import BankTransaction, Employee

logger = setup_logger(__name__)

SHEET_NAME = "Reconciliation"
STATUS_REPORTED = "Reported"
STATUS_UNREPORTED = "Unreported - receipt needed"

COLUMNS = ["ID", "Date", "Description", "Amount", "Status", "Reminded"]


def format_status(transaction: BankTransaction) -> str:
    """Human readable reconciliation status."""
    return STATUS_REPORTED if transaction.reported else STATUS_UNREPORTED


def build_export_rows(
    transactions: Sequence[BankTransaction],
    employees: Optional[Dict[str, Employee]] = None,
) -> List[Dict[str, object]]:
    """
    Flatten transactions into spreadsheet rows.

    Args:
        transactions: Classified bank transactions
        employees: Employee lookup by id, used to name who was reminded

    Returns:
        List of row dicts keyed by COLUMNS
    """
    employees = employees or {}
    rows = []
    for txn in transactions:
        reminded = ""
        if txn.employee_id:
            employee = employees.get(txn.employee_id)
            reminded = employee.name if employee else txn.employee_id
        rows.append({
            "ID": txn.id,
            "Date": txn.date,
            "Description": txn.description,
            "Amount": float(txn.amount),
            "Status": format_status(txn),
            "Reminded": reminded,
        })
    return rows


def export_to_excel(
    transactions: Sequence[BankTransaction],
    output_path: str,
    employees: Optional[Dict[str, Employee]] = None,
) -> str:
    """
    Export classified transactions to Excel.

    Args:
        transactions: Classified bank transactions
        output_path: Output file path
        employees: Employee lookup by id

    Returns:
        Path to created file

    Raises:
        ExportError: If writing the workbook fails
    """
    logger.info(f"Exporting {len(transactions)} transactions to {output_path}")

    output_df = pd.DataFrame(build_export_rows(transactions, employees), columns=COLUMNS)

    # Ensure output directory exists
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            output_df.to_excel(writer, sheet_name=SHEET_NAME, index=False)

            workbook = writer.book
            worksheet = writer.sheets[SHEET_NAME]

            money_format = workbook.add_format({"num_format": "#,##0.00"})
            amount_idx = COLUMNS.index("Amount")
            worksheet.set_column(amount_idx, amount_idx, 14, money_format)

            # Auto-fit text columns (approximate)
            for idx, col in enumerate(COLUMNS):
                if col == "Amount":
                    continue
                max_len = max(
                    [len(str(col))] + [len(str(v)) for v in output_df[col]]
                )
                worksheet.set_column(idx, idx, min(max_len + 2, 60))

            worksheet.autofilter(0, 0, len(output_df), len(COLUMNS) - 1)

        logger.info(f"Successfully exported to {output_path}")
        return output_path

    except Exception as e:
        logger.error(f"Failed to export Excel: {e}")
        raise ExportError(
            "Failed to export to Excel",
            details={"output_path": output_path, "error": str(e)}
        )


def create_output_filename(base_path: Optional[str] = None) -> str:
    """
    Create timestamped output filename.

    Args:
        base_path: Base directory path (defaults to configured EXPORT_PATH)

    Returns:
        Full output file path
    """
    if base_path is None:
        settings = get_settings()
        settings.ensure_directories()
        base_path = settings.export_path

    Path(base_path).mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    filename = f"reconciliation_{timestamp}.xlsx"

    return str(Path(base_path) / filename)
