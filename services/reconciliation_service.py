"""
Reconciliation session service.
Holds the current bank and expense batches for one bookkeeper session and
reclassifies the bank batch whenever either ledger is reloaded.
"""
from datetime import date
from typing import Callable, List, Optional

from core.config import get_settings
from core.directory import EmployeeDirectory
from core.exceptions import NotFoundError
from core.exporters import create_output_filename, export_to_excel
from core.logger import setup_logger
from core.matching import classify_transactions, summarize, unreported
from core.normalize import normalize_bank_transactions, normalize_expense_records
from core.notifications import build_notification_request
from core.parsing import parse_delimited_text
from core.schema import (
    BankTransaction,
    ExpenseRecord,
    NotificationRequest,
    ReconciliationSummary,
    RowDiagnostic,
)
from services.notification_sender import NotificationSender, get_notification_sender

logger = setup_logger(__name__)


class ReconciliationService:
    """Service for loading ledgers, matching them and sending receipt reminders."""

    def __init__(
        self,
        directory: Optional[EmployeeDirectory] = None,
        sender: Optional[NotificationSender] = None,
        clock: Callable[[], date] = date.today,
    ):
        """
        Initialize reconciliation service.

        Args:
            directory: Employee directory (a new empty one by default)
            sender: Notification sender (chosen from configuration by default)
            clock: Source of the processing date for rows without a date
        """
        self.settings = get_settings()
        self.directory = directory if directory is not None else EmployeeDirectory()
        self.sender = sender if sender is not None else get_notification_sender()
        self.clock = clock
        self._bank: List[BankTransaction] = []
        self._expenses: List[ExpenseRecord] = []

    def load_bank_statement(self, text: str) -> List[RowDiagnostic]:
        """
        Replace the bank batch and reclassify it.

        Args:
            text: Delimited bank statement text

        Returns:
            Per-row diagnostics for coerced values

        Raises:
            EmptyInputError: If text has no header line
        """
        rows = parse_delimited_text(text)
        transactions, diagnostics = normalize_bank_transactions(
            rows, self.settings.bank_id_prefix, self.clock()
        )
        self._bank = self._classify(transactions)
        logger.info(f"Loaded bank statement: {len(self._bank)} transactions")
        return diagnostics

    def load_expense_report(self, text: str) -> List[RowDiagnostic]:
        """
        Replace the expense batch and reclassify the current bank batch.

        Args:
            text: Delimited expense report text

        Returns:
            Per-row diagnostics for coerced values

        Raises:
            EmptyInputError: If text has no header line
        """
        rows = parse_delimited_text(text)
        expenses, diagnostics = normalize_expense_records(
            rows, self.settings.expense_id_prefix, self.clock()
        )
        self._expenses = expenses
        self._bank = self._classify(self._bank)
        logger.info(f"Loaded expense report: {len(self._expenses)} records")
        return diagnostics

    def _classify(self, transactions: List[BankTransaction]) -> List[BankTransaction]:
        return classify_transactions(
            transactions,
            self._expenses,
            tolerance=self.settings.amount_tolerance,
            strategy=self.settings.matching_strategy,
            min_description_length=self.settings.min_description_length,
            similarity_threshold=self.settings.description_similarity_threshold,
        )

    def transactions(self, unreported_only: bool = False) -> List[BankTransaction]:
        """Current classified bank batch, in statement order."""
        if unreported_only:
            return unreported(self._bank)
        return list(self._bank)

    def expenses(self) -> List[ExpenseRecord]:
        return list(self._expenses)

    def summary(self) -> ReconciliationSummary:
        return summarize(self._bank)

    def notify(self, transaction_id: str, employee_id: str) -> NotificationRequest:
        """
        Send a receipt reminder for an unreported transaction.

        The employee is recorded on the transaction only after the sender
        accepts the request.

        Args:
            transaction_id: Id in the current bank batch
            employee_id: Id in the employee directory

        Returns:
            The dispatched notification request

        Raises:
            NotFoundError: If either id is unknown
            ValidationError: If the transaction is already reported
            NotificationError: If the sender fails
        """
        request = build_notification_request(
            transaction_id, employee_id, self._bank, self.directory.list()
        )
        self.sender.send(request)

        self._bank = [
            txn.model_copy(update={"employee_id": employee_id}) if txn.id == transaction_id else txn
            for txn in self._bank
        ]
        return request

    def get_transaction(self, transaction_id: str) -> BankTransaction:
        for txn in self._bank:
            if txn.id == transaction_id:
                return txn
        raise NotFoundError(
            f"Transaction not found: {transaction_id}",
            details={"transaction_id": transaction_id}
        )

    def export(self, output_dir: Optional[str] = None) -> str:
        """
        Write the classified batch to an Excel file.

        Args:
            output_dir: Target directory (defaults to EXPORT_PATH)

        Returns:
            Path to the written file
        """
        output_path = create_output_filename(output_dir)
        employees = {emp.id: emp for emp in self.directory.list()}
        return export_to_excel(self._bank, output_path, employees)
