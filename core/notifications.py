"""
Receipt reminder requests.
Builds the payload for an external sender; delivery is not handled here.
"""
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Sequence

from core.exceptions import NotFoundError, ValidationError
from core.logger import mask_phone, setup_logger
from core.schema import BankTransaction, Employee, NotificationRequest

logger = setup_logger(__name__)

MESSAGE_TEMPLATE = "Please submit receipt for: {description} - ${amount}"

_CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Format an amount with exactly two decimal places."""
    with localcontext() as ctx:
        # Enough digits for every integer place plus cents
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return f"{amount.quantize(_CENTS, rounding=ROUND_HALF_UP):f}"


def build_message(transaction: BankTransaction) -> str:
    return MESSAGE_TEMPLATE.format(
        description=transaction.description,
        amount=format_amount(transaction.amount),
    )


def build_notification_request(
    transaction_id: str,
    employee_id: str,
    transactions: Sequence[BankTransaction],
    employees: Sequence[Employee],
) -> NotificationRequest:
    """
    Compose a receipt reminder for an unreported transaction.

    Args:
        transaction_id: Id of a transaction in the current bank batch
        employee_id: Id of an employee in the directory
        transactions: Current classified bank batch
        employees: Current employee directory listing

    Returns:
        Immutable notification request

    Raises:
        NotFoundError: If either id is unknown
        ValidationError: If the transaction is already reported
    """
    transaction = next((txn for txn in transactions if txn.id == transaction_id), None)
    if transaction is None:
        raise NotFoundError(
            f"Transaction not found: {transaction_id}",
            details={"transaction_id": transaction_id}
        )

    employee = next((emp for emp in employees if emp.id == employee_id), None)
    if employee is None:
        raise NotFoundError(
            f"Employee not found: {employee_id}",
            details={"employee_id": employee_id}
        )

    if transaction.reported:
        raise ValidationError(
            f"Transaction {transaction_id} is already reported",
            details={"transaction_id": transaction_id}
        )

    request = NotificationRequest(
        recipient_phone=employee.phone,
        recipient_name=employee.name,
        message_body=build_message(transaction),
        transaction_id=transaction.id,
        employee_id=employee.id,
    )

    logger.info(f"Built reminder for {transaction.id} to {employee.name} ({mask_phone(employee.phone)})")
    return request
