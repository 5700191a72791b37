"""
Pydantic schemas for ledger records, employees and notification requests.
Amounts are kept as Decimal so tolerance comparisons are exact.
"""
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def normalize_optional_text(v):
    """Treat blank strings as missing (forms often send "" for optional fields)."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


class BankTransaction(BaseModel):
    """A bank statement line, classified as reported or unreported."""
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    description: str = "Unknown"
    amount: Decimal = Decimal("0")
    reported: bool = False
    employee_id: Optional[str] = Field(
        None,
        description="Employee reminded about this charge, set after a notification is dispatched"
    )


class ExpenseRecord(BaseModel):
    """An expense report line."""
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    description: str = "Unknown"
    amount: Decimal = Decimal("0")


class Employee(BaseModel):
    """Employee directory entry."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Annotated[Optional[str], BeforeValidator(normalize_optional_text)] = None


class EmployeeCreate(BaseModel):
    """Request body for adding an employee."""
    name: str
    phone: str
    email: Annotated[Optional[str], BeforeValidator(normalize_optional_text)] = None


class NotificationRequest(BaseModel):
    """
    Receipt reminder payload handed to an external sender.
    The core never learns whether delivery succeeded.
    """
    model_config = ConfigDict(frozen=True)

    recipient_phone: str
    recipient_name: str
    message_body: str
    transaction_id: str
    employee_id: str


class NotificationCreate(BaseModel):
    """Request body for sending a receipt reminder."""
    transaction_id: str
    employee_id: str


class RowDiagnostic(BaseModel):
    """Non-fatal note about a value that was coerced during normalization."""
    model_config = ConfigDict(frozen=True)

    row: int = Field(..., ge=0, description="Zero-based data row index")
    field: str
    value: str
    message: str


class ReconciliationSummary(BaseModel):
    """Counts over a classified bank batch."""
    total: int = 0
    reported: int = 0
    unreported: int = 0
    unreported_amount: Decimal = Decimal("0")
