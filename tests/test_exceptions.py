"""
Unit tests for custom exceptions.
"""
from core.exceptions import (
    ReconcilerException,
    ParsingError,
    EmptyInputError,
    ValidationError,
    NotFoundError,
    ConfigurationError,
    NotificationError,
    ExportError,
)


def test_base_exception():
    """Test base exception class."""
    exc = ReconcilerException("Test error", details={"key": "value"})
    assert str(exc) == "Test error"
    assert exc.message == "Test error"
    assert exc.details == {"key": "value"}


def test_exception_hierarchy():
    """Test exception inheritance."""
    assert issubclass(ParsingError, ReconcilerException)
    assert issubclass(EmptyInputError, ParsingError)
    assert issubclass(ValidationError, ReconcilerException)
    assert issubclass(NotFoundError, ReconcilerException)
    assert issubclass(ConfigurationError, ReconcilerException)
    assert issubclass(NotificationError, ReconcilerException)
    assert issubclass(ExportError, ReconcilerException)


def test_exception_with_details():
    """Test exception with details dictionary."""
    details = {"transaction_id": "bank-7"}
    exc = NotFoundError("Transaction not found", details=details)
    assert exc.message == "Transaction not found"
    assert exc.details["transaction_id"] == "bank-7"


def test_exception_without_details():
    """Test exception without details."""
    exc = EmptyInputError("Input contains no header line")
    assert exc.message == "Input contains no header line"
    assert exc.details == {}
