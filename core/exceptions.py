"""
Custom exceptions for better error handling.
"""
from typing import Any, Dict, Optional


class ReconcilerException(Exception):
    """Base exception for all bank reconciliation errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.
        
        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ParsingError(ReconcilerException):
    """Raised when delimited text cannot be parsed."""
    pass


class EmptyInputError(ParsingError):
    """Raised when input has no header line at all."""
    pass


class ValidationError(ReconcilerException):
    """Raised when data validation fails."""
    pass


class NotFoundError(ReconcilerException):
    """Raised when a transaction or employee id is not in the current data."""
    pass


class ConfigurationError(ReconcilerException):
    """Raised when configuration is invalid."""
    pass


class NotificationError(ReconcilerException):
    """Raised when a notification request cannot be delivered."""
    pass


class ExportError(ReconcilerException):
    """Raised when spreadsheet export fails."""
    pass
