"""
Exceptions raised while turning a statement PDF into a Statement.

Numerals that fail to parse and unparsable payment dates are not errors:
the former are simply not numerals, the latter are logged and left unset.
"""
from typing import Any, Dict, Optional


class StatementError(Exception):
    """Base exception for statement processing errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 context: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
            context: Optional diagnostic text, usually the formatted traceback
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class StructuralReadError(StatementError):
    """The PDF's pages, content streams or fonts could not be read."""

    pass


class InterpreterError(StatementError):
    """Unexpected failure while interpreting content or extracting facts."""

    pass


class ContentStreamError(StatementError):
    """Malformed content stream, such as an operator missing its operands."""

    def __init__(self, operator: str, expected: int, available: int) -> None:
        """Initialize with the operand shortfall."""
        message = f"Operator '{operator}' expects {expected} operands, stack holds {available}"
        super().__init__(message, {"operator": operator, "expected": expected,
                                   "available": available})
