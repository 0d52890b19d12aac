"""
Dividend Statement Parser

Extracts payment amounts, franking credits, withholding tax, share counts,
payment date and entity details from share registry dividend statement PDFs
by replaying their content streams and walking the recovered text.
"""

__version__ = "1.0.0"

from .core.runner import parse_statement, StatementParser
from .core.errors import StatementError, StructuralReadError, InterpreterError
from .models.schema import Statement, Dollar, StatementTemplate

__all__ = [
    "parse_statement",
    "StatementParser",
    "StatementError",
    "StructuralReadError",
    "InterpreterError",
    "Statement",
    "Dollar",
    "StatementTemplate"
]
