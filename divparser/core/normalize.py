"""
Data normalization and cleaning functions.
"""
import re
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from pathlib import Path
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

NUMERAL_PATTERN = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$')

# Magnitudes a double can hold; anything larger or smaller is not a numeral.
MAX_EXPONENT = 308


def parse_numeral(value: str) -> Optional[Decimal]:
    """
    Parse a fragment as a numeral.

    Thousands separators are removed and a leading currency marker is
    stripped, so "$4,500.50" parses to Decimal("4500.50").

    Args:
        value: Raw fragment text

    Returns:
        Decimal value, or None if the fragment is not a numeral
    """
    if not value:
        return None

    cleaned = value.replace(',', '').strip().lstrip('$')
    if not NUMERAL_PATTERN.match(cleaned):
        return None

    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None

    if number and abs(number.adjusted()) > MAX_EXPONENT:
        return None
    return number


def to_cents(value: Decimal) -> int:
    """
    Convert a dollar amount to whole cents, rounding half-up.

    Args:
        value: Dollar amount

    Returns:
        Integer cent count

    Raises:
        ValueError: If the amount is infinite or NaN
    """
    if not value.is_finite():
        raise ValueError(f"Not a finite amount: {value}")

    with localcontext() as ctx:
        # wide enough that the multiplication is exact
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + 2)
        return int((value * 100).to_integral_value(rounding=ROUND_HALF_UP))


def parse_statement_date(value: str, format_str: str = "%d %B %Y") -> Optional[date]:
    """
    Parse a statement date such as "15 March 2020".

    Args:
        value: Raw sentence text
        format_str: strptime format of the date

    Returns:
        Date object or None if parsing fails
    """
    cleaned = normalize_text(value)

    try:
        return datetime.strptime(cleaned, format_str).date()
    except ValueError as e:
        logger.warning(f"Could not parse date {value!r}: {e}")
        return None


def normalize_text(value: str) -> str:
    """
    Normalize text by trimming and cleaning.

    Args:
        value: Raw text string

    Returns:
        Cleaned text string
    """
    if not value:
        return ""

    # Remove extra whitespace
    cleaned = re.sub(r'\s+', ' ', value.strip())

    return cleaned


def load_holders(path: Path) -> List[str]:
    """
    Read known account holder names, one per line.

    Args:
        path: Path to the holders file

    Returns:
        Names in file order, blank lines dropped
    """
    names = []
    for line in Path(path).read_text(encoding='utf-8').splitlines():
        name = normalize_text(line)
        if name:
            names.append(name)

    logger.debug(f"Loaded {len(names)} account holder names from {path}")
    return names
