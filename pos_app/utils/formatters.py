"""
Formatting helpers for invoices and JSON responses.
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union

from flask.json.provider import DefaultJSONProvider


def money(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format an amount with exactly two decimals.

    Args:
        value: Amount to format

    Returns:
        String like "1234.50", or "-" when the value is not a number

    Examples:
        money(30) -> "30.00"
        money(Decimal('12.5')) -> "12.50"
        money(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        num = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    return f"{num:.2f}"


def date_in(value: Union[date, datetime, str, None]) -> str:
    """
    Format a date as DD/MM/YYYY (en-IN style).

    Examples:
        date_in(date(2025, 10, 20)) -> "20/10/2025"
    """
    if value is None:
        return "-"

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return "-"

    if isinstance(value, datetime):
        value = value.date()

    if not isinstance(value, date):
        return "-"

    return value.strftime("%d/%m/%Y")


def to_json_value(value):
    """Money as JSON numbers, timestamps as ISO-8601 strings."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=' ', timespec='seconds')
    if isinstance(value, date):
        return value.isoformat()
    return value


class PosJSONProvider(DefaultJSONProvider):
    """JSON provider that keeps Decimal amounts numeric on the wire."""

    @staticmethod
    def default(o):
        converted = to_json_value(o)
        if converted is not o:
            return converted
        return DefaultJSONProvider.default(o)
