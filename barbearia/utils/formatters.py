from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal


def format_datetime_br(dt: datetime | None) -> str:
    """Format a datetime as dd/mm/YYYY HH:MM.

    - If dt is None, return an empty string.
    - No timezone conversion: agendamentos are stored as local wall time.
    """
    if dt is None:
        return ""
    return dt.strftime("%d/%m/%Y %H:%M")


def format_date_br(d: date | None) -> str:
    if d is None:
        return ""
    return d.strftime("%d/%m/%Y")


def format_currency(value: object) -> str:
    """Format numeric value as Brazilian currency string.

    Examples:
    - 1234.5 -> "R$ 1.234,50"
    - None -> "R$ 0,00"
    """
    if value is None:
        amt = Decimal("0")
    elif isinstance(value, Decimal):
        amt = value
    else:
        amt = Decimal(str(value))
    s = f"{amt:,.2f}"
    # Convert 1,234.56 -> 1.234,56
    s = s.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {s}"
