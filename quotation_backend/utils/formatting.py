# quotation_backend/utils/formatting.py
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Union

from quotation_backend.core.enums import QuotationStatus


@dataclass(frozen=True)
class CurrencyFormat:
    symbol: str
    symbol_first: bool = True
    spaced: bool = False
    group_sep: str = ","
    decimal_sep: str = "."
    digits: int = 2
    indian_grouping: bool = False


CURRENCY_FORMATS = {
    "USD": CurrencyFormat("$"),
    "EUR": CurrencyFormat("€", symbol_first=False, spaced=True, group_sep=".", decimal_sep=","),
    "GBP": CurrencyFormat("£"),
    "LBP": CurrencyFormat("LBP", spaced=True, digits=0),
    "INR": CurrencyFormat("₹", indian_grouping=True),
    "JPY": CurrencyFormat("¥", digits=0),
}

STATUS_LABELS = {
    QuotationStatus.DRAFT: "Draft",
    QuotationStatus.SENT: "Sent",
    QuotationStatus.APPROVED: "Approved",
    QuotationStatus.REJECTED: "Rejected",
    QuotationStatus.CONVERTED: "Converted",
    QuotationStatus.EXPIRED: "Expired",
}


def _currency_format(currency: str) -> CurrencyFormat:
    code = (currency or "USD").upper()
    return CURRENCY_FORMATS.get(code, CurrencyFormat(code, spaced=True))


def _group(digits: str, sep: str, indian: bool) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    size = 2 if indian else 3
    groups = []
    while head:
        groups.insert(0, head[-size:])
        head = head[:-size]
    return sep.join(groups + [tail])


def format_currency(amount: Any, currency: str = "USD") -> str:
    """
    Render an amount for display, e.g. ``$1,234.50``, ``1.234,50 €`` or
    ``₹1,23,456.00``. Unknown currency codes are shown as ``XYZ 1,234.50``.
    """
    fmt = _currency_format(currency)
    value = Decimal(str(amount or 0))
    exponent = Decimal(1).scaleb(-fmt.digits)
    value = value.quantize(exponent, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):.{fmt.digits}f}".partition(".")
    number = _group(integer_part, fmt.group_sep, fmt.indian_grouping)
    if fraction:
        number = f"{number}{fmt.decimal_sep}{fraction}"

    space = " " if fmt.spaced else ""
    if fmt.symbol_first:
        return f"{sign}{fmt.symbol}{space}{number}"
    return f"{sign}{number}{space}{fmt.symbol}"


def parse_currency(text: str, currency: str = "USD") -> Decimal:
    """Inverse of :func:`format_currency` for the same currency code."""
    fmt = _currency_format(currency)
    cleaned = text.replace(fmt.symbol, "").replace("\u00a0", "").replace(" ", "").strip()
    negative = cleaned.startswith("-")
    cleaned = cleaned.lstrip("-").replace(fmt.group_sep, "").replace(fmt.decimal_sep, ".")
    if not cleaned:
        raise ValueError(f"No amount found in {text!r}")
    value = Decimal(cleaned)
    return -value if negative else value


def _to_datetime(value: Union[datetime, date, str]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(value)


def format_date(value: Union[datetime, date, str]) -> str:
    d = _to_datetime(value)
    return f"{d:%b} {d.day}, {d.year}"


def format_datetime(value: Union[datetime, date, str]) -> str:
    d = _to_datetime(value)
    return f"{format_date(d)}, {d:%I:%M %p}"


def format_status(status: Any) -> str:
    try:
        return STATUS_LABELS[QuotationStatus(status)]
    except ValueError:
        return str(status).capitalize()
