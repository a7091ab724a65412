from datetime import date, datetime
from decimal import Decimal

import pytest

from quotation_backend.services.pricing_service import calculate_quotation_totals
from quotation_backend.utils.formatting import (
    format_currency,
    format_date,
    format_datetime,
    format_status,
    parse_currency,
)


class TestCurrency:

    @pytest.mark.parametrize("amount,currency,expected", [
        (Decimal("61.70"), "USD", "$61.70"),
        (Decimal("1234567.891"), "USD", "$1,234,567.89"),
        (Decimal("1234.5"), "EUR", "1.234,50 €"),
        (Decimal("999.99"), "GBP", "£999.99"),
        (Decimal("123456.78"), "INR", "₹1,23,456.78"),
        (Decimal("1234.5"), "JPY", "¥1,235"),
        (Decimal("1500000"), "LBP", "LBP 1,500,000"),
        (Decimal("12.5"), "CHF", "CHF 12.50"),
        (Decimal("-12.5"), "usd", "-$12.50"),
        (0, "USD", "$0.00"),
    ])
    def test_format(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    @pytest.mark.parametrize("currency", ["USD", "EUR", "GBP", "INR", "CHF"])
    def test_round_trip_of_computed_total(self, currency):
        totals = calculate_quotation_totals(
            [{"quantity": 37, "unit_price": "1249.99"}, {"quantity": 3, "unit_price": "0.35"}],
            discount_percentage=12.5,
            tax_percentage=11,
            shipping_amount="49.90",
        )
        text = format_currency(totals.total_amount, currency)
        assert parse_currency(text, currency) == totals.total_amount

    def test_round_trip_zero_decimal_currency(self):
        text = format_currency(Decimal("4321.49"), "JPY")
        assert abs(parse_currency(text, "JPY") - Decimal("4321.49")) <= Decimal("0.5")

    def test_parse_negative(self):
        assert parse_currency("-1.234,50 €", "EUR") == Decimal("-1234.50")

    def test_parse_empty(self):
        with pytest.raises(ValueError):
            parse_currency("$", "USD")


class TestDates:

    def test_format_date(self):
        assert format_date(datetime(2026, 10, 7, 15, 30)) == "Oct 7, 2026"
        assert format_date(date(2026, 1, 31)) == "Jan 31, 2026"
        assert format_date("2026-12-25T08:00:00") == "Dec 25, 2026"

    def test_format_datetime(self):
        assert format_datetime(datetime(2026, 10, 17, 9, 5)) == "Oct 17, 2026, 09:05 AM"
        assert format_datetime(datetime(2026, 10, 17, 21, 45)) == "Oct 17, 2026, 09:45 PM"


def test_format_status():
    assert format_status("draft") == "Draft"
    assert format_status("converted") == "Converted"
    assert format_status("archived") == "Archived"
