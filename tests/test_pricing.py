import random
from decimal import Decimal

import pytest

from quotation_backend.services.pricing_service import (
    calculate_line_total,
    calculate_quotation_totals,
)

pytestmark = pytest.mark.pricing


class TestLineTotal:
    """Single line arithmetic"""

    @pytest.mark.parametrize("quantity,unit_price,expected", [
        (1, "10.00", Decimal("10.00")),
        (3, "19.99", Decimal("59.97")),
        (7, "0.333", Decimal("2.33")),      # 2.331
        (1, "0.005", Decimal("0.01")),      # half-up
        (4, "0", Decimal("0.00")),
    ])
    def test_without_discount(self, quantity, unit_price, expected):
        assert calculate_line_total(quantity, unit_price, 0, 0) == expected

    def test_percentage_discount(self):
        # 2 x 50 = 100, minus 15%
        assert calculate_line_total(2, 50, 15, 0) == Decimal("85.00")

    def test_fixed_discount(self):
        assert calculate_line_total(3, "12.50", 0, "7.50") == Decimal("30.00")

    def test_percentage_takes_precedence_over_fixed(self):
        assert calculate_line_total(2, "50.00", 10, 999) == Decimal("90.00")

    def test_fixed_discount_never_goes_negative(self):
        assert calculate_line_total(1, "10.00", 0, 9999) == Decimal("0.00")

    def test_percentage_above_hundred_is_capped(self):
        assert calculate_line_total(1, "10.00", 250, 0) == Decimal("0.00")

    @pytest.mark.parametrize("quantity,unit_price,pct,amount", [
        (-1, "10.00", 0, 0),
        (2, "-5.00", 0, 0),
        (2, "5.00", -10, -3),
        (None, None, None, None),
        ("abc", "x", "y", "z"),
    ])
    def test_bad_inputs_are_coerced_to_zero(self, quantity, unit_price, pct, amount):
        total = calculate_line_total(quantity, unit_price, pct, amount)
        assert total >= 0

    def test_negative_discounts_are_ignored(self):
        assert calculate_line_total(2, "5.00", -10, -3) == Decimal("10.00")

    def test_random_lines_are_never_negative(self):
        rng = random.Random(404)
        for _ in range(200):
            total = calculate_line_total(
                rng.randint(1, 50),
                round(rng.uniform(0, 500), 2),
                rng.choice([0, 0, rng.uniform(0, 150)]),
                rng.choice([0, rng.uniform(0, 20000)]),
            )
            assert total >= 0


class TestQuotationTotals:
    """Document level aggregation"""

    def test_end_to_end_example(self):
        items = [
            {"quantity": 2, "unit_price": "25.00"},
            {"quantity": 1, "unit_price": "10.00"},
        ]
        totals = calculate_quotation_totals(items, discount_percentage=10, tax_percentage=5, shipping_amount="5.00")

        assert totals.subtotal == Decimal("60.00")
        assert totals.discount_amount == Decimal("6.00")
        assert totals.tax_amount == Decimal("2.70")
        assert totals.shipping_amount == Decimal("5.00")
        assert totals.total_amount == Decimal("61.70")

    def test_empty_items(self):
        totals = calculate_quotation_totals([], shipping_amount=12)
        assert totals.subtotal == Decimal("0.00")
        assert totals.discount_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("12.00")

    def test_shipping_is_not_taxed(self):
        totals = calculate_quotation_totals([{"quantity": 1, "unit_price": 100}], tax_percentage=10, shipping_amount=50)
        assert totals.tax_amount == Decimal("10.00")
        assert totals.total_amount == Decimal("160.00")

    def test_tax_rate_is_not_capped(self):
        totals = calculate_quotation_totals([{"quantity": 1, "unit_price": 100}], tax_percentage=150)
        assert totals.tax_amount == Decimal("150.00")
        assert totals.total_amount == Decimal("250.00")

    def test_fixed_document_discount_is_capped_at_subtotal(self):
        totals = calculate_quotation_totals(
            [{"quantity": 1, "unit_price": 40}], discount_amount=100, tax_percentage=20, shipping_amount=3
        )
        assert totals.discount_amount == Decimal("40.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("3.00")

    def test_document_percentage_wins_over_fixed(self):
        totals = calculate_quotation_totals([{"quantity": 4, "unit_price": 25}], discount_percentage=20, discount_amount=5)
        assert totals.discount_amount == Decimal("20.00")
        assert totals.total_amount == Decimal("80.00")

    def test_line_discounts_apply_before_document_discount(self):
        items = [
            {"quantity": 2, "unit_price": 50, "discount_percentage": 10},   # 90
            {"quantity": 1, "unit_price": 30, "discount_amount": 5},        # 25
        ]
        totals = calculate_quotation_totals(items, discount_amount=15)
        assert totals.subtotal == Decimal("115.00")
        assert totals.discount_amount == Decimal("15.00")
        assert totals.total_amount == Decimal("100.00")

    def test_no_intermediate_rounding(self):
        # three lines of 0.333 sum to 0.999 before rounding, not 0.99
        items = [{"quantity": 1, "unit_price": "0.333"}] * 3
        totals = calculate_quotation_totals(items)
        assert totals.subtotal == Decimal("1.00")

    def test_accepts_objects_with_attributes(self):
        class Line:
            def __init__(self, quantity, unit_price):
                self.quantity = quantity
                self.unit_price = unit_price
                self.discount_percentage = None
                self.discount_amount = None

        totals = calculate_quotation_totals([Line(3, Decimal("9.99"))], tax_percentage=Decimal("8.25"))
        assert totals.subtotal == Decimal("29.97")
        assert totals.tax_amount == Decimal("2.47")
        assert totals.total_amount == Decimal("32.44")

    def test_negative_document_inputs_count_as_zero(self):
        totals = calculate_quotation_totals(
            [{"quantity": 1, "unit_price": 10}],
            discount_percentage=-5, discount_amount=-5, tax_percentage=-5, shipping_amount=-5,
        )
        assert totals.as_dict() == {
            "subtotal": Decimal("10.00"),
            "discount_amount": Decimal("0.00"),
            "tax_amount": Decimal("0.00"),
            "shipping_amount": Decimal("0.00"),
            "total_amount": Decimal("10.00"),
        }

    def test_item_order_does_not_change_totals(self):
        rng = random.Random(7)
        items = [
            {
                "quantity": rng.randint(1, 20),
                "unit_price": str(round(rng.uniform(0.01, 300), 2)),
                "discount_percentage": rng.choice([0, 5, 12.5]),
                "discount_amount": rng.choice([0, 3, 1000]),
            }
            for _ in range(25)
        ]
        expected = calculate_quotation_totals(items, discount_percentage=7, tax_percentage=11, shipping_amount=9)
        for _ in range(10):
            shuffled = items[:]
            rng.shuffle(shuffled)
            assert calculate_quotation_totals(
                shuffled, discount_percentage=7, tax_percentage=11, shipping_amount=9
            ) == expected
