# quotation_backend/services/pricing_service.py
"""
Quotation arithmetic shared by the live preview endpoint and the persisted
quotation totals.

All amounts are handled as ``Decimal``. Inputs are coerced rather than
rejected: ``None``, unparsable values and negatives count as zero and
discount percentages are capped at 100 (tax rates are not). Rounding
(half-up, 2 places) happens only on the values handed back to the caller.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class QuotationTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "tax_amount": self.tax_amount,
            "shipping_amount": self.shipping_amount,
            "total_amount": self.total_amount,
        }


# --------------------------
# Coercion helpers
# --------------------------
def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return ZERO
    if not number.is_finite() or number < ZERO:
        return ZERO
    return number


def _to_percentage(value: Any) -> Decimal:
    return min(_to_decimal(value), HUNDRED)


def _to_quantity(value: Any) -> int:
    return int(_to_decimal(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


# --------------------------
# Discount rule
# --------------------------
def _discount(base: Decimal, discount_percentage: Any, discount_amount: Any) -> Decimal:
    """A percentage above zero wins; a fixed amount is capped at the base."""
    percentage = _to_percentage(discount_percentage)
    if percentage > ZERO:
        return base * percentage / HUNDRED
    amount = _to_decimal(discount_amount)
    if amount > ZERO:
        return min(amount, base)
    return ZERO


def _raw_line_total(quantity: Any, unit_price: Any, discount_percentage: Any, discount_amount: Any) -> Decimal:
    item_subtotal = _to_quantity(quantity) * _to_decimal(unit_price)
    return item_subtotal - _discount(item_subtotal, discount_percentage, discount_amount)


# --------------------------
# Public API
# --------------------------
def calculate_line_total(
    quantity: Any,
    unit_price: Any,
    discount_percentage: Any = 0,
    discount_amount: Any = 0,
) -> Decimal:
    return round_money(_raw_line_total(quantity, unit_price, discount_percentage, discount_amount))


def calculate_quotation_totals(
    items: Iterable[Any],
    discount_percentage: Any = 0,
    discount_amount: Any = 0,
    tax_percentage: Any = 0,
    shipping_amount: Any = 0,
) -> QuotationTotals:
    """
    Combine item lines into document totals.

    Line totals are summed unrounded, the document discount is applied to the
    subtotal, tax is charged on the discounted subtotal and shipping is added
    untaxed.
    """
    subtotal = sum(
        (
            _raw_line_total(
                _field(item, "quantity"),
                _field(item, "unit_price"),
                _field(item, "discount_percentage"),
                _field(item, "discount_amount"),
            )
            for item in items
        ),
        ZERO,
    )

    document_discount = _discount(subtotal, discount_percentage, discount_amount)
    discounted_subtotal = subtotal - document_discount
    tax_amount = discounted_subtotal * _to_decimal(tax_percentage) / HUNDRED
    shipping = _to_decimal(shipping_amount)
    total_amount = discounted_subtotal + tax_amount + shipping

    return QuotationTotals(
        subtotal=round_money(subtotal),
        discount_amount=round_money(document_discount),
        tax_amount=round_money(tax_amount),
        shipping_amount=round_money(shipping),
        total_amount=round_money(total_amount),
    )
