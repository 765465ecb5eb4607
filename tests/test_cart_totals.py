"""
Unit Tests: cart money math

Covers compute_subtotal / compute_tax / compute_total with the fixed 10% rate.
"""
from types import SimpleNamespace

import pytest

from app.schemas.order import OrderLineSnapshot
from app.services.cart_service import TAX_RATE, compute_subtotal, compute_tax, compute_total


def line(price, quantity):
    return SimpleNamespace(price=price, quantity=quantity)


class TestCartTotals:

    def test_reference_cart(self):
        """10.00 x 2 + 5.50 x 1 => 25.50 / 2.55 / 28.05"""
        lines = [line(10.00, 2), line(5.50, 1)]

        assert compute_subtotal(lines) == pytest.approx(25.50)
        assert compute_tax(lines) == pytest.approx(2.55)
        assert compute_total(lines) == pytest.approx(28.05)

    def test_empty_cart_is_zero(self):
        assert compute_subtotal([]) == 0
        assert compute_tax([]) == 0
        assert compute_total([]) == 0

    @pytest.mark.parametrize(
        "lines",
        [
            [line(1.00, 1)],
            [line(12.34, 3), line(0.99, 7)],
            [line(0, 4), line(249.5, 2)],
            [line(3.33, 3)],
        ],
    )
    def test_total_is_subtotal_plus_ten_percent(self, lines):
        assert compute_total(lines) == pytest.approx(compute_subtotal(lines) * 1.10, abs=0.005)

    def test_missing_price_counts_as_zero(self):
        assert compute_subtotal([line(None, 3), line(2.0, 1)]) == pytest.approx(2.0)

    def test_accepts_order_snapshots(self):
        snapshot = [
            OrderLineSnapshot(product_id=1, name="Ankle", price=4.0, quantity=2),
            OrderLineSnapshot(product_id=2, name="Crew", price=6.0, quantity=1),
        ]
        assert compute_total(snapshot) == pytest.approx(15.40)

    def test_tax_rate_is_fixed(self):
        assert TAX_RATE == 0.10
