"""
Tests for percentage-driven tax entry.
"""

import pytest

from dietsplit.engine.tax import TaxPercentControl, percentage_from_tax, tax_from_percentage


class TestTaxFromPercentage:

    def test_rounds_to_cents(self):
        assert tax_from_percentage(33.33, 8.875) == 2.96

    def test_zero_subtotal(self):
        assert tax_from_percentage(0, 10) == 0.0

    def test_inverse(self):
        assert percentage_from_tax(50, 5) == pytest.approx(10)
        assert percentage_from_tax(0, 5) == 0.0


class TestTaxPercentControl:

    def test_amount_mode_ignores_subtotal_changes(self):
        control = TaxPercentControl()
        control.set_amount(4)

        assert control.on_subtotal_changed(100) is None
        assert control.amount == 4

    def test_percent_mode_follows_subtotal(self):
        control = TaxPercentControl()
        assert control.set_percentage(10, 30) == 3.0

        assert control.on_subtotal_changed(45) == 4.5
        assert control.amount == 4.5

    def test_unchanged_subtotal_produces_no_update(self):
        control = TaxPercentControl()
        control.set_percentage(10, 30)

        assert control.on_subtotal_changed(30) is None

    def test_sub_epsilon_noise_is_suppressed(self):
        control = TaxPercentControl(epsilon=0.005)
        control.set_percentage(10, 30)

        assert control.on_subtotal_changed(30.0000001) is None
        assert control.amount == 3.0

    def test_switching_to_amount_leaves_percent_mode(self):
        control = TaxPercentControl()
        control.set_percentage(10, 30)
        control.set_amount(2)

        assert control.percent_mode is False
        assert control.percentage is None
        assert control.on_subtotal_changed(100) is None
