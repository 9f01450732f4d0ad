"""
Tax Entry Helpers

The engine only ever sees tax as a plain amount. Entering it as a
percentage of the subtotal is a caller-side convenience handled here.

DESIGN DECISION: Percent mode recomputes the tax amount only when the
percentage is edited or the subtotal genuinely changes. Changes smaller
than `epsilon` are ignored so floating-point noise can't make the amount
oscillate between recomputations.
"""

from typing import Optional

from dietsplit.models.split import round_currency


def tax_from_percentage(subtotal: float, percentage: float, places: int = 2) -> float:
    """subtotal * percentage / 100, rounded to `places`."""
    return round_currency(subtotal * percentage / 100, places)


def percentage_from_tax(subtotal: float, tax: float) -> float:
    """Inverse of tax_from_percentage. 0 when the subtotal is 0."""
    if subtotal <= 0:
        return 0.0
    return tax / subtotal * 100


class TaxPercentControl:
    """
    State for a tax input that can be typed as an amount or a percentage.

    Usage:
        control = TaxPercentControl()
        tax = control.set_percentage(8.875, subtotal)
        ...
        new_tax = control.on_subtotal_changed(new_subtotal)
        if new_tax is not None:
            session.set_tax(new_tax)
    """

    def __init__(self, epsilon: float = 0.005, places: int = 2):
        self.epsilon = epsilon
        self.places = places
        self.percent_mode = False
        self.percentage: Optional[float] = None
        self.amount = 0.0
        self._subtotal: Optional[float] = None

    def set_amount(self, amount: float) -> float:
        """Enter tax as an amount. Leaves percent mode."""
        self.percent_mode = False
        self.percentage = None
        self.amount = float(amount)
        return self.amount

    def set_percentage(self, percentage: float, subtotal: float) -> float:
        """Enter tax as a percentage of `subtotal`. Returns the new amount."""
        self.percent_mode = True
        self.percentage = float(percentage)
        self._subtotal = float(subtotal)
        self.amount = tax_from_percentage(self._subtotal, self.percentage, self.places)
        return self.amount

    def on_subtotal_changed(self, subtotal: float) -> Optional[float]:
        """
        Recompute tax after the subtotal moved.

        Returns the new amount, or None when nothing should be fed back
        (amount mode, unchanged subtotal, or a change below epsilon).
        """
        if not self.percent_mode or self.percentage is None:
            return None

        subtotal = float(subtotal)
        if self._subtotal is not None and abs(subtotal - self._subtotal) < self.epsilon:
            return None
        self._subtotal = subtotal

        amount = tax_from_percentage(subtotal, self.percentage, self.places)
        if abs(amount - self.amount) < self.epsilon:
            return None

        self.amount = amount
        return amount
