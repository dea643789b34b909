"""Errors raised by the settlement engine."""
from decimal import Decimal
from typing import Any, Optional


class SettlementError(Exception):
    """Base class for settlement engine failures."""


class InvariantViolation(SettlementError):
    """An obligation's splits do not add up to its total."""

    def __init__(
        self,
        obligation_id: Any,
        expected: Decimal,
        actual: Decimal,
        message: Optional[str] = None
    ):
        self.obligation_id = obligation_id
        self.expected = expected
        self.actual = actual
        if message is None:
            message = (
                f"Obligation {obligation_id}: splits total ({actual:.2f}) "
                f"must equal amount ({expected:.2f})"
            )
        super().__init__(message)


class UnbalancedInputError(SettlementError):
    """Creditor and debtor totals of a balance map do not match."""

    def __init__(self, residual: Decimal, side: str):
        self.residual = residual
        self.side = side
        super().__init__(
            f"Balances could not be reconciled: {residual:.2f} left "
            f"unresolved on the {side} side"
        )
