"""
Expense split logic.

Responsibilities:
- Calculate equal splits
- Calculate weighted and percentage splits
- Validate exact splits
- Validate that an obligation's splits sum to its total
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence, Tuple

from settleup.errors import InvariantViolation
from settleup.expenses.models import Obligation, ParticipantId, Split
from settleup.utils.enums import SplitType
from settleup.utils.money import CENT, TOLERANCE, quantize, to_decimal, within_tolerance

logger = logging.getLogger(__name__)


def validate_splits(obligation: Obligation, index: int = 0) -> None:
    """
    Check that the splits of an obligation add up to its total within one cent.

    Raises:
        InvariantViolation: naming the obligation by id, or by position
            when it has none
    """
    expected = to_decimal(obligation.total_amount)
    actual = sum((to_decimal(s.owed) for s in obligation.splits), Decimal("0"))
    if not within_tolerance(actual, expected):
        obligation_id = obligation.id if obligation.id is not None else f"#{index}"
        logger.warning(
            "Rejected obligation %s: splits %s vs total %s",
            obligation_id, actual, expected
        )
        raise InvariantViolation(obligation_id, expected, actual)


def _distribute(total: Decimal, ratios: Sequence[Tuple[ParticipantId, Decimal]]) -> List[Split]:
    # Last person gets remainder to ensure exact total
    splits = []
    running_total = Decimal("0")
    for i, (participant, ratio) in enumerate(ratios):
        if i == len(ratios) - 1:
            amount = total - running_total
        else:
            amount = (total * ratio).quantize(CENT, rounding=ROUND_HALF_UP)
            running_total += amount
        splits.append(Split(participant=participant, owed=amount))
    return splits


def split_equal(total_amount: Any, participants: Sequence[ParticipantId]) -> List[Split]:
    """
    Calculate equal split among participants.

    Remainder cents go to the last participant.
    """
    if not participants:
        return []
    total = quantize(total_amount)
    ratio = Decimal(1) / Decimal(len(participants))
    return _distribute(total, [(p, ratio) for p in participants])


def split_weighted(total_amount: Any, weights: Dict[ParticipantId, Any]) -> List[Split]:
    """
    Calculate weighted split based on participant weights.

    Args:
        total_amount: Total expense amount
        weights: Dict of {participant: weight}

    Returns:
        List of splits, empty when there is nothing to weigh by or a
        weight is negative
    """
    if not weights:
        return []

    if any(to_decimal(w) < 0 for w in weights.values()):
        return []

    total_weight = sum((to_decimal(w) for w in weights.values()), Decimal("0"))
    if total_weight == 0:
        return []

    total = quantize(total_amount)
    return _distribute(
        total,
        [(p, to_decimal(w) / total_weight) for p, w in weights.items()]
    )


def split_percentage(
    total_amount: Any,
    percentages: Dict[ParticipantId, Any]
) -> Tuple[List[Split], Optional[str]]:
    """
    Calculate split based on percentages.

    Returns:
        Tuple of (splits list, error message if invalid)
    """
    if not percentages:
        return [], "No percentages provided"

    if any(to_decimal(p) < 0 for p in percentages.values()):
        return [], "Percentages must not be negative"

    total_pct = sum((to_decimal(p) for p in percentages.values()), Decimal("0"))
    if abs(total_pct - 100) > TOLERANCE:
        return [], f"Percentages must sum to 100, got {total_pct}"

    total = quantize(total_amount)
    return _distribute(
        total,
        [(p, to_decimal(pct) / 100) for p, pct in percentages.items()]
    ), None


def split_exact(
    total_amount: Any,
    exact_amounts: Dict[ParticipantId, Any]
) -> Tuple[List[Split], Optional[str]]:
    """
    Validate and use exact amounts per participant.

    Returns:
        Tuple of (splits list, error message if invalid)
    """
    if not exact_amounts:
        return [], "No amounts provided"

    if any(to_decimal(a) < 0 for a in exact_amounts.values()):
        return [], "Amounts must not be negative"

    total = to_decimal(total_amount)
    amounts_sum = sum((to_decimal(a) for a in exact_amounts.values()), Decimal("0"))
    if not within_tolerance(amounts_sum, total):
        return [], f"Amounts sum to {amounts_sum}, expected {total}"

    return [
        Split(participant=p, owed=quantize(a))
        for p, a in exact_amounts.items()
    ], None


def build_splits(
    split_type: SplitType,
    total_amount: Any,
    participants: Optional[Sequence[ParticipantId]] = None,
    shares: Optional[Dict[ParticipantId, Any]] = None
) -> Tuple[List[Split], Optional[str]]:
    """Dispatch to the split calculator for ``split_type``."""
    if split_type == SplitType.EQUAL:
        if not participants:
            return [], "No participants provided"
        return split_equal(total_amount, participants), None
    if split_type == SplitType.WEIGHTED:
        splits = split_weighted(total_amount, shares or {})
        return splits, None if splits else "Weights must be positive"
    if split_type == SplitType.PERCENTAGE:
        return split_percentage(total_amount, shares or {})
    return split_exact(total_amount, shares or {})
