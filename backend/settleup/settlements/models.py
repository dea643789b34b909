"""
Settlement models.

Transfers are money already moved between two participants; proposed
transactions are what the optimizer suggests moving next.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from settleup.expenses.models import ParticipantId
from settleup.utils.enums import PaymentMethod, TransferStatus


# ==================== DATA CLASSES ====================

@dataclass(frozen=True)
class Transfer:
    """Settlement record between two participants."""
    from_participant: ParticipantId
    to_participant: ParticipantId
    amount: Decimal
    status: TransferStatus = TransferStatus.COMPLETED
    payment_method: PaymentMethod = PaymentMethod.MANUAL

    @property
    def is_completed(self) -> bool:
        return self.status == TransferStatus.COMPLETED


@dataclass(frozen=True)
class ProposedTransaction:
    """One payment the optimizer suggests: debtor pays creditor."""
    from_participant: ParticipantId
    to_participant: ParticipantId
    amount: Decimal  # strictly positive, two places


@dataclass(frozen=True)
class ParticipantSummary:
    total_paid: Decimal = Decimal("0.00")
    total_share: Decimal = Decimal("0.00")
    transfers_sent: Decimal = Decimal("0.00")
    transfers_received: Decimal = Decimal("0.00")
    net: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class SettlementPlan:
    """Balances for a snapshot and the transactions that clear them."""
    balances: Dict[ParticipantId, Decimal] = field(default_factory=dict)
    transactions: List[ProposedTransaction] = field(default_factory=list)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def total_amount(self) -> Decimal:
        return sum((t.amount for t in self.transactions), Decimal("0.00"))
