"""Settlement calculation service - Splitwise-style debt minimization."""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from settleup.errors import UnbalancedInputError
from settleup.expenses.models import Obligation, Participant, ParticipantId
from settleup.expenses.services import validate_splits
from settleup.settlements.models import (
    ParticipantSummary,
    ProposedTransaction,
    SettlementPlan,
    Transfer,
)
from settleup.utils.money import (
    TOLERANCE_CENTS,
    from_cents,
    is_dust,
    quantize,
    to_cents,
    to_decimal,
)

logger = logging.getLogger(__name__)


def participant_sort_key(participant_id: ParticipantId) -> Tuple[int, Any]:
    """Integers first in numeric order, then everything else as text."""
    if isinstance(participant_id, int) and not isinstance(participant_id, bool):
        return (0, participant_id)
    return (1, str(participant_id))


class SettlementCalculator:
    """Calculate balances and minimize settlement transactions."""

    @staticmethod
    def aggregate(
        obligations: Iterable[Obligation],
        transfers: Iterable[Transfer] = ()
    ) -> Dict[ParticipantId, Decimal]:
        """
        Fold obligations and completed transfers into net balances.

        - Positive balance = is owed money (others owe them)
        - Negative balance = owes money (they owe others)

        Balances are summed exactly and rounded to cents once at the end.
        Entries within one cent of zero are dropped. Keys come back ordered
        by participant id so equal snapshots give equal output.

        Raises:
            InvariantViolation: an obligation's splits do not sum to its total
        """
        balances = defaultdict(Decimal)
        obligation_count = 0

        for index, obligation in enumerate(obligations):
            validate_splits(obligation, index)
            obligation_count += 1
            balances[obligation.payer] += to_decimal(obligation.total_amount)
            for split in obligation.splits:
                balances[split.participant] -= to_decimal(split.owed)

        transfer_count = 0
        for transfer in transfers:
            if not transfer.is_completed:
                continue
            transfer_count += 1
            amount = to_decimal(transfer.amount)
            # from pays to: from's debt shrinks, to's receivable shrinks
            balances[transfer.from_participant] += amount
            balances[transfer.to_participant] -= amount

        cleaned = {}
        for participant_id in sorted(balances, key=participant_sort_key):
            balance = quantize(balances[participant_id])
            if not is_dust(balance):
                cleaned[participant_id] = balance

        logger.debug(
            "Aggregated %d obligations and %d completed transfers into %d balances",
            obligation_count, transfer_count, len(cleaned)
        )
        return cleaned

    @staticmethod
    def optimize(balances: Dict[ParticipantId, Any]) -> List[ProposedTransaction]:
        """
        Calculate who pays whom using a greedy largest-vs-largest match.

        Not an exact minimum-transaction solver (that problem is NP-hard);
        it emits at most ``creditors + debtors - 1`` transactions.

        Raises:
            UnbalancedInputError: creditor and debtor totals differ by more
                than one cent
        """
        # [participant_id, remaining cents]
        creditors = []  # People who are OWED money
        debtors = []    # People who OWE money

        for participant_id, balance in balances.items():
            cents = to_cents(balance)
            if cents > TOLERANCE_CENTS:
                creditors.append([participant_id, cents])
            elif cents < -TOLERANCE_CENTS:
                debtors.append([participant_id, -cents])

        def order(entry):
            return (-entry[1], participant_sort_key(entry[0]))

        creditors.sort(key=order)
        debtors.sort(key=order)

        transactions = []
        creditor_idx = 0
        debtor_idx = 0

        while creditor_idx < len(creditors) and debtor_idx < len(debtors):
            creditor = creditors[creditor_idx]
            debtor = debtors[debtor_idx]
            settle_amount = min(creditor[1], debtor[1])

            transactions.append(ProposedTransaction(
                from_participant=debtor[0],
                to_participant=creditor[0],
                amount=from_cents(settle_amount)
            ))

            creditor[1] -= settle_amount
            debtor[1] -= settle_amount
            # Only a fully cleared party is skipped; a stray cent stays in play
            if creditor[1] == 0:
                creditor_idx += 1
            if debtor[1] == 0:
                debtor_idx += 1

        leftover_credit = sum(c[1] for c in creditors[creditor_idx:])
        leftover_debt = sum(d[1] for d in debtors[debtor_idx:])
        if leftover_credit > TOLERANCE_CENTS:
            logger.warning("Unbalanced input: %d cents owed to nobody", leftover_credit)
            raise UnbalancedInputError(from_cents(leftover_credit), "creditor")
        if leftover_debt > TOLERANCE_CENTS:
            logger.warning("Unbalanced input: %d cents owed by nobody", leftover_debt)
            raise UnbalancedInputError(from_cents(leftover_debt), "debtor")

        logger.debug(
            "Matched %d creditors and %d debtors with %d transactions",
            len(creditors), len(debtors), len(transactions)
        )
        return transactions

    @staticmethod
    def settle_up(
        obligations: Iterable[Obligation],
        transfers: Iterable[Transfer] = ()
    ) -> SettlementPlan:
        """Aggregate a snapshot and propose the transactions that clear it."""
        balances = SettlementCalculator.aggregate(obligations, transfers)
        transactions = SettlementCalculator.optimize(balances)
        return SettlementPlan(balances=balances, transactions=transactions)

    @staticmethod
    def summarize(
        obligations: Iterable[Obligation],
        transfers: Iterable[Transfer] = ()
    ) -> Dict[ParticipantId, ParticipantSummary]:
        """
        Per-participant totals behind each net balance.

        Every participant seen in the snapshot is listed, settled or not.
        """
        paid = defaultdict(Decimal)
        share = defaultdict(Decimal)
        sent = defaultdict(Decimal)
        received = defaultdict(Decimal)
        seen = set()

        for index, obligation in enumerate(obligations):
            validate_splits(obligation, index)
            paid[obligation.payer] += to_decimal(obligation.total_amount)
            seen.add(obligation.payer)
            for split in obligation.splits:
                share[split.participant] += to_decimal(split.owed)
                seen.add(split.participant)

        for transfer in transfers:
            if not transfer.is_completed:
                continue
            amount = to_decimal(transfer.amount)
            sent[transfer.from_participant] += amount
            received[transfer.to_participant] += amount
            seen.update((transfer.from_participant, transfer.to_participant))

        summary = {}
        for participant_id in sorted(seen, key=participant_sort_key):
            net = (
                paid[participant_id] - share[participant_id]
                + sent[participant_id] - received[participant_id]
            )
            summary[participant_id] = ParticipantSummary(
                total_paid=quantize(paid[participant_id]),
                total_share=quantize(share[participant_id]),
                transfers_sent=quantize(sent[participant_id]),
                transfers_received=quantize(received[participant_id]),
                net=quantize(net)
            )
        return summary


def name_map(participants: Optional[Iterable[Participant]]) -> Dict[ParticipantId, str]:
    return {p.id: p.name for p in participants or ()}


aggregate = SettlementCalculator.aggregate
optimize = SettlementCalculator.optimize
settle_up = SettlementCalculator.settle_up
summarize = SettlementCalculator.summarize
