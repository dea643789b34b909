"""Tests for the settlement optimizer and full settlement plans."""
import random
from decimal import Decimal

import pytest

from settleup.errors import UnbalancedInputError
from settleup.expenses.models import Obligation, Split
from settleup.settlements.models import ProposedTransaction, Transfer
from settleup.settlements.services import optimize, settle_up

D = Decimal


def apply(balances, transactions):
    after = {k: D(str(v)) for k, v in balances.items()}
    for t in transactions:
        after[t.from_participant] += t.amount
        after[t.to_participant] -= t.amount
    return after


def sides(balances):
    creditors = [v for v in balances.values() if D(str(v)) > D("0.01")]
    debtors = [v for v in balances.values() if D(str(v)) < D("-0.01")]
    return len(creditors), len(debtors)


BALANCED_MAPS = [
    {"A": D("50.00"), "B": D("-20.00"), "C": D("-30.00")},
    {1: D("100.00"), 2: D("-25.00"), 3: D("-25.00"), 4: D("-50.00")},
    {1: D("33.33"), 2: D("33.34"), 3: D("-66.67")},
    {"a": D("70.00"), "b": D("30.00"), "c": D("-40.00"), "d": D("-60.00")},
    {"p": D("12.34"), "q": D("-0.01"), "r": D("-12.33"), "s": D("0.00")},
    {"A": D("7"), "B": D("3"), "C": D("-5"), "D": D("-3"), "E": D("-2")},
    {"A": D("1.00"), "B": D("1.00"), "C": D("1.00"),
     "D": D("-1.01"), "E": D("-1.01"), "F": D("-0.98")},
]


def test_largest_debtor_matched_first():
    balances = {"A": D("50.00"), "B": D("-20.00"), "C": D("-30.00")}
    assert optimize(balances) == [
        ProposedTransaction("C", "A", D("30.00")),
        ProposedTransaction("B", "A", D("20.00")),
    ]


def test_empty_map_gives_no_transactions():
    assert optimize({}) == []


def test_all_dust_gives_no_transactions():
    assert optimize({"A": D("0.01"), "B": D("-0.01"), "C": D("0")}) == []


@pytest.mark.parametrize("balances", BALANCED_MAPS)
def test_transactions_zero_every_balance(balances):
    transactions = optimize(balances)
    assert all(abs(v) <= D("0.01") for v in apply(balances, transactions).values())
    assert all(t.amount > 0 for t in transactions)
    assert all(t.amount == t.amount.quantize(D("0.01")) for t in transactions)


@pytest.mark.parametrize("balances", BALANCED_MAPS)
def test_transaction_count_bound(balances):
    creditors, debtors = sides(balances)
    assert len(optimize(balances)) <= max(0, creditors + debtors - 1)


@pytest.mark.parametrize("balances", BALANCED_MAPS)
def test_optimize_is_deterministic(balances):
    assert optimize(balances) == optimize(balances)


def test_greedy_is_a_heuristic_not_exact():
    # B<-D 3, A<-C 5, A<-E 2 would need only three transactions
    balances = {"A": D("7"), "B": D("3"), "C": D("-5"), "D": D("-3"), "E": D("-2")}
    assert optimize(balances) == [
        ProposedTransaction("C", "A", D("5.00")),
        ProposedTransaction("D", "A", D("2.00")),
        ProposedTransaction("D", "B", D("1.00")),
        ProposedTransaction("E", "B", D("2.00")),
    ]


def test_ties_broken_by_participant_id():
    forward = {"A": D("10"), "B": D("10"), "C": D("-10"), "D": D("-10")}
    backward = dict(reversed(list(forward.items())))
    expected = [
        ProposedTransaction("C", "A", D("10.00")),
        ProposedTransaction("D", "B", D("10.00")),
    ]
    assert optimize(forward) == expected
    assert optimize(backward) == expected


def test_dust_participants_never_appear():
    balances = {"A": D("10.00"), "B": D("-10.00"), "C": D("0.01"), "D": D("-0.01")}
    transactions = optimize(balances)
    assert transactions == [ProposedTransaction("B", "A", D("10.00"))]
    involved = {t.from_participant for t in transactions} | {t.to_participant for t in transactions}
    assert not involved & {"C", "D"}


def test_one_cent_leftover_is_tolerated():
    assert optimize({"A": D("10.01"), "B": D("-10.00")}) == [
        ProposedTransaction("B", "A", D("10.00")),
    ]


def test_accepts_plain_numbers():
    assert optimize({"A": 50.0, "B": "-50"}) == [ProposedTransaction("B", "A", D("50.00"))]


def test_only_creditors_is_unbalanced():
    with pytest.raises(UnbalancedInputError) as exc:
        optimize({"A": D("5.00"), "B": D("2.50")})
    assert exc.value.side == "creditor"
    assert exc.value.residual == D("7.50")


def test_only_debtors_is_unbalanced():
    with pytest.raises(UnbalancedInputError) as exc:
        optimize({"A": D("-5.00")})
    assert exc.value.side == "debtor"


def test_partial_mismatch_is_unbalanced():
    with pytest.raises(UnbalancedInputError) as exc:
        optimize({"A": D("50.00"), "B": D("-20.00")})
    assert exc.value.residual == D("30.00")
    assert "could not be reconciled" in str(exc.value)


def test_settle_up_plan():
    obligation = Obligation(
        payer="A",
        total_amount=D("90.00"),
        splits=[Split("A", D("30.00")), Split("B", D("30.00")), Split("C", D("30.00"))],
    )
    plan = settle_up([obligation], [])

    assert plan.balances == {"A": D("60.00"), "B": D("-30.00"), "C": D("-30.00")}
    assert plan.transactions == [
        ProposedTransaction("B", "A", D("30.00")),
        ProposedTransaction("C", "A", D("30.00")),
    ]
    assert plan.transaction_count == 2
    assert plan.total_amount == D("60.00")


def test_paying_a_proposal_feeds_the_next_plan():
    obligation = Obligation(
        payer="A",
        total_amount=D("90.00"),
        splits=[Split("A", D("30.00")), Split("B", D("30.00")), Split("C", D("30.00"))],
    )
    first = settle_up([obligation])
    paid = first.transactions[0]
    second = settle_up([obligation], [Transfer(paid.from_participant, paid.to_participant, paid.amount)])

    assert second.transactions == [ProposedTransaction("C", "A", D("30.00"))]
    assert second.total_amount == D("30.00")


def test_stray_cents_are_carried_not_dropped():
    balances = {"A": D("1.00"), "B": D("1.00"), "C": D("1.00"),
                "D": D("-1.01"), "E": D("-1.01"), "F": D("-0.98")}
    assert optimize(balances) == [
        ProposedTransaction("D", "A", D("1.00")),
        ProposedTransaction("D", "B", D("0.01")),
        ProposedTransaction("E", "B", D("0.99")),
        ProposedTransaction("E", "C", D("0.02")),
        ProposedTransaction("F", "C", D("0.98")),
    ]


def test_settle_up_with_one_cent_splits():
    obligations = [
        Obligation(payer="A", total_amount=D("1.00"), splits=[Split("D", D("1.00"))]),
        Obligation(payer="B", total_amount=D("1.00"), splits=[Split("E", D("1.00"))]),
        Obligation(payer="C", total_amount=D("1.00"),
                   splits=[Split("F", D("0.98")), Split("D", D("0.01")), Split("E", D("0.01"))]),
    ]
    plan = settle_up(obligations)

    assert plan.transaction_count == 5
    assert plan.total_amount == D("3.00")
    assert all(v == 0 for v in apply(plan.balances, plan.transactions).values())


def random_balanced_map(rng, size):
    while True:
        cents = [rng.choice([-1, 1]) * rng.randint(2, 50000) for _ in range(size - 1)]
        last = -sum(cents)
        if abs(last) > 1:
            break
    cents.append(last)
    return {f"p{i}": D(c) / 100 for i, c in enumerate(cents)}


@pytest.mark.parametrize("seed", range(50))
def test_random_balanced_maps_settle_completely(seed):
    rng = random.Random(seed)
    balances = random_balanced_map(rng, rng.randint(2, 12))

    transactions = optimize(balances)

    assert all(v == 0 for v in apply(balances, transactions).values())
    creditors, debtors = sides(balances)
    assert len(transactions) <= creditors + debtors - 1
