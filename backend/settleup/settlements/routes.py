"""Settlement routes for Splitwise-style expense settling.

Every endpoint computes from the snapshot in the request body; nothing is
stored between requests.
"""
import logging

from flask import Blueprint, request, jsonify

from settleup.errors import InvariantViolation, UnbalancedInputError
from settleup.settlements.services import SettlementCalculator, name_map
from settleup.utils.merkle_tree import snapshot_digest
from settleup.utils.money import to_json_number
from settleup.utils.validators import parse_amount, parse_snapshot, require_keys

logger = logging.getLogger(__name__)

bp = Blueprint("settlements", __name__)


def _balance_rows(balances, names):
    return [
        {
            "participant_id": participant_id,
            "name": names.get(participant_id),
            "balance": to_json_number(balance)
        }
        for participant_id, balance in balances.items()
    ]


def _settlement_rows(transactions, names):
    return [
        {
            "from": t.from_participant,
            "from_name": names.get(t.from_participant),
            "to": t.to_participant,
            "to_name": names.get(t.to_participant),
            "amount": to_json_number(t.amount)
        }
        for t in transactions
    ]


def _error(message, status):
    return jsonify({"success": False, "error": message}), status


@bp.errorhandler(ValueError)
def handle_bad_payload(e):
    return _error(str(e), 400)


@bp.errorhandler(InvariantViolation)
def handle_invariant_violation(e):
    return _error(str(e), 422)


@bp.errorhandler(UnbalancedInputError)
def handle_unbalanced(e):
    logger.error("Settlement plan refused: %s", e)
    return _error(str(e), 422)


@bp.route("/balances", methods=["POST"])
def get_balances():
    """
    Net balance per participant.

    Request body:
    {
        "obligations": [{"payer": 1, "amount": 90.0, "splits": [...]}],
        "transfers": [{"from": 2, "to": 1, "amount": 30.0}],   // optional
        "participants": [{"id": 1, "name": "alice"}]            // optional
    }

    Positive balance = is owed money
    Negative balance = owes money
    """
    obligations, transfers, participants = parse_snapshot(request.get_json(silent=True))
    balances = SettlementCalculator.aggregate(obligations, transfers)
    return jsonify({
        "success": True,
        "data": {"balances": _balance_rows(balances, name_map(participants))}
    })


@bp.route("/optimize", methods=["POST"])
def optimize_balances():
    """
    Propose transactions for a ready-made balance map.

    Request body: {"balances": {"1": 50.0, "2": -20.0, "3": -30.0}}
    """
    data = request.get_json(silent=True) or {}
    require_keys(data, "balances")
    if not isinstance(data["balances"], dict):
        raise ValueError("'balances' must be an object")

    balances = {
        participant_id: parse_amount(amount, "balance", allow_negative=True)
        for participant_id, amount in data["balances"].items()
    }
    transactions = SettlementCalculator.optimize(balances)
    total = sum(t.amount for t in transactions)
    return jsonify({
        "success": True,
        "data": {
            "settlements": _settlement_rows(transactions, {}),
            "transaction_count": len(transactions),
            "total_amount": to_json_number(total)
        }
    })


@bp.route("/plan", methods=["POST"])
def get_plan():
    """
    Balances plus the transactions that settle them.

    Returns:
    {
        "balances": [{"participant_id": 1, "name": "alice", "balance": 60.0}],
        "settlements": [{"from": 2, "to": 1, "amount": 30.0, ...}],
        "transaction_count": 2,
        "total_amount": 60.0,
        "snapshot": "<sha256>"
    }
    """
    obligations, transfers, participants = parse_snapshot(request.get_json(silent=True))
    names = name_map(participants)
    plan = SettlementCalculator.settle_up(obligations, transfers)
    return jsonify({
        "success": True,
        "data": {
            "balances": _balance_rows(plan.balances, names),
            "settlements": _settlement_rows(plan.transactions, names),
            "transaction_count": plan.transaction_count,
            "total_amount": to_json_number(plan.total_amount),
            "snapshot": snapshot_digest(obligations, transfers)
        }
    })


@bp.route("/summary", methods=["POST"])
def get_summary():
    """Paid, owed and transferred totals per participant."""
    obligations, transfers, participants = parse_snapshot(request.get_json(silent=True))
    names = name_map(participants)
    summary = SettlementCalculator.summarize(obligations, transfers)
    return jsonify({
        "success": True,
        "data": {
            "participants": [
                {
                    "participant_id": participant_id,
                    "name": names.get(participant_id),
                    "total_paid": to_json_number(s.total_paid),
                    "total_share": to_json_number(s.total_share),
                    "transfers_sent": to_json_number(s.transfers_sent),
                    "transfers_received": to_json_number(s.transfers_received),
                    "net": to_json_number(s.net)
                }
                for participant_id, s in summary.items()
            ]
        }
    })
