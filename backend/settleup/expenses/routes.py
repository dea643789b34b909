"""Expense routes: split calculation and validation."""

from flask import Blueprint, request, jsonify

from settleup.errors import InvariantViolation
from settleup.expenses.services import build_splits, validate_splits
from settleup.utils.enums import SplitType
from settleup.utils.money import to_json_number
from settleup.utils.validators import parse_amount, parse_obligation, require_keys

expenses_bp = Blueprint("expenses", __name__)


def _split_rows(splits):
    return [
        {"participant": s.participant, "amount": to_json_number(s.owed)}
        for s in splits
    ]


@expenses_bp.route("/split", methods=["POST"])
def calculate_split():
    """
    Build splits for an expense amount.

    Request body:
    {
        "amount": 100.00,
        "split_type": "equal|weighted|percentage|exact",  // default: equal
        "participants": [1, 2, 3],  // equal splits
        "split_details": {...}      // {participant: weight|percentage|amount}
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        require_keys(data, "amount")
        amount = parse_amount(data["amount"])
        split_type = SplitType(data.get("split_type", SplitType.EQUAL.value))
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    if amount <= 0:
        return jsonify({"success": False, "error": "Invalid amount"}), 400

    participants = data.get("participants") or []
    split_details = data.get("split_details") or {}
    if not isinstance(participants, list) or not isinstance(split_details, dict):
        return jsonify({"success": False, "error": "Invalid split details"}), 400

    try:
        splits, error = build_splits(split_type, amount, participants, split_details)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    if error:
        return jsonify({"success": False, "error": error}), 400

    return jsonify({
        "success": True,
        "data": {"split_type": split_type.value, "splits": _split_rows(splits)}
    })


@expenses_bp.route("/validate", methods=["POST"])
def validate_expense():
    """Check that an obligation's splits sum to its amount."""
    try:
        obligation = parse_obligation(request.get_json(silent=True))
        validate_splits(obligation)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except InvariantViolation as e:
        return jsonify({"success": False, "error": str(e)}), 422

    return jsonify({"success": True, "data": {"valid": True}})
