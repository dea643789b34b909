"""Request payload validators and parsers."""
from typing import Any, Dict, List, Optional

from settleup.expenses.models import Obligation, Participant, Split
from settleup.settlements.models import Transfer
from settleup.utils.enums import PaymentMethod, TransferStatus
from settleup.utils.money import to_decimal


def require_keys(payload, *keys):
    missing = [k for k in keys if k not in (payload or {})]
    if missing:
        raise ValueError(f"missing keys: {missing}")
    return True


def require_list(payload: Dict[str, Any], key: str, required: bool = True) -> List[Any]:
    if key not in payload:
        if required:
            raise ValueError(f"missing keys: {[key]}")
        return []
    value = payload[key]
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list")
    return value


def parse_amount(value: Any, field: str = "amount", allow_negative: bool = False):
    try:
        amount = to_decimal(value)
    except ValueError:
        raise ValueError(f"Invalid {field}: {value!r}") from None
    if not allow_negative and amount < 0:
        raise ValueError(f"Invalid {field}: must not be negative")
    return amount


def parse_participant(data: Dict[str, Any]) -> Participant:
    require_keys(data, "id")
    return Participant(id=data["id"], name=data.get("name") or "")


def parse_obligation(data: Dict[str, Any]) -> Obligation:
    """
    Build an Obligation from a request dict.

    {"id": 1, "payer": 1, "amount": 90.0,
     "splits": [{"participant": 1, "amount": 30.0}, ...]}
    """
    if not isinstance(data, dict):
        raise ValueError("Each obligation must be an object")
    require_keys(data, "payer", "amount", "splits")
    splits = []
    for split in require_list(data, "splits"):
        if not isinstance(split, dict):
            raise ValueError("Each split must be an object")
        require_keys(split, "participant", "amount")
        splits.append(Split(
            participant=split["participant"],
            owed=parse_amount(split["amount"], "split amount")
        ))
    return Obligation(
        id=data.get("id"),
        payer=data["payer"],
        total_amount=parse_amount(data["amount"]),
        splits=splits,
        description=data.get("description") or "",
        category=data.get("category") or "other"
    )


def parse_transfer(data: Dict[str, Any]) -> Transfer:
    if not isinstance(data, dict):
        raise ValueError("Each transfer must be an object")
    require_keys(data, "from", "to", "amount")
    try:
        status = TransferStatus(data.get("status", TransferStatus.COMPLETED.value))
        method = PaymentMethod(data.get("payment_method", PaymentMethod.MANUAL.value))
    except ValueError as e:
        raise ValueError(f"Invalid transfer: {e}") from None
    return Transfer(
        from_participant=data["from"],
        to_participant=data["to"],
        amount=parse_amount(data["amount"]),
        status=status,
        payment_method=method
    )


def parse_snapshot(payload: Optional[Dict[str, Any]]):
    """Return (obligations, transfers, participants) from a request body."""
    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    obligations = [parse_obligation(o) for o in require_list(payload, "obligations")]
    transfers = [parse_transfer(t) for t in require_list(payload, "transfers", required=False)]
    participants = [
        parse_participant(p) for p in require_list(payload, "participants", required=False)
    ]
    return obligations, transfers, participants
