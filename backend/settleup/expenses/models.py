"""Expense models."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Union

ParticipantId = Union[int, str]


@dataclass(frozen=True)
class Participant:
    id: ParticipantId
    name: str = ""


@dataclass(frozen=True)
class Split:
    """Portion of an obligation owed by one participant."""
    participant: ParticipantId
    owed: Decimal


@dataclass(frozen=True)
class Obligation:
    """A shared expense: one payer, several participants owing a portion."""
    payer: ParticipantId
    total_amount: Decimal
    splits: List[Split] = field(default_factory=list)
    id: Optional[Union[int, str]] = None
    description: str = ""
    category: str = "other"
