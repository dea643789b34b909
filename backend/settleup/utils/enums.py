from enum import Enum

class TransferStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

class SplitType(str, Enum):
    EQUAL = "equal"
    WEIGHTED = "weighted"
    PERCENTAGE = "percentage"
    EXACT = "exact"

class PaymentMethod(str, Enum):
    MANUAL = "manual"
    GATEWAY = "gateway"
