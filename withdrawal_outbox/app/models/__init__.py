from .db import Account as AccountModel
from .db import EventKind, Money, has_cent_precision
from .db import OutboxEvent as OutboxEventModel
from .schemas import (
    AccountCreate,
    AccountResponse,
    ErrorResponse,
    HealthResponse,
    WithdrawalEvent,
    WithdrawalRequest,
    WithdrawalResponse,
)

__all__ = [
    "AccountCreate",
    "AccountResponse",
    "ErrorResponse",
    "HealthResponse",
    "WithdrawalEvent",
    "WithdrawalRequest",
    "WithdrawalResponse",
    "AccountModel",
    "EventKind",
    "Money",
    "has_cent_precision",
    "OutboxEventModel",
]
