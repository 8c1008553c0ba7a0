from .channels import InMemoryChannel, LoggingChannel, MessageChannel, RedisStreamChannel, build_channel
from .ledger import AccountLedger, DecrementOutcome, DecrementResult
from .outbox import EventOutbox, OutboxCursor
from .publisher import OutboxPublisher, PublishReport
from .withdrawal import WithdrawalCoordinator

__all__ = [
    "AccountLedger",
    "DecrementOutcome",
    "DecrementResult",
    "EventOutbox",
    "InMemoryChannel",
    "LoggingChannel",
    "MessageChannel",
    "OutboxCursor",
    "OutboxPublisher",
    "PublishReport",
    "RedisStreamChannel",
    "WithdrawalCoordinator",
    "build_channel",
]
