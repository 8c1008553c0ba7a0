from __future__ import annotations
from datetime import datetime, UTC
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlalchemy import BigInteger, Column, Index
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

CENT = Decimal("0.01")


def has_cent_precision(value: Decimal) -> bool:
    """True for finite amounts with no fraction of a cent."""
    return value.is_finite() and value == value.quantize(CENT)


class Money(TypeDecorator):
    """Decimal in Python, integer minor units (cents) in the database."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        if not has_cent_precision(value):
            raise ValueError(f"{value} is not a whole number of cents")
        return int(value.scaleb(2))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(value) / 100).quantize(CENT)


class EventKind(str, Enum):
    WITHDRAWAL = "WITHDRAWAL"


class Account(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    balance: Decimal = Field(sa_column=Column(Money(), nullable=False))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class OutboxEvent(SQLModel, table=True):
    __tablename__ = "outbox_event"
    __table_args__ = (
        Index("ix_outbox_event_pending", "delivered_at", "created_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    payload: str
    kind: EventKind
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    delivered_at: Optional[datetime] = None
