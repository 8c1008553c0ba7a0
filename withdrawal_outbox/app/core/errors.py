"""Outcomes of a withdrawal attempt.

Expected failures are returned, not raised. Callers match on the variant.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class WithdrawalSucceeded:
    request_id: str
    account_id: int
    balance: Decimal


@dataclass(frozen=True)
class AccountNotFound:
    """The account id is missing from the ledger."""

    request_id: str
    account_id: int

    @property
    def message(self) -> str:
        return f"Account {self.account_id} not found"


@dataclass(frozen=True)
class InsufficientFunds:
    """The withdrawal would drop the balance below zero."""

    request_id: str
    account_id: int
    balance: Decimal
    amount: Decimal

    @property
    def message(self) -> str:
        return (
            f"Insufficient funds for withdrawal, account {self.account_id}, "
            f"balance {self.balance}, amount {self.amount}"
        )


@dataclass(frozen=True)
class InvalidInput:
    """Rejected before reaching the ledger."""

    request_id: str
    reason: str

    @property
    def message(self) -> str:
        return self.reason


WithdrawalFailure = Union[AccountNotFound, InsufficientFunds, InvalidInput]
WithdrawalOutcome = Union[WithdrawalSucceeded, WithdrawalFailure]
