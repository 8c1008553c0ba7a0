from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import literal, update
from sqlmodel import Session

from ..models import AccountModel, Money, has_cent_precision


logger = logging.getLogger(__name__)


class DecrementOutcome(str, Enum):
    DECREMENTED = "DECREMENTED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"


@dataclass(frozen=True)
class DecrementResult:
    outcome: DecrementOutcome
    # Set only when the row changed; read back by the same statement.
    balance_after: Optional[Decimal] = None

    @property
    def decremented(self) -> bool:
        return self.outcome is DecrementOutcome.DECREMENTED


class AccountLedger:
    """Owns account balances.

    Balances only ever go down through :meth:`conditional_decrement`, which
    checks and writes in one statement so concurrent withdrawals against the
    same account are serialized by the database, not by this process.
    Nothing here commits; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def open_account(self, balance: Decimal) -> AccountModel:
        if not has_cent_precision(balance):
            raise ValueError("Opening balance must be a whole number of cents")
        if balance < 0:
            raise ValueError("Opening balance cannot be negative")
        account = AccountModel(balance=balance)
        self.session.add(account)
        self.session.flush()
        self.session.refresh(account)
        return account

    def get_account(self, account_id: int) -> Optional[AccountModel]:
        return self.session.get(AccountModel, account_id)

    def conditional_decrement(self, account_id: int, amount: Decimal) -> DecrementResult:
        if not has_cent_precision(amount):
            raise ValueError("Decrement amount must be a whole number of cents")
        if amount <= 0:
            raise ValueError("Decrement amount must be positive")

        # Compared and subtracted as integer cents in SQL.
        cents = literal(amount, Money())
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .where(AccountModel.balance >= cents)
            .values(balance=AccountModel.balance - cents)
            .returning(AccountModel.balance)
        )
        row = self.session.connection().execute(stmt).first()

        if row is None:
            if self.session.get(AccountModel, account_id) is None:
                return DecrementResult(DecrementOutcome.ACCOUNT_NOT_FOUND)
            return DecrementResult(DecrementOutcome.INSUFFICIENT_BALANCE)

        # The UPDATE bypassed the identity map; drop any cached copy.
        key = Session.identity_key(AccountModel, account_id)
        cached = self.session.identity_map.get(key)
        if cached is not None:
            self.session.expire(cached)

        logger.debug(
            "ledger.decremented",
            extra={"account_id": account_id, "amount": str(amount)},
        )
        return DecrementResult(DecrementOutcome.DECREMENTED, balance_after=row[0])
