from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlmodel import Session

from ..core.errors import (
    AccountNotFound,
    InsufficientFunds,
    InvalidInput,
    WithdrawalOutcome,
    WithdrawalSucceeded,
)
from ..models import EventKind, WithdrawalEvent, has_cent_precision
from .ledger import AccountLedger, DecrementOutcome
from .outbox import EventOutbox


logger = logging.getLogger(__name__)


class WithdrawalCoordinator:
    """Withdraws from an account and records the event in the outbox.

    The decrement and the outbox insert share one session transaction: they
    commit together or not at all. Failures the caller can act on come back
    as outcome values; anything else rolls back and propagates.
    """

    def __init__(
        self,
        session: Session,
        ledger: Optional[AccountLedger] = None,
        outbox: Optional[EventOutbox] = None,
    ) -> None:
        self.session = session
        self.ledger = ledger or AccountLedger(session)
        self.outbox = outbox or EventOutbox(session)

    def withdraw(self, account_id: int, amount: Decimal) -> WithdrawalOutcome:
        request_id = str(uuid4())
        log_extra = {
            "request_id": request_id,
            "account_id": account_id,
            "amount": str(amount),
        }

        if account_id <= 0:
            return self._reject(InvalidInput(request_id, "accountId must be positive"))
        if not has_cent_precision(amount):
            return self._reject(
                InvalidInput(request_id, "amount must be a whole number of cents")
            )
        if amount <= 0:
            return self._reject(InvalidInput(request_id, "amount must be greater than zero"))

        try:
            # Read for reporting only; the decrement alone decides.
            account = self.ledger.get_account(account_id)
            if account is None:
                self.session.rollback()
                return self._reject(AccountNotFound(request_id, account_id))
            observed_balance = account.balance

            result = self.ledger.conditional_decrement(account_id, amount)
            if result.outcome is DecrementOutcome.ACCOUNT_NOT_FOUND:
                self.session.rollback()
                return self._reject(AccountNotFound(request_id, account_id))
            if result.outcome is DecrementOutcome.INSUFFICIENT_BALANCE:
                self.session.rollback()
                return self._reject(
                    InsufficientFunds(request_id, account_id, observed_balance, amount)
                )

            balance_after = result.balance_after
            event = WithdrawalEvent(
                request_id=request_id,
                account_id=account_id,
                amount=amount,
                balance_before=balance_after + amount,
                balance_after=balance_after,
            )
            event_id = self.outbox.append(EventKind.WITHDRAWAL, event.to_json())
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception("withdrawal.rolled_back", extra=log_extra)
            raise

        logger.info(
            "withdrawal.completed",
            extra={**log_extra, "event_id": event_id, "balance": str(balance_after)},
        )
        return WithdrawalSucceeded(request_id, account_id, balance_after)

    def _reject(self, failure):
        logger.info(
            "withdrawal.rejected",
            extra={
                "request_id": failure.request_id,
                "reason": type(failure).__name__,
                "detail": failure.message,
            },
        )
        return failure
