from fastapi import Depends
from sqlmodel import Session

from ..services import AccountLedger, EventOutbox, WithdrawalCoordinator
from .db import get_session

def get_ledger(session: Session = Depends(get_session)) -> AccountLedger:
    return AccountLedger(session)

def get_outbox(session: Session = Depends(get_session)) -> EventOutbox:
    return EventOutbox(session)

def get_withdrawal_coordinator(session: Session = Depends(get_session)) -> WithdrawalCoordinator:
    return WithdrawalCoordinator(session, AccountLedger(session), EventOutbox(session))
