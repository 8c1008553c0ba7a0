import os
from decimal import Decimal

# Tests drive the publisher by hand; keep the lifespan from starting it.
os.environ.setdefault("OUTBOX_PUBLISHER_ENABLED", "false")

import pytest
from sqlmodel import Session, SQLModel, select

from ..core.db import create_engine_for_url
from ..models import AccountModel, OutboxEventModel
from ..services import AccountLedger


@pytest.fixture
def engine(tmp_path):
    test_db = tmp_path / "test.db"
    engine = create_engine_for_url(f"sqlite:///{test_db}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def open_account(engine):
    def _open(balance: str) -> int:
        with Session(engine) as session:
            account = AccountLedger(session).open_account(Decimal(balance))
            session.commit()
            return account.id

    return _open


def stored_balance(engine, account_id: int) -> Decimal:
    with Session(engine) as session:
        return session.get(AccountModel, account_id).balance


def outbox_events(engine) -> list[OutboxEventModel]:
    with Session(engine, expire_on_commit=False) as session:
        stmt = select(OutboxEventModel).order_by(OutboxEventModel.id)
        return list(session.exec(stmt))
