from decimal import Decimal

import pytest
from sqlmodel import Session

from ..models import EventKind
from ..services import AccountLedger, EventOutbox, OutboxCursor
from .conftest import outbox_events, stored_balance


def append_events(engine, count: int) -> list[int]:
    with Session(engine) as session:
        outbox = EventOutbox(session)
        ids = [outbox.append(EventKind.WITHDRAWAL, f'{{"n": {n}}}') for n in range(count)]
        session.commit()
    return ids


def test_append_creates_pending_event(engine) -> None:
    (event_id,) = append_events(engine, 1)

    (event,) = outbox_events(engine)
    assert event.id == event_id
    assert event.kind is EventKind.WITHDRAWAL
    assert event.payload == '{"n": 0}'
    assert event.created_at is not None
    assert event.delivered_at is None


def test_append_rolls_back_with_the_ledger(engine, open_account) -> None:
    account_id = open_account("50.00")

    with Session(engine) as session:
        AccountLedger(session).conditional_decrement(account_id, Decimal("5.00"))
        EventOutbox(session).append(EventKind.WITHDRAWAL, "{}")
        session.rollback()

    assert stored_balance(engine, account_id) == Decimal("50.00")
    assert outbox_events(engine) == []


def test_page_undelivered_is_ordered_and_restartable(engine, session) -> None:
    ids = append_events(engine, 5)
    outbox = EventOutbox(session)

    first = outbox.page_undelivered(3)
    assert [e.id for e in first] == ids[:3]
    # Same call again returns the same page until something is delivered.
    assert [e.id for e in outbox.page_undelivered(3)] == ids[:3]

    rest = outbox.page_undelivered(3, after=OutboxCursor.after(first[-1]))
    assert [e.id for e in rest] == ids[3:]


def test_page_undelivered_skips_delivered_events(engine, session) -> None:
    ids = append_events(engine, 4)
    outbox = EventOutbox(session)

    outbox.mark_delivered(ids[0])
    outbox.mark_delivered(ids[2])

    assert [e.id for e in outbox.page_undelivered(10)] == [ids[1], ids[3]]
    assert outbox.count_undelivered() == 2


def test_page_size_must_be_positive(session) -> None:
    with pytest.raises(ValueError):
        EventOutbox(session).page_undelivered(0)


def test_mark_delivered_is_idempotent(engine, session) -> None:
    (event_id,) = append_events(engine, 1)
    outbox = EventOutbox(session)

    assert outbox.mark_delivered(event_id) is True
    (after_first,) = outbox_events(engine)

    assert outbox.mark_delivered(event_id) is False
    (after_second,) = outbox_events(engine)

    assert after_first.delivered_at is not None
    assert after_second.delivered_at == after_first.delivered_at
    assert after_second.payload == after_first.payload


def test_mark_delivered_refreshes_loaded_event(engine, session) -> None:
    (event_id,) = append_events(engine, 1)
    outbox = EventOutbox(session)
    event = outbox.get(event_id)
    assert event.delivered_at is None

    outbox.mark_delivered(event_id)

    assert event.delivered_at is not None
