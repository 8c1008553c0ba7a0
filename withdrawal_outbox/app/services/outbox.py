from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import and_, func, or_, update
from sqlmodel import Session, select

from ..models import EventKind, OutboxEventModel


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboxCursor:
    """Position of the last event seen while paging."""

    created_at: datetime
    id: int

    @classmethod
    def after(cls, event: OutboxEventModel) -> "OutboxCursor":
        return cls(created_at=event.created_at, id=event.id)


class EventOutbox:
    """Durable store of domain events waiting to be published.

    ``append`` only flushes, so the insert commits or rolls back with
    whatever else the session is doing. ``mark_delivered`` commits on its
    own because it runs in the publisher, outside any business transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def append(self, kind: EventKind, payload: str) -> int:
        event = OutboxEventModel(kind=kind, payload=payload)
        self.session.add(event)
        self.session.flush()
        return event.id

    def get(self, event_id: int) -> Optional[OutboxEventModel]:
        return self.session.get(OutboxEventModel, event_id)

    def page_undelivered(
        self,
        page_size: int,
        after: Optional[OutboxCursor] = None,
    ) -> list[OutboxEventModel]:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        stmt = select(OutboxEventModel).where(OutboxEventModel.delivered_at.is_(None))
        if after is not None:
            stmt = stmt.where(
                or_(
                    OutboxEventModel.created_at > after.created_at,
                    and_(
                        OutboxEventModel.created_at == after.created_at,
                        OutboxEventModel.id > after.id,
                    ),
                )
            )
        stmt = stmt.order_by(
            OutboxEventModel.created_at.asc(), OutboxEventModel.id.asc()
        ).limit(page_size)
        return list(self.session.exec(stmt))

    def mark_delivered(self, event_id: int) -> bool:
        stmt = (
            update(OutboxEventModel)
            .where(OutboxEventModel.id == event_id)
            .where(OutboxEventModel.delivered_at.is_(None))
            .values(delivered_at=datetime.now(UTC))
        )
        changed = self.session.connection().execute(stmt).rowcount > 0
        self.session.commit()

        key = Session.identity_key(OutboxEventModel, event_id)
        cached = self.session.identity_map.get(key)
        if cached is not None:
            self.session.expire(cached)

        if not changed:
            logger.debug("outbox.already_delivered", extra={"event_id": event_id})
        return changed

    def count_undelivered(self) -> int:
        stmt = select(func.count()).select_from(OutboxEventModel).where(
            OutboxEventModel.delivered_at.is_(None)
        )
        return self.session.exec(stmt).one()
