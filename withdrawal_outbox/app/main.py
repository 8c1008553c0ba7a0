import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from .api.exceptions import register_exception_handlers
from .api.routes import bank_router, router as accounts_router
from .core.config import get_settings
from .core.db import init_db, new_session
from .core.dependencies import get_outbox
from .models import HealthResponse
from .services import EventOutbox, OutboxPublisher, build_channel

settings = get_settings()
logging.basicConfig(level=settings.log_level)

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    publisher = OutboxPublisher(
        new_session,
        build_channel(settings),
        page_size=settings.publish_page_size,
        interval_seconds=settings.publish_interval_seconds,
    )
    app.state.publisher = publisher
    if settings.publisher_enabled:
        await publisher.start()
    try:
        yield
    finally:
        await publisher.stop()

app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.include_router(accounts_router)
app.include_router(bank_router)
register_exception_handlers(app)

@app.get("/health", response_model=HealthResponse)
def read_health(outbox: EventOutbox = Depends(get_outbox)) -> HealthResponse:
    return HealthResponse(status="ok", pending_events=outbox.count_undelivered())
