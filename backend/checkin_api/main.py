import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from checkin_api.api.routes import confirm, health
from checkin_api.core.config import Settings, settings as default_settings
from checkin_api.core.errors import ConfirmationError, InvalidInput
from checkin_api.core.logging import setup_logging
from checkin_api.services.confirmation import ConfirmationService
from checkin_api.services.sheets import SheetsGateway
from checkin_api.services.state import AppState, RosterRefresher
from checkin_api.services.time_window import build_day_windows

# Setup logging
setup_logging(default_settings.LOG_LEVEL, default_settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the periodic roster refresh; requests get 503 until it first succeeds"""
    logger.info("🚀 Starting check-in service...")
    refresh_task = asyncio.create_task(app.state.refresher.run_forever())

    yield

    logger.info("👋 Shutting down...")
    refresh_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await refresh_task


async def confirmation_error_handler(request: Request, exc: ConfirmationError):
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    if request.url.path == "/confirm":
        error = InvalidInput()
        return JSONResponse(status_code=error.status_code, content=error.body())
    return await request_validation_exception_handler(request, exc)


def create_app(
    settings: Optional[Settings] = None,
    gateway=None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    settings = settings or default_settings
    days = build_day_windows(settings.EVENT_DAYS, settings.event_timezone)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Event check-in confirmation backed by a Google Sheets roster",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    state = AppState(day_names=[day.name for day in days])
    app.state.checkin_state = state
    app.state.refresher = RosterRefresher(
        state, gateway or SheetsGateway(settings), settings, days
    )
    app.state.confirmation_service = ConfirmationService(
        state, days, settings.event_timezone, clock=clock
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.ALLOWED_ORIGIN.split(",")],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(ConfirmationError, confirmation_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(confirm.router, tags=["Check-in"])

    return app


app = create_app()


def main():
    uvicorn.run(app, host="0.0.0.0", port=default_settings.PORT, reload=False)


if __name__ == "__main__":
    main()
