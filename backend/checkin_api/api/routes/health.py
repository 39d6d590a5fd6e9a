from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from checkin_api.api.deps import get_app_state
from checkin_api.schemas import HealthResponse
from checkin_api.services.state import AppState

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def liveness():
    """Liveness probe"""
    return "OK"


@router.get("/health", response_model=HealthResponse)
async def health_check(state: AppState = Depends(get_app_state)):
    """Readiness: roster loaded and which day sheets are usable"""
    snapshot = state.snapshot
    report = HealthResponse(
        status="healthy" if snapshot.ready else "starting",
        ready=snapshot.ready,
        attendees=len(snapshot.roster),
        days={name: table.is_usable for name, table in snapshot.day_tables.items()},
        built_at=snapshot.built_at.isoformat() if snapshot.built_at else None,
    )
    if not snapshot.ready:
        return JSONResponse(status_code=503, content=report.model_dump())
    return report
