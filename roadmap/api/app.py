"""FastAPI web application for the roadmap timeline scheduler."""

import logging
from datetime import date
from typing import Optional
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from roadmap.database.database import get_db
from roadmap.engine.errors import SchedulingError
from roadmap.engine.timeline import TimelineLayout
from roadmap.models.constants import DEFAULT_TIMEFRAME
from roadmap.models.dates import normalize_date
from roadmap.models.schedule_requests import (
    BlockCreateRequest,
    BlockCreateResponse,
    ConflictCheckResponse,
    MoveCheckRequest,
    MoveCommitRequest,
    MoveCommitResponse,
    ScheduleSnapshot,
)
from roadmap.scheduling.moves import check_move, commit_move
from roadmap.scheduling.placement import add_block, delete_block
from roadmap.scheduling.snapshot import load_snapshot, load_timeline

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Roadmap Scheduler API",
    description="Business-day timeline of engineer, squad and initiative work with conflict-aware moves",
    version="0.1.0"
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    """Malformed requests (bad dates, inverted ranges) are client errors: 400."""
    messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": messages})


def _http_error(e: SchedulingError) -> HTTPException:
    """Map a scheduler error to its HTTP status; details ride along in the body."""
    detail = {"message": e.message, **e.details} if e.details else e.message
    return HTTPException(status_code=e.status_code, detail=detail)


def _parse_date(value: Optional[str], name: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return normalize_date(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value!r}")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/schedule/move/check", response_model=ConflictCheckResponse)
async def move_check(request: MoveCheckRequest, db: Session = Depends(get_db)):
    """Phase 1: report blocks the move would overlap. Nothing is written."""
    try:
        return check_move(db, request)
    except SchedulingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Conflict check failed for block {request.block_id}: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to check move: {str(e)}")


@app.post("/schedule/move", response_model=MoveCommitResponse)
async def move_commit(request: MoveCommitRequest, db: Session = Depends(get_db)):
    """Phase 2: commit a move with resolution none, stack or push."""
    try:
        return commit_move(db, request)
    except SchedulingError as e:
        logger.warning(f"Move of block {request.block_id} rejected: {e.message}")
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Move of block {request.block_id} failed: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to move block: {str(e)}")


@app.post("/schedule/add", response_model=BlockCreateResponse, status_code=201)
async def schedule_add(request: BlockCreateRequest, db: Session = Depends(get_db)):
    """Schedule an initiative (existing, or 'new') on an engineer or squad."""
    try:
        return add_block(db, request)
    except SchedulingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Failed to schedule initiative {request.initiative_id}: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to schedule block: {str(e)}")


@app.delete("/schedule/{block_id}")
async def schedule_delete(block_id: str, db: Session = Depends(get_db)):
    """Remove a scheduled block."""
    try:
        delete_block(db, block_id)
    except SchedulingError as e:
        raise _http_error(e)
    return {"success": True, "deleted_block": block_id}


@app.get("/schedule", response_model=ScheduleSnapshot)
async def view_schedule(
    start: str = Query(..., description="Window start (YYYY-MM-DD)"),
    end: str = Query(..., description="Window end (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    """Blocks, time off, initiatives, engineers and squads for a date window."""
    try:
        return load_snapshot(db, _parse_date(start, "start"), _parse_date(end, "end"))
    except SchedulingError as e:
        raise _http_error(e)


@app.get("/timeline", response_model=TimelineLayout)
async def view_timeline(
    view: str = Query("engineers", description="engineers, squads or initiatives"),
    timeframe: str = Query(DEFAULT_TIMEFRAME, description="month, quarter, half or year"),
    anchor: Optional[str] = Query(None, description="Any date inside the period (default: today)"),
    today: Optional[str] = Query(None, description="Date of the today marker (default: today)"),
    db: Session = Depends(get_db),
):
    """Laid-out timeline: business-day columns, swimlanes, lanes and pixel spans."""
    current = _parse_date(today, "today") or date.today()
    try:
        return load_timeline(
            db,
            view,
            _parse_date(anchor, "anchor") or current,
            timeframe=timeframe,
            today=current,
        )
    except SchedulingError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
