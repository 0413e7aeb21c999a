"""
Session management API endpoints.

This module exposes the Core -> Renderer contract over HTTP: creating a
play session, visiting addresses and firing actions. Sessions live in
memory only; nothing is persisted.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from casebook.api.dependencies import get_repository, require_loaded
from casebook.config import settings
from casebook.data.loader import CaseRepository
from casebook.engine.directory import DistrictGroup
from casebook.engine.session import GameSession
from casebook.engine.summary import CaseSummaryReport
from casebook.schemas.render import ErrorKind, RenderResult, StateSnapshot
from casebook.utils.logger import get_logger

# Set up logging
logger = get_logger(__name__)

router = APIRouter()

# In-memory session registry
sessions_db: Dict[str, GameSession] = {}

ERROR_STATUS = {
    ErrorKind.DATA_MISSING: 404,
    ErrorKind.LOCATION_LOCKED: 409,
    ErrorKind.INVALID_CHOICE_REPEAT: 409,
    ErrorKind.HINT_UNAVAILABLE: 409,
    ErrorKind.NOT_LOADED: 503,
}


class SessionCreateResponse(BaseModel):
    """Response from session creation"""

    id: str
    render: RenderResult


class VisitRequest(BaseModel):
    """Request to navigate to an address"""

    address: str = Field(..., min_length=1, description="Location address, e.g. '22 NW'")


class ActRequest(BaseModel):
    """Request to fire a currently offered action"""

    action_id: str = Field(..., min_length=1)


def _get_session(session_id: str) -> GameSession:
    session = sessions_db.get(session_id)
    if session is None:
        logger.error(f"✗ Session not found: {session_id}")
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _respond(result: RenderResult):
    """Render results are returned as-is; errors keep the body and set a status"""
    if result.error is None:
        return result
    return JSONResponse(
        status_code=ERROR_STATUS.get(result.error.kind, 400),
        content=result.model_dump(mode="json"),
    )


@router.post("/", response_model=SessionCreateResponse)
async def create_session(repo: CaseRepository = Depends(get_repository)):
    """
    Create a new play session positioned at the case introduction.

    Raises:
        HTTPException 503: Case data not loaded
    """
    require_loaded(repo)

    session = GameSession(repo, settings)
    sessions_db[session.id] = session
    logger.info(f"✓ Session created: {session.id}")
    logger.debug(f"Total sessions: {len(sessions_db)}")

    return SessionCreateResponse(id=session.id, render=session.introduction())


@router.get("/{session_id}", response_model=StateSnapshot)
async def get_session(session_id: str):
    """Return a read-only snapshot of the session's state"""
    return _get_session(session_id).snapshot()


@router.delete("/{session_id}")
async def delete_session(session_id: str):
    """Discard a session"""
    _get_session(session_id)
    del sessions_db[session_id]
    logger.info(f"Session deleted: {session_id}")
    return {"message": "Session deleted", "id": session_id}


@router.post("/{session_id}/visit", response_model=RenderResult)
async def visit_location(session_id: str, request: VisitRequest):
    """
    Navigate to an address.

    Returns 404 when the address has no data and 409 when it is locked;
    the body is always a RenderResult carrying the error.
    """
    session = _get_session(session_id)
    logger.info(f"[API] Session {session_id[:8]} visiting {request.address}")
    return _respond(session.visit(request.address))


@router.post("/{session_id}/act", response_model=RenderResult)
async def fire_action(session_id: str, request: ActRequest):
    """Fire one of the currently offered actions"""
    session = _get_session(session_id)
    logger.info(f"[API] Session {session_id[:8]} action {request.action_id}")
    return _respond(session.act(request.action_id))


@router.post("/{session_id}/leave", response_model=RenderResult)
async def leave_location(session_id: str):
    """Return to the case introduction"""
    return _respond(_get_session(session_id).introduction())


@router.get("/{session_id}/directory", response_model=List[DistrictGroup])
async def get_directory(session_id: str):
    """Addresses grouped by district with visited/locked markers"""
    return _get_session(session_id).directory()


@router.get("/{session_id}/summary", response_model=CaseSummaryReport)
async def get_summary(session_id: str):
    """End-of-case summary for the session's lead count"""
    return _get_session(session_id).summary()
