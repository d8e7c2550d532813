"""Session statistics endpoints."""

from fastapi import APIRouter, Depends

from ...session import ChatSession
from ..dependencies import get_session
from ..schemas import ResetResponse, SessionStatsResponse

router = APIRouter()


@router.get("/api/stats", response_model=SessionStatsResponse, summary="Session statistics")
def get_stats(session: ChatSession = Depends(get_session)) -> SessionStatsResponse:
    return SessionStatsResponse(**session.stats())


@router.post("/api/session/reset", response_model=ResetResponse, summary="Reset session")
def reset_session(session: ChatSession = Depends(get_session)) -> ResetResponse:
    """Zero the session statistics and every tool usage counter."""
    session.reset()
    return ResetResponse(stats=session.stats())
