"""Health check endpoint."""

from fastapi import APIRouter, Depends

from ...session import ChatSession
from ..dependencies import get_session

router = APIRouter()


@router.get(
    "/api/health",
    summary="Health check",
    description="Server status, model backend reachability and tool server info.",
)
async def health_check(session: ChatSession = Depends(get_session)) -> dict:
    """Return health status of the server and the model backend."""
    return await session.health()
