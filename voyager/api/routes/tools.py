"""
Tool server endpoints: protocol initialization, handshake and tool listing.
"""

import logging

from fastapi import APIRouter, Depends

from ...session import ChatSession
from ..dependencies import get_session
from ..schemas import ToolListResponse, ToolStatsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/mcp/init",
    summary="Initialize protocol session",
    description="Emit the session initialization trace entries and return the handshake.",
)
def init_protocol_session(session: ChatSession = Depends(get_session)) -> dict:
    return {"success": True, **session.initialize()}


@router.get(
    "/api/mcp/handshake",
    summary="Protocol handshake",
    description="Simulated initialize → initialized → tools/list exchange.",
)
def get_handshake(session: ChatSession = Depends(get_session)) -> dict:
    return session.handshake()


@router.get("/api/tools", response_model=ToolListResponse, summary="List tools")
def list_tools(session: ChatSession = Depends(get_session)) -> ToolListResponse:
    return ToolListResponse(tools=session.list_tools())


@router.get("/api/tools/stats", response_model=ToolStatsResponse, summary="Tool usage")
def tool_stats(session: ChatSession = Depends(get_session)) -> ToolStatsResponse:
    return ToolStatsResponse(stats=session.tool_stats())
