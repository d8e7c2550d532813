"""
Chat endpoint.

Runs the conversation through the orchestration loop and returns the final
assistant message with per-request stats (and optionally the event trace).
"""

import logging

from fastapi import APIRouter, Depends

from ...session import ChatSession, new_execution_id
from ..dependencies import get_session
from ..schemas import ChatRequest, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Chat",
    description=(
        "Process a conversation with the travel concierge. The model may call "
        "any number of tools before answering, bounded by the iteration budget."
    ),
)
async def chat(
    request: ChatRequest,
    session: ChatSession = Depends(get_session),
) -> ChatResponse:
    """
    Run one chat request.

    Model backend failures and an exhausted iteration budget still return
    200 with an apologetic assistant message and ``error: true``.
    """
    execution_id = new_execution_id()
    logger.debug(f"[{execution_id}] Received chat request: {request.model_dump_json()[:1000]}")

    outcome = await session.chat(
        [message.to_message() for message in request.messages],
        execution_id=execution_id,
    )

    return ChatResponse(
        success=True,
        response=outcome.response(),
        stats=outcome.stats(),
        trace=[entry.to_dict() for entry in outcome.trace] if request.include_trace else None,
    )
