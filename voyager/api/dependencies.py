"""Request dependencies shared by the routers."""

from fastapi import Request

from ..session import ChatSession


def get_session(request: Request) -> ChatSession:
    """The ChatSession attached to the application."""
    return request.app.state.session
