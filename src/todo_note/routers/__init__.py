from __future__ import annotations

from fastapi import Request

from ..context import AppContext


def get_context(request: Request) -> AppContext:
    """
    Dependency returning the AppContext the app was created with.
    """
    return request.app.state.context
