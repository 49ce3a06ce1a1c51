from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..context import AppContext
from ..preferences import PreferencesService
from ..schemas import AlwaysOnTopRequest, PanelModeRequest, WindowMoved, WindowPrefs, WindowResized
from . import get_context

router = APIRouter(
    prefix="/api/v1/window",
    tags=["window"],
)


def _get_prefs(ctx: AppContext = Depends(get_context)) -> PreferencesService:
    return ctx.prefs


# PUBLIC_INTERFACE
@router.put(
    "/panel-mode",
    response_model=WindowPrefs,
    summary="Set panel mode",
    description="Resize the window for the mode (mini 380x520, expanded 920x680) and persist it.",
    responses={502: {"description": "The window refused the resize"}},
)
def set_panel_mode(payload: PanelModeRequest, prefs: PreferencesService = Depends(_get_prefs)) -> WindowPrefs:
    return prefs.set_panel_mode(payload.mode)


# PUBLIC_INTERFACE
@router.put(
    "/always-on-top",
    response_model=WindowPrefs,
    summary="Pin or unpin the window",
    responses={502: {"description": "The window refused the change"}},
)
def set_always_on_top(
    payload: AlwaysOnTopRequest, prefs: PreferencesService = Depends(_get_prefs)
) -> WindowPrefs:
    return prefs.set_always_on_top(payload.enabled)


# PUBLIC_INTERFACE
@router.post(
    "/events/moved",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Window moved notification",
    description="Best-effort: the new position is saved if possible; failures are ignored.",
)
def window_moved(payload: WindowMoved, prefs: PreferencesService = Depends(_get_prefs)) -> Response:
    prefs.record_moved(payload.x, payload.y)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    "/events/resized",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Window resized notification",
    description="Best-effort: the new size is saved if possible; failures are ignored.",
)
def window_resized(payload: WindowResized, prefs: PreferencesService = Depends(_get_prefs)) -> Response:
    prefs.record_resized(payload.width, payload.height)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
