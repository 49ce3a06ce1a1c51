from __future__ import annotations

from fastapi import APIRouter, Depends

from ..context import AppContext
from ..preferences import PreferencesService
from ..schemas import UiPrefs, WindowPrefs
from . import get_context

router = APIRouter(
    prefix="/api/v1/prefs",
    tags=["prefs"],
)

_DECODE_ERROR = {500: {"description": "Stored preferences are malformed (DecodeError)"}}


def _get_prefs(ctx: AppContext = Depends(get_context)) -> PreferencesService:
    return ctx.prefs


# PUBLIC_INTERFACE
@router.get("/window", response_model=WindowPrefs, summary="Get window prefs", responses=_DECODE_ERROR)
def get_window_prefs(prefs: PreferencesService = Depends(_get_prefs)) -> WindowPrefs:
    """Stored window prefs, or the defaults when nothing was saved yet."""
    return prefs.get_window_prefs()


# PUBLIC_INTERFACE
@router.put("/window", response_model=WindowPrefs, summary="Save window prefs")
def save_window_prefs(payload: WindowPrefs, prefs: PreferencesService = Depends(_get_prefs)) -> WindowPrefs:
    prefs.save_window_prefs(payload)
    return payload


# PUBLIC_INTERFACE
@router.get("/ui", response_model=UiPrefs, summary="Get UI prefs", responses=_DECODE_ERROR)
def get_ui_prefs(prefs: PreferencesService = Depends(_get_prefs)) -> UiPrefs:
    return prefs.get_ui_prefs()


# PUBLIC_INTERFACE
@router.put("/ui", response_model=UiPrefs, summary="Save UI prefs")
def save_ui_prefs(payload: UiPrefs, prefs: PreferencesService = Depends(_get_prefs)) -> UiPrefs:
    prefs.save_ui_prefs(payload)
    return payload
