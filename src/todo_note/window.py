"""
Port to the window shell that hosts the UI.

The store never owns a window. The shell (or a test) hands in a
WindowController; when no live window exists the NullWindowController is used
and every request is accepted without effect.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .errors import WindowError
from .schemas import WindowPrefs

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class WindowController(ABC):
    """Requests the store may make of the live window. Failures raise WindowError."""

    @abstractmethod
    def set_size(self, width: float, height: float) -> None:
        """Resize the window to the given logical size."""

    @abstractmethod
    def set_position(self, x: float, y: float) -> None:
        """Move the window to the given logical position."""

    @abstractmethod
    def set_always_on_top(self, enabled: bool) -> None:
        """Pin or unpin the window above other windows."""


class NullWindowController(WindowController):
    """Used when no live window is attached."""

    def set_size(self, width: float, height: float) -> None:
        return None

    def set_position(self, x: float, y: float) -> None:
        return None

    def set_always_on_top(self, enabled: bool) -> None:
        return None


# PUBLIC_INTERFACE
def apply_window_prefs(window: WindowController, prefs: WindowPrefs) -> bool:
    """
    Restore persisted geometry and pinning on the live window at startup.

    Returns False (after logging) when the window refuses; startup carries on.
    """
    try:
        window.set_size(prefs.width, prefs.height)
        window.set_position(prefs.x, prefs.y)
        window.set_always_on_top(prefs.always_on_top)
    except WindowError as err:
        logger.warning("Could not restore window prefs: %s", err.message)
        return False
    return True
