from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Dict, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .db import Database
from .errors import DecodeError, StorageError, StoreError, ValidationError
from .meta import UI_PREFS_KEY, WINDOW_PREFS_KEY, MetaStore
from .schemas import PanelMode, UiPrefs, WindowPrefs
from .window import NullWindowController, WindowController

logger = logging.getLogger(__name__)

PANEL_SIZES: Dict[PanelMode, Tuple[float, float]] = {
    PanelMode.MINI: (380.0, 520.0),
    PanelMode.EXPANDED: (920.0, 680.0),
}

_P = TypeVar("_P", bound=BaseModel)


def _decode(raw: Optional[str], model: Type[_P], key: str) -> _P:
    if raw is None:
        return model()
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as err:
        raise DecodeError(f"Malformed preferences stored at {key}: {err.errors()[0]['msg']}") from err


def _encode(prefs: BaseModel) -> str:
    return prefs.model_dump_json(by_alias=True)


# PUBLIC_INTERFACE
class PreferencesService:
    """
    Window and UI preferences, each kept as one JSON blob in the meta store.

    Partial changes (position, size, panel mode, pinning) read the whole
    WindowPrefs blob, change the selected fields and write it back inside a
    single session.

    The service can exist without a storage handle (db=None) for callers that
    run before the store is opened; the best-effort helpers then do nothing.
    """

    def __init__(self, db: Optional[Database], window: Optional[WindowController] = None) -> None:
        self._db = db
        self._window = window or NullWindowController()

    def _require_db(self) -> Database:
        if self._db is None:
            raise StorageError("Storage is not available")
        return self._db

    @staticmethod
    def _read_window(conn: sqlite3.Connection) -> WindowPrefs:
        return _decode(MetaStore.get(conn, WINDOW_PREFS_KEY), WindowPrefs, WINDOW_PREFS_KEY)

    @staticmethod
    def _write_window(conn: sqlite3.Connection, prefs: WindowPrefs) -> None:
        MetaStore.set(conn, WINDOW_PREFS_KEY, _encode(prefs))

    def get_window_prefs(self) -> WindowPrefs:
        """
        Return the stored WindowPrefs, or the defaults when none are stored.

        Raises:
            DecodeError if the stored blob is malformed.
        """
        with self._require_db().session() as conn:
            return self._read_window(conn)

    def save_window_prefs(self, prefs: WindowPrefs) -> None:
        with self._require_db().session() as conn:
            self._write_window(conn, prefs)

    def get_ui_prefs(self) -> UiPrefs:
        with self._require_db().session() as conn:
            return _decode(MetaStore.get(conn, UI_PREFS_KEY), UiPrefs, UI_PREFS_KEY)

    def save_ui_prefs(self, prefs: UiPrefs) -> None:
        with self._require_db().session() as conn:
            MetaStore.set(conn, UI_PREFS_KEY, _encode(prefs))

    def load_startup_window_prefs(self) -> WindowPrefs:
        """Like get_window_prefs, but falls back to defaults instead of failing."""
        try:
            return self.get_window_prefs()
        except StoreError as err:
            logger.warning("Using default window prefs: %s", err.message)
            return WindowPrefs()

    @staticmethod
    def _apply_changes(prefs: WindowPrefs, changes: Dict[str, object]) -> WindowPrefs:
        # Revalidate the merged fields so nothing undecodable (NaN, inf) is written.
        try:
            return WindowPrefs.model_validate({**prefs.model_dump(), **changes})
        except PydanticValidationError as err:
            raise ValidationError(f"Invalid window prefs: {err.errors()[0]['msg']}") from err

    def _mutate_window_in(self, db: Database, **changes: object) -> WindowPrefs:
        with db.session() as conn:
            prefs = self._apply_changes(self._read_window(conn), changes)
            self._write_window(conn, prefs)
            return prefs

    def _mutate_window(self, **changes: object) -> Optional[WindowPrefs]:
        if self._db is None:
            return None
        return self._mutate_window_in(self._db, **changes)

    def update_position(self, x: float, y: float) -> Optional[WindowPrefs]:
        return self._mutate_window(x=float(x), y=float(y))

    def update_size(self, width: float, height: float) -> Optional[WindowPrefs]:
        return self._mutate_window(width=float(width), height=float(height))

    # Move/resize notifications arrive often and are not worth failing over:
    # errors are logged and dropped.
    def record_moved(self, x: float, y: float) -> None:
        try:
            self.update_position(x, y)
        except StoreError as err:
            logger.debug("Ignored window position save failure: %s", err.message)

    def record_resized(self, width: float, height: float) -> None:
        try:
            self.update_size(width, height)
        except StoreError as err:
            logger.debug("Ignored window size save failure: %s", err.message)

    def set_panel_mode(self, mode: PanelMode) -> WindowPrefs:
        """
        Resize the live window for `mode` and persist mode and size.

        The stored prefs are read before the window is touched, so a malformed
        blob fails with DecodeError without resizing anything.

        Raises:
            WindowError if the window refuses the resize (nothing is persisted).
        """
        width, height = PANEL_SIZES[mode]
        prefs = self._window_then_persist(
            lambda: self._window.set_size(width, height), mode=mode, width=width, height=height
        )
        logger.info("Panel mode set to %s (%sx%s)", mode.value, width, height)
        return prefs

    def set_always_on_top(self, enabled: bool) -> WindowPrefs:
        return self._window_then_persist(
            lambda: self._window.set_always_on_top(enabled), always_on_top=bool(enabled)
        )

    def _window_then_persist(self, request: Callable[[], None], **changes: object) -> WindowPrefs:
        db = self._require_db()
        with db.session() as conn:
            prefs = self._apply_changes(self._read_window(conn), changes)
            request()
            self._write_window(conn, prefs)
            return prefs
