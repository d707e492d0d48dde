"""Exclusive, scoped ownership of the diff engine's global configuration.

The diff engine keeps its configuration in module state that every
comparison in the process shares. ``EngineContext`` serializes access to
that state: while a context is open no other context can be opened, the
engine flags reflect the context's settings, and on close the previous flags
are put back.

    with EngineContext(settings):
        diff = Diff(expected, actual)
        diff.identical()
"""

from __future__ import annotations

import logging
import threading
from typing import AbstractSet, Optional

from . import differ
from .exceptions import EngineContextError
from .models import Setting

logger = logging.getLogger(__name__)


# Engine flag name -> the setting that drives it.
ENGINE_FLAG_SETTINGS = {
    "ignore_attribute_order": Setting.IGNORE_ATTRIBUTE_ORDER,
    "ignore_comments": Setting.IGNORE_COMMENTS,
    "ignore_diff_between_text_and_cdata": Setting.IGNORE_CDATA_TEXT_DISTINCTION,
    "ignore_whitespace": Setting.IGNORE_LEADING_TRAILING_WHITESPACE,
    "normalize": Setting.NORMALIZE_DOCUMENT,
    "normalize_whitespace": Setting.NORMALIZE_WHITESPACE,
}

# Only one context may be open in the process at a time.
_ENGINE_LOCK = threading.Lock()
_owner: Optional[int] = None


def engine_context_held() -> bool:
    """Whether some thread currently has an engine context open."""
    return _ENGINE_LOCK.locked()


def _acquire() -> None:
    global _owner
    if _owner == threading.get_ident():
        raise EngineContextError(
            "This thread already holds the diff engine configuration; "
            "nested engine contexts would deadlock."
        )
    if not _ENGINE_LOCK.acquire(blocking=False):
        logger.warning(
            "Unable to immediately obtain lock on diff engine configuration state, "
            "beware of thread contention between tests. Trying again..."
        )
        _ENGINE_LOCK.acquire()
    _owner = threading.get_ident()


def _release() -> None:
    global _owner
    _owner = None
    _ENGINE_LOCK.release()


class EngineContext:
    """
    Scoped region in which the diff engine is configured for one settings set.

    Opening blocks until the process-wide engine lock is available, saves the
    current engine flags and applies ``settings``. Closing restores the saved
    flags and releases the lock on every path; an error raised while
    restoring is re-raised only after the lock has been released.

    Use it as a context manager. Closing twice is logged and otherwise
    ignored.
    """

    def __init__(self, settings: AbstractSet[Setting]):
        if settings is None:
            raise EngineContextError("settings are required to open an engine context")

        self._close_lock = threading.Lock()
        self._saved: list[tuple[str, bool]] = []
        self._open = False

        _acquire()
        self._open = True

        try:
            # settings are only read once the lock is held
            wanted = frozenset(settings)
            for name in ENGINE_FLAG_SETTINGS:
                self._saved.append((name, differ.engine_flag(name)))
            for name, setting in ENGINE_FLAG_SETTINGS.items():
                differ.set_engine_flag(name, setting in wanted)
        except BaseException:
            self.close()
            raise

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def saved_flags(self) -> dict[str, bool]:
        return dict(self._saved)

    def close(self) -> None:
        """Restore the saved engine flags and release the engine lock."""
        with self._close_lock:
            if not self._open:
                logger.error("Detected repeated attempt to close a single engine context.")
                return

            self._open = False
            first_error = None
            try:
                for name, value in self._saved:
                    try:
                        differ.set_engine_flag(name, value)
                    except Exception as e:
                        if first_error is None:
                            first_error = e
            finally:
                _release()

            if first_error is not None:
                logger.critical(
                    "Exception occurred while closing engine context. Lock released, "
                    "re-raising, but further diff engine behavior is undefined."
                )
                raise first_error

    def __enter__(self) -> "EngineContext":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __del__(self):
        # Last resort for contexts that were never closed; not guaranteed to run.
        if getattr(self, "_open", False):
            logger.critical("Engine context was not closed before it was garbage collected.")
            self.close()

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"<EngineContext {state}>"
