"""
Debounced and forced persistence of sheet snapshots.
"""

import threading
from typing import Optional

from .config import AppConfig
from .logging_setup import get_logger
from .models import Sheet
from .storage import KeyValueStore, set_stored_spreadsheet

logger = get_logger(__name__)


class PersistenceScheduler:
    """
    Debounce writes of sheet snapshots to a key-value store.

    Each call to ``schedule`` restarts the delay; only the most recent snapshot
    scheduled inside the window is written. One scheduler per store, owned by
    the caller, so independent sheets never cancel each other's writes.

    Writes are serialized, and every ``schedule``, ``cancel`` and ``force_save``
    starts a new generation. A debounced write whose generation has been
    superseded by the time it reaches the store is dropped, so an older
    snapshot never lands after a newer one.
    """

    def __init__(self, store: KeyValueStore, config: Optional[AppConfig] = None):
        """
        Initialize the scheduler.

        Args:
            store: Store the snapshots are written to
            config: Application configuration (supplies the default delay)
        """
        self.store = store
        self.default_delay_ms = config.autosave_delay_ms if config else 500
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Sheet] = None
        self._generation = 0
        self.save_count = 0

    @property
    def pending(self) -> bool:
        """Whether a debounced write is waiting."""
        with self._lock:
            return self._timer is not None

    def schedule(self, sheet: Sheet, delay_ms: Optional[int] = None) -> None:
        """
        Schedule a write of ``sheet``, superseding any pending write.

        Args:
            sheet: Snapshot to write
            delay_ms: Debounce delay in milliseconds (config default if None)
        """
        delay = self.default_delay_ms if delay_ms is None else delay_ms

        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._pending = sheet
            timer = threading.Timer(delay / 1000.0, self._on_timer, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

        logger.debug(f"Autosave scheduled in {delay} ms")

    def cancel(self) -> bool:
        """
        Drop the pending write.

        Returns:
            True if a write was pending
        """
        with self._lock:
            had_pending = self._timer is not None
            self._cancel_timer()
            self._generation += 1
            self._pending = None
        return had_pending

    def flush(self) -> bool:
        """
        Write the pending snapshot now.

        Returns:
            True if nothing was pending or the write succeeded
        """
        with self._lock:
            sheet = self._pending
            generation = self._generation
            self._cancel_timer()
            self._pending = None

        if sheet is None:
            return True
        return self._write(sheet, generation, "Spreadsheet autosaved")

    def force_save(self, sheet: Sheet) -> bool:
        """
        Cancel any pending write and write ``sheet`` immediately.

        Returns:
            True if the write succeeded
        """
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            generation = self._generation
            self._pending = None

        return self._write(sheet, generation, "Spreadsheet force saved")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            sheet = self._pending
            self._timer = None
            self._pending = None

        if sheet is not None:
            self._write(sheet, generation, "Spreadsheet autosaved")

    def _write(self, sheet: Sheet, generation: int, message: str) -> bool:
        with self._write_lock:
            with self._lock:
                if generation != self._generation:
                    # A newer snapshot owns the store
                    logger.debug("Dropping superseded snapshot")
                    return True
            try:
                set_stored_spreadsheet(self.store, sheet)
                with self._lock:
                    self.save_count += 1
                logger.info(message)
                return True
            except Exception as e:
                logger.error(f"Error saving spreadsheet: {str(e)}")
                return False
