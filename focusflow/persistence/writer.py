"""
Write-behind persistence.

Callers submit snapshots and continue immediately. A single worker thread
drains the queue in submission order, so a later write for a key can never
be overtaken by an earlier one.
"""

import copy
import queue
import threading
from typing import Any, Optional

import structlog

from .store import KeyValueStore

_STOP = object()


class StoreWriter:
    """Sequenced fire-and-forget writer in front of a ``KeyValueStore``."""

    def __init__(self, store: KeyValueStore, background: bool = True):
        self.store = store
        self.background = background
        self.logger = structlog.get_logger("focusflow.writer")
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._failed_writes = 0
        # Guards the hand-over from queued to synchronous writes
        self._lock = threading.Lock()
        self._stop_requested = False
        self._stopped = False

        if background:
            self._worker = threading.Thread(target=self._run, name="focusflow-writer", daemon=True)
            self._worker.start()

    @property
    def failed_writes(self) -> int:
        return self._failed_writes

    def submit(self, key: str, value: Any) -> None:
        """Queue a write. ``value`` is copied now, so later mutation is not persisted."""
        self._enqueue(("set", key, copy.deepcopy(value)))

    def submit_delete(self, key: str) -> None:
        self._enqueue(("delete", key, None))

    def flush(self) -> None:
        """Block until every queued write has been applied."""
        if self.background:
            self._queue.join()

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """
        Flush pending writes and stop the worker.

        If the worker is still draining when ``timeout`` expires, the writer
        stays in queued mode and later submissions keep their order behind
        the pending ones. Calling ``close`` again waits for the worker once more.
        """
        if self._worker is None:
            return
        with self._lock:
            if not self._stop_requested:
                self._stop_requested = True
                self._queue.put(_STOP)
        self._worker.join(timeout)
        if self._worker.is_alive():
            self.logger.warning("Writer still draining after close timeout", pending=self._queue.qsize())
            return
        self._worker = None
        self.background = False

    def _enqueue(self, item: tuple) -> None:
        with self._lock:
            if self.background and not self._stopped:
                self._queue.put(item)
                return
        self._apply(*item)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    with self._lock:
                        if self._queue.empty():
                            self._stopped = True
                            return
                        # Writes arrived after close; apply them before stopping
                        self._queue.put(_STOP)
                    continue
                self._apply(*item)
            finally:
                self._queue.task_done()

    def _apply(self, operation: str, key: str, value: Any) -> None:
        if operation == "set":
            ok = self.store.set(key, value)
        else:
            ok = self.store.delete(key)

        if not ok:
            # In-memory state stays authoritative; the next write for the key retries
            self._failed_writes += 1
            self.logger.warning("Persistence write failed", operation=operation, key=key)
