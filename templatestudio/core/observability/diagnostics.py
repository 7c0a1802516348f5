"""
Diagnostics reporter — fire-and-forget error tracking.

Soft inconsistencies found during composition (a dependency the catalog
wants but the user never selected) must not slow down or fail the
composition. The resolver hands them to ``track()``, which only enqueues;
a daemon worker thread drains the queue, logs each record and keeps a
bounded history for the health/diagnostics endpoints.

Thread safety model
───────────────────
- ``_queue`` is the only hand-off between callers and the worker.
- ``_lock`` protects ``_history`` and the lazily started ``_worker``.
- ``flush()`` blocks until every record enqueued so far is processed.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """One reported problem."""

    message: str
    template_identity: str = ""
    severity: str = "error"  # error, warning
    ts: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "template_identity": self.template_identity,
            "severity": self.severity,
            "ts": self.ts,
        }


class DiagnosticsReporter:
    """Asynchronous, in-process diagnostics sink.

    Parameters
    ----------
    history_size : int
        Maximum number of processed diagnostics to retain.
    """

    def __init__(self, *, history_size: int = 200) -> None:
        self._queue: queue.Queue[Diagnostic] = queue.Queue()
        self._lock = threading.Lock()
        self._history: deque[Diagnostic] = deque(maxlen=history_size)
        self._worker: threading.Thread | None = None

    # ── Reporting ───────────────────────────────────────────────

    def track(
        self,
        message: str,
        *,
        template_identity: str = "",
        severity: str = "error",
    ) -> None:
        """Enqueue a diagnostic and return immediately."""
        self._ensure_worker()
        self._queue.put_nowait(
            Diagnostic(
                message=message,
                template_identity=template_identity,
                severity=severity,
            )
        )

    def flush(self, timeout: float | None = 5.0) -> bool:
        """Wait until every tracked diagnostic has been processed.

        Returns:
            True if the queue drained within *timeout*.
        """
        if self._worker is None:
            return True
        deadline = None if timeout is None else time.monotonic() + timeout
        while self._queue.unfinished_tasks:
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(0.01)
        return True

    @property
    def history(self) -> list[Diagnostic]:
        """Processed diagnostics, oldest first."""
        with self._lock:
            return list(self._history)

    def clear(self) -> None:
        with self._lock:
            self._history.clear()

    # ── Worker ──────────────────────────────────────────────────

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(
                target=self._drain,
                name="diagnostics-reporter",
                daemon=True,
            )
            self._worker.start()

    def _drain(self) -> None:
        while True:
            diagnostic = self._queue.get()
            try:
                log = logger.warning if diagnostic.severity == "warning" else logger.error
                log(
                    "diagnostic [%s] %s",
                    diagnostic.template_identity or "-",
                    diagnostic.message,
                )
                with self._lock:
                    self._history.append(diagnostic)
            finally:
                self._queue.task_done()
