"""
Caller-side bookkeeping for editor integrations.

``DiagnosticStore`` keeps the latest diagnostics per document identity; each
``set`` replaces the previous list wholesale.  ``Debouncer`` runs a callback
after a quiet period, dropping any earlier pending call for the same key.
"""

import logging
import threading
from typing import Callable, Dict, List, Tuple

from vrl_lint.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


class DiagnosticStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_uri: Dict[str, List[Diagnostic]] = {}

    def set(self, uri: str, diagnostics: List[Diagnostic]) -> None:
        with self._lock:
            self._by_uri[uri] = list(diagnostics)

    def get(self, uri: str) -> List[Diagnostic]:
        with self._lock:
            return list(self._by_uri.get(uri, []))

    def clear(self, uri: str) -> None:
        with self._lock:
            self._by_uri.pop(uri, None)

    def uris(self) -> List[str]:
        with self._lock:
            return sorted(self._by_uri)


class Debouncer:
    """Only the most recently scheduled call per key runs, ``delay`` seconds after scheduling."""

    def __init__(self, delay: float):
        self.delay = delay
        self._lock = threading.Lock()
        self._timers: Dict[str, Tuple[threading.Timer, Callable[[], None]]] = {}

    def schedule(self, key: str, fn: Callable[[], None]) -> None:
        with self._lock:
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous[0].cancel()
                logger.debug("Superseded pending call for %s", key)
            timer = threading.Timer(self.delay, self._fire, args=(key, fn))
            timer.daemon = True
            self._timers[key] = (timer, fn)
            timer.start()

    def _fire(self, key: str, fn: Callable[[], None]) -> None:
        with self._lock:
            current = self._timers.get(key)
            if current is None or current[0] is not threading.current_thread():
                return
            del self._timers[key]
        try:
            fn()
        except Exception as e:
            logger.error("Debounced call for %s failed: %s", key, e)

    def pending(self, key: str) -> bool:
        with self._lock:
            return key in self._timers

    def cancel(self, key: str) -> None:
        with self._lock:
            entry = self._timers.pop(key, None)
        if entry is not None:
            entry[0].cancel()

    def cancel_all(self) -> Dict[str, Callable[[], None]]:
        """Cancel every pending call and return the dropped callbacks by key."""
        with self._lock:
            entries = dict(self._timers)
            self._timers.clear()
        for timer, _fn in entries.values():
            timer.cancel()
        return {key: fn for key, (_timer, fn) in entries.items()}
