"""
Cooperative cancellation shared between a caller and the scan workers.
"""
import logging
import threading
from typing import Callable, List, Optional

from .errors import ScanCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    A thread-safe, one-way cancellation flag.

    Workers poll it at well-defined boundaries (before each pattern pass,
    before each streamed line). It cannot interrupt a regex match that is
    already running.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._timer: Optional[threading.Timer] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and fire registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Cancellation callback failed: {e}")

    def cancel_after(self, seconds: float) -> None:
        """Arm a deadline; the token cancels itself once it expires."""
        with self._lock:
            if self._event.is_set():
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(seconds, self.cancel)
            self._timer.daemon = True
            self._timer.start()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """
        Register a callback to run on cancellation.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelledError()
