"""
Line-oriented streaming scan.

A background producer reads the input one line at a time, scans each line
and pushes findings through a bounded queue. The consumer iterates the
returned FindingStream; a full queue blocks the producer (backpressure)
instead of dropping findings.
"""
import logging
import queue
import threading
from typing import Callable, Iterable, Iterator, List, Optional

from .cancellation import CancellationToken
from .errors import ReadFailureError, ScanCancelledError
from .models import Finding

logger = logging.getLogger(__name__)

# Producer wakes this often while blocked, to notice close() and cancellation
_POLL_INTERVAL = 0.05

_END = object()

LineScanner = Callable[[str, int], List[Finding]]


def _strip_terminator(raw_line: str) -> str:
    if raw_line.endswith("\n"):
        raw_line = raw_line[:-1]
    if raw_line.endswith("\r"):
        raw_line = raw_line[:-1]
    return raw_line


class FindingStream:
    """
    Lazily produced findings from a streaming scan, strictly in line order.

    Iteration never raises for mid-stream failures: the stream just ends.
    Once it has ended, `error` tells a clean finish (None) apart from a
    cancellation or a read/extraction failure.
    """

    def __init__(
        self,
        lines: Iterable[str],
        scan_line: LineScanner,
        token: Optional[CancellationToken] = None,
        buffer_size: int = 100,
        max_line_length: int = 10 * 1024 * 1024,
    ):
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")

        self._lines = lines
        self._scan_line = scan_line
        self._token = token
        self._max_line_length = max_line_length
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=buffer_size)
        self._closed = threading.Event()
        self._finished = threading.Event()
        self._exhausted = False

        self.error: Optional[Exception] = None
        self.lines_scanned = 0

        self._producer = threading.Thread(target=self._produce, name="stream-scan", daemon=True)
        self._producer.start()

    @property
    def finished(self) -> bool:
        """True once the producer has stopped, for whatever reason."""
        return self._finished.is_set()

    @property
    def completed(self) -> bool:
        """True if the whole input was scanned without error."""
        return self._finished.is_set() and self.error is None and not self._closed.is_set()

    def __iter__(self) -> Iterator[Finding]:
        return self

    def __next__(self) -> Finding:
        if self._exhausted:
            raise StopIteration
        item = self._queue.get()
        if item is _END:
            self._exhausted = True
            raise StopIteration
        return item

    def close(self) -> None:
        """Stop the producer early and drop anything still buffered."""
        self._closed.set()
        self._exhausted = True
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the producer to stop; returns whether it did."""
        return self._finished.wait(timeout)

    def __enter__(self) -> "FindingStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _cancelled(self) -> bool:
        return self._token is not None and self._token.cancelled

    def _put(self, item: object) -> bool:
        """Blocking put that gives up if the consumer closed or the token fired."""
        while not self._closed.is_set():
            if item is not _END and self._cancelled():
                self.error = ScanCancelledError()
                return False
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> None:
        offset = 0
        try:
            for raw_line in self._lines:
                if self._closed.is_set():
                    return
                if self._token is not None:
                    self._token.raise_if_cancelled()

                line = _strip_terminator(raw_line)
                if len(line) > self._max_line_length:
                    raise ReadFailureError(
                        f"line {self.lines_scanned + 1} exceeds {self._max_line_length} characters"
                    )

                for finding in self._scan_line(line, offset):
                    if not self._put(finding):
                        return

                self.lines_scanned += 1
                offset += len(raw_line)
        except ScanCancelledError as e:
            self.error = e
            logger.info(f"Stream scan cancelled after {self.lines_scanned} lines")
        except ReadFailureError as e:
            self.error = e
            logger.error(f"Stream scan stopped: {e}")
        except (OSError, UnicodeDecodeError) as e:
            self.error = ReadFailureError(f"failed reading stream input: {e}")
            logger.error(f"Stream scan stopped: {self.error}")
        except Exception as e:
            self.error = e
            logger.error(f"Stream scan stopped after {self.lines_scanned} lines: {e}", exc_info=True)
        finally:
            self._put(_END)
            self._finished.set()
