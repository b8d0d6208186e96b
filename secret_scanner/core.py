"""
Secret Scanner Core Engine
Pattern registry, cached batch scanning with a bounded worker pool, and
line-oriented streaming scans.
"""
import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .cache import ResultCache
from .cancellation import CancellationToken
from .chunking import split_into_chunks
from .config import settings
from .errors import ReadFailureError, ScanCancelledError
from .extractor import ConfidenceScorer, calculate_confidence, scan_chunk
from .models import Chunk, Finding
from .patterns import PatternRegistry
from .stream import FindingStream

logger = logging.getLogger(__name__)


class Scanner:
    """
    Secret scanner over a private pattern registry.

    Inputs shorter than the parallel threshold are scanned inline; longer
    inputs are split into chunks and fanned out to at most `workers`
    concurrent workers. Complete batch results are cached per exact input.

    Options:
        chunk_size: Characters per chunk on the parallel path.
        parallel_threshold: Minimum input length for the parallel path.
        stream_buffer_size: Findings buffered ahead of a streaming consumer.
        max_line_length: Longest line a streaming scan accepts.
        confidence_scorer: Callable mapping a matched value to [0, 1].
    """

    def __init__(self, workers: int = None, descriptions: Mapping[str, str] = None, options: Dict = None):
        """Initialize scanner."""
        workers = settings.SCANNER_WORKERS if workers is None else workers
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self._workers = workers
        self.options = options or {}
        self.descriptions: Dict[str, str] = dict(descriptions or {})

        self.chunk_size: int = self.options.get('chunk_size', settings.CHUNK_SIZE)
        self.parallel_threshold: int = self.options.get('parallel_threshold', settings.PARALLEL_THRESHOLD)
        self.stream_buffer_size: int = self.options.get('stream_buffer_size', settings.STREAM_BUFFER_SIZE)
        self.max_line_length: int = self.options.get('max_line_length', settings.STREAM_MAX_LINE_LENGTH)
        self.scorer: ConfidenceScorer = self.options.get('confidence_scorer', calculate_confidence)

        self.registry = PatternRegistry()
        self.cache = ResultCache()

    @property
    def workers(self) -> int:
        return self._workers

    def add_pattern(self, name: str, pattern: str) -> None:
        """
        Compile and register a pattern under `name`.

        Raises:
            InvalidPatternError: If the pattern does not compile; nothing
                is registered in that case.
        """
        self.registry.add(name, pattern)

    def add_patterns(self, patterns: Mapping[str, str], strict: bool = True) -> int:
        """Register a name -> regex mapping; returns how many were added."""
        added = self.registry.add_many(patterns, strict=strict)
        logger.info(f"Registered {len(added)} of {len(patterns)} patterns")
        return len(added)

    def scan(self, text: str, token: Optional[CancellationToken] = None) -> List[Finding]:
        """
        Scan `text` and return every finding, or raise.

        Must not be called from inside a running event loop; use
        `scan_async` there.

        Raises:
            ScanCancelledError: If `token` is cancelled before or during the scan.
            ScannerError: If any chunk fails. Partial results are never returned.
        """
        return asyncio.run(self.scan_async(text, token))

    async def scan_async(self, text: str, token: Optional[CancellationToken] = None) -> List[Finding]:
        """Async variant of `scan`."""
        token = token or CancellationToken()
        token.raise_if_cancelled()

        cached = self.cache.get(text)
        if cached is not None:
            logger.debug(f"Cache hit for {len(text)}-character input")
            return cached

        if len(text) < self.parallel_threshold:
            findings = scan_chunk(self.registry, Chunk(text=text, offset=0), token, self.descriptions, self.scorer)
        else:
            findings = await self._scan_parallel(text, token)

        self.cache.put(text, findings)
        logger.debug(f"Scanned {len(text)} characters, {len(findings)} findings")
        return findings

    async def _scan_parallel(self, text: str, token: CancellationToken) -> List[Finding]:
        """
        Fan chunks out to the worker pool and merge results in completion order.

        The first failure (including cancellation) wins. Chunks still waiting
        for a worker slot are cancelled; chunks already running finish in
        the background and their results are discarded.
        """
        chunks = split_into_chunks(text, self.chunk_size)
        logger.info(f"Scanning {len(text)} characters as {len(chunks)} chunks with {self._workers} workers")

        loop = asyncio.get_running_loop()
        semaphore = asyncio.Semaphore(self._workers)
        cancelled = asyncio.Event()

        def on_cancel():
            loop.call_soon_threadsafe(cancelled.set)

        executor = ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="secret-scan")

        async def run_chunk(chunk: Chunk) -> List[Finding]:
            async with semaphore:
                return await loop.run_in_executor(
                    executor, scan_chunk, self.registry, chunk, token, self.descriptions, self.scorer
                )

        tasks = [asyncio.ensure_future(run_chunk(chunk)) for chunk in chunks]
        cancel_waiter = asyncio.ensure_future(cancelled.wait())
        token.add_callback(on_cancel)

        all_findings: List[Finding] = []
        pending = set(tasks)
        try:
            while pending:
                done, _ = await asyncio.wait(pending | {cancel_waiter}, return_when=asyncio.FIRST_COMPLETED)
                if cancel_waiter in done:
                    raise ScanCancelledError()
                for task in done:
                    pending.discard(task)
                    all_findings.extend(task.result())
        except Exception as e:
            logger.warning(f"Parallel scan aborted: {e}")
            raise
        finally:
            token.remove_callback(on_cancel)
            cancel_waiter.cancel()
            for task in pending:
                task.cancel()
            # Mark stray failures as retrieved; only the first one is reported
            for task in tasks:
                if task.done() and not task.cancelled():
                    task.exception()
            executor.shutdown(wait=False, cancel_futures=True)

        return all_findings

    def stream_scan(
        self,
        reader: Union[io.TextIOBase, Iterable[str], str],
        token: Optional[CancellationToken] = None,
    ) -> FindingStream:
        """
        Scan line-oriented input incrementally.

        Findings are produced lazily, in line order, by a background
        producer. The result cache is not consulted. Mid-stream failures end
        the stream quietly; inspect `FindingStream.error` afterwards.

        Raises:
            ReadFailureError: If `reader` is closed or not iterable.
        """
        if isinstance(reader, str):
            reader = io.StringIO(reader)
        if getattr(reader, 'closed', False):
            raise ReadFailureError("cannot stream from a closed reader")
        try:
            lines = iter(reader)
        except TypeError as e:
            raise ReadFailureError(f"reader is not iterable: {e}") from e

        def scan_line(line: str, offset: int) -> List[Finding]:
            return scan_chunk(self.registry, Chunk(text=line, offset=offset), token, self.descriptions, self.scorer)

        return FindingStream(
            lines,
            scan_line,
            token=token,
            buffer_size=self.stream_buffer_size,
            max_line_length=self.max_line_length,
        )

    def get_scan_statistics(self) -> Dict:
        """Return registry and cache counters."""
        return {
            'patterns_loaded': len(self.registry),
            'workers': self._workers,
            'cache_entries': len(self.cache),
            'cache_hits': self.cache.hits,
            'cache_misses': self.cache.misses,
        }
