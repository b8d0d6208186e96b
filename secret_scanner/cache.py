import threading
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Finding


class ResultCache:
    """
    Memoizes complete result sets keyed by the exact input string.

    Entries are never evicted, so memory grows with the number of distinct
    inputs scanned over the process lifetime. Any change to the input is a
    miss. Stored sequences are tuples and lookups hand back fresh lists,
    so callers cannot alter cached state.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[Finding, ...]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, text: str) -> Optional[List[Finding]]:
        with self._lock:
            entry = self._entries.get(text)
            if entry is None:
                self.misses += 1
                return None
            self.hits += 1
            return list(entry)

    def put(self, text: str, findings: Sequence[Finding]) -> None:
        with self._lock:
            self._entries[text] = tuple(findings)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __contains__(self, text: object) -> bool:
        with self._lock:
            return text in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
