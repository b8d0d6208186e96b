"""
Value types produced by the scanning engine.
"""
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Finding:
    """
    A single detected candidate secret.

    `start`/`end` index into the original, un-chunked input. `line` is
    1-based and relative to the text the extractor was handed (the whole
    input on the direct path, one chunk on the parallel path, one line
    when streaming).
    """
    kind: str
    value: str
    start: int
    end: int
    line: int
    confidence: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to a JSON-friendly dictionary."""
        return {
            'type': self.kind,
            'value': self.value,
            'start_index': self.start,
            'end_index': self.end,
            'line_number': self.line,
            'confidence': round(self.confidence, 2),
            'description': self.description,
        }


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of the input tagged with its absolute start offset."""
    text: str
    offset: int
