"""
Secret Scanner - regex and entropy based detection of leaked credentials.
"""

from .cancellation import CancellationToken
from .catalog import PatternCatalog, load_catalog
from .chunking import split_into_chunks
from .core import Scanner
from .entropy import calculate_entropy, find_likely_secrets, is_likely_secret
from .errors import InvalidPatternError, ReadFailureError, ScanCancelledError, ScannerError
from .extractor import calculate_confidence, scan_chunk
from .masking import mask_secret
from .models import Chunk, Finding
from .patterns import Pattern, PatternRegistry
from .stream import FindingStream

__version__ = "1.0.0"

# Define what gets imported when someone does 'from secret_scanner import *'
__all__ = [
    "Scanner",
    "Finding",
    "Chunk",
    "Pattern",
    "PatternRegistry",
    "PatternCatalog",
    "load_catalog",
    "CancellationToken",
    "FindingStream",
    "split_into_chunks",
    "scan_chunk",
    "calculate_confidence",
    "calculate_entropy",
    "is_likely_secret",
    "find_likely_secrets",
    "mask_secret",
    "ScannerError",
    "InvalidPatternError",
    "ScanCancelledError",
    "ReadFailureError",
]
