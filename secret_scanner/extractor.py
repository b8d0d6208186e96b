"""
Per-chunk match extraction: run every registered pattern over one chunk,
turn matches into Findings and keep the best finding per line.
"""
import logging
from typing import Callable, Dict, List, Mapping, Optional

from .cancellation import CancellationToken
from .models import Chunk, Finding
from .patterns import PatternRegistry

logger = logging.getLogger(__name__)

UNKNOWN_DESCRIPTION = "Unknown secret type detected"

BASE_CONFIDENCE = 0.8
SHORT_MATCH_LENGTH = 8
SHORT_MATCH_PENALTY = 0.5

ConfidenceScorer = Callable[[str], float]


def calculate_confidence(secret: str) -> float:
    """
    Heuristic confidence for a matched value.

    Only length is considered: a flat baseline, halved for short matches.
    """
    confidence = BASE_CONFIDENCE
    if len(secret) < SHORT_MATCH_LENGTH:
        confidence *= SHORT_MATCH_PENALTY
    return confidence


def describe(kind: str, descriptions: Mapping[str, str]) -> str:
    return descriptions.get(kind, UNKNOWN_DESCRIPTION)


def deduplicate_by_line(findings: List[Finding]) -> List[Finding]:
    """
    Keep only the highest-confidence finding for each line.

    On a tie the first finding seen for the line wins. The result is
    ordered by line.
    """
    best: Dict[int, Finding] = {}
    for finding in findings:
        current = best.get(finding.line)
        if current is None or finding.confidence > current.confidence:
            best[finding.line] = finding
    return [best[line] for line in sorted(best)]


def scan_chunk(
    registry: PatternRegistry,
    chunk: Chunk,
    token: Optional[CancellationToken] = None,
    descriptions: Optional[Mapping[str, str]] = None,
    scorer: ConfidenceScorer = calculate_confidence,
) -> List[Finding]:
    """
    Apply every registered pattern to `chunk` and return deduplicated findings.

    Offsets are translated to global positions by adding `chunk.offset`;
    line numbers stay relative to the chunk. The token is checked before
    each pattern pass.

    Raises:
        ScanCancelledError: If the token is cancelled before a pattern pass.
            No partial findings are returned.
    """
    descriptions = descriptions or {}
    text = chunk.text
    results: List[Finding] = []

    with registry.reading() as patterns:
        for pattern in patterns:
            if token is not None:
                token.raise_if_cancelled()

            for match in pattern.regex.finditer(text):
                start, end = match.span()
                # Zero-width matches carry no secret
                if start == end:
                    continue

                value = match.group()
                results.append(Finding(
                    kind=pattern.name,
                    value=value,
                    start=chunk.offset + start,
                    end=chunk.offset + end,
                    line=text.count("\n", 0, start) + 1,
                    confidence=scorer(value),
                    description=describe(pattern.name, descriptions),
                ))

    findings = deduplicate_by_line(results)
    if len(findings) != len(results):
        logger.debug(
            f"Chunk at offset {chunk.offset}: kept {len(findings)} of {len(results)} matches after per-line dedup"
        )
    return findings
