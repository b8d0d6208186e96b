from typing import List

from .models import Chunk

DEFAULT_CHUNK_SIZE = 10000


def split_into_chunks(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[Chunk]:
    """
    Split `text` into consecutive, non-overlapping chunks of at most
    `chunk_size` characters. The last chunk may be shorter.

    Boundaries ignore line breaks, so a match straddling two chunks is
    not seen by either of them.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    return [
        Chunk(text=text[start:start + chunk_size], offset=start)
        for start in range(0, len(text), chunk_size)
    ]
