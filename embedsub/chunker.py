"""Splits a subtitle document into size-bounded chunks at entry boundaries."""

import logging
from typing import List

from .models import Chunk
from .subtitle_document import ENTRY_SEPARATOR, SubtitleDocument

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_CHARS = 10000


def split_into_chunks(document: SubtitleDocument, max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> List[Chunk]:
    """
    Groups entries greedily into chunks whose text is at most ``max_chunk_chars``.

    Entries are never split, merged or reordered. An entry that is longer
    than the limit on its own becomes a chunk by itself.

    Args:
        document: The subtitle document to split.
        max_chunk_chars: Maximum length of a chunk's text.

    Returns:
        Chunks in document order; empty for an empty document.

    Raises:
        ValueError: If ``max_chunk_chars`` is not positive.
    """
    if max_chunk_chars < 1:
        raise ValueError(f"max_chunk_chars must be positive, got {max_chunk_chars}")

    chunks: List[Chunk] = []
    buffer: List[str] = []
    buffer_size = 0

    for entry in document.entries:
        added_size = len(entry) + (len(ENTRY_SEPARATOR) if buffer else 0)
        if buffer and buffer_size + added_size > max_chunk_chars:
            chunks.append(Chunk(index=len(chunks), entries=tuple(buffer)))
            buffer = []
            buffer_size = 0
            added_size = len(entry)
        buffer.append(entry)
        buffer_size += added_size

    if buffer:
        chunks.append(Chunk(index=len(chunks), entries=tuple(buffer)))

    logger.info(f"Split subtitle into {len(chunks)} chunk(s)")
    for chunk in chunks:
        logger.debug(f"Chunk {chunk.index + 1}: {len(chunk.entries)} entries, {chunk.size} characters")
    return chunks
