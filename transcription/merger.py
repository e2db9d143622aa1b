#!/usr/bin/env python3
"""
Utilities for merging chunk transcripts and removing chunk files.
"""

import os
import logging
from typing import Iterable, List

from exceptions import CleanupWarning
from .models import AudioChunkInfo

logger = logging.getLogger(__name__)


def merge_transcriptions(transcriptions: Iterable[str]) -> str:
    """
    Join per-chunk transcripts into one text.

    Each part is stripped, empty parts are dropped, and the rest are joined
    with single spaces. Chunks never overlap, so no de-duplication is done:
    a word repeated across a seam is spoken twice.

    Args:
        transcriptions: Chunk transcripts in index order

    Returns:
        Merged transcript ('' for no input)
    """
    parts = (text.strip() for text in transcriptions)
    return ' '.join(part for part in parts if part)


def cleanup_chunks(chunks: Iterable[AudioChunkInfo], original_path: str) -> List[str]:
    """
    Delete temporary chunk files, never the original recording.

    Failures are logged and skipped.

    Args:
        chunks: Chunks returned by the chunker
        original_path: Caller's source file, which must survive

    Returns:
        Paths that were removed
    """
    removed = []
    original = os.path.abspath(original_path)

    for chunk in chunks:
        if os.path.abspath(chunk.file_path) == original:
            continue
        try:
            os.remove(chunk.file_path)
            removed.append(chunk.file_path)
            logger.debug(f"Cleaned up chunk: {chunk.file_path}")
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(str(CleanupWarning(chunk.file_path, str(e))))

    return removed


def format_duration(seconds: float) -> str:
    """Format seconds as '45s' or '3m 5s'."""
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    if mins == 0:
        return f"{secs}s"
    return f"{mins}m {secs}s"
