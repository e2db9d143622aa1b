#!/usr/bin/env python3
"""
Resource management context managers for the voice transcription pipeline.
Provides guaranteed cleanup for per-job temporary chunk directories.
"""

import os
import shutil
import uuid
import logging
from contextlib import contextmanager
from typing import Iterator

from config import TEMP_SUBDIR
from exceptions import CleanupWarning


logger = logging.getLogger(__name__)


def new_temp_dir_path(uploads_dir: str) -> str:
    """
    Build a fresh per-job directory path under the uploads root.

    Args:
        uploads_dir: Uploads root directory

    Returns:
        str: ``{uploads_dir}/temp/{random hex id}`` (not created)
    """
    return os.path.join(uploads_dir, TEMP_SUBDIR, uuid.uuid4().hex)


@contextmanager
def temporary_chunk_dir(uploads_dir: str) -> Iterator[str]:
    """
    Context manager for a per-job chunk directory with guaranteed cleanup.

    The directory path is unique per call so concurrent jobs never share it.
    It is not created here; the chunker creates it on first use. Whatever
    exists at the path is removed on exit, even if exceptions occur.

    Args:
        uploads_dir: Uploads root directory

    Yields:
        str: Path of the job's temporary directory

    Example:
        with temporary_chunk_dir('/srv/uploads') as chunk_dir:
            chunks = chunker.split_into_chunks(audio_path, chunk_dir)
            transcribe(chunks)
        # chunk_dir guaranteed to be gone here
    """
    temp_dir = new_temp_dir_path(uploads_dir)

    try:
        logger.debug(f"Using temporary chunk directory: {temp_dir}")
        yield temp_dir

    finally:
        remove_temp_dir(temp_dir)


def remove_temp_dir(temp_dir: str) -> bool:
    """
    Remove a temporary directory tree, logging instead of raising on failure.

    Args:
        temp_dir: Directory to remove

    Returns:
        True if the directory is gone afterwards, False otherwise
    """
    if not os.path.exists(temp_dir):
        return True

    try:
        shutil.rmtree(temp_dir)
        logger.debug(f"Cleaned up temporary directory: {temp_dir}")
        return True
    except OSError as e:
        logger.warning(str(CleanupWarning(temp_dir, str(e))))
        return False
