#!/usr/bin/env python3
"""
Splitting of long recordings into provider-sized segments.

Segments are cut with ffmpeg stream copy (no re-encoding). Cut points snap to
the nearest packet boundary of the source container, so a seam can move by a
fraction of a second.
"""

import math
import os
import uuid
import logging
import subprocess
from typing import Callable, List, Optional, Tuple

from config import (
    DEFAULT_CHUNK_EXTENSION,
    FFMPEG_COMMAND,
    FFMPEG_TIMEOUT,
    MAX_CHUNK_DURATION,
)
from exceptions import ChunkingError, CleanupWarning
from .audio_prober import AudioProber
from .models import AudioChunkInfo, ChunkingProgress

ProgressCallback = Callable[[ChunkingProgress], None]


class AudioChunker:
    """Decides whether a recording must be split and extracts its segments."""

    def __init__(
        self,
        prober: Optional[AudioProber] = None,
        ffmpeg_command: str = FFMPEG_COMMAND,
        max_chunk_duration: float = MAX_CHUNK_DURATION,
        timeout: int = FFMPEG_TIMEOUT
    ):
        """
        Initialize audio chunker.

        Args:
            prober: Prober used to read the input duration
            ffmpeg_command: Path to the ffmpeg binary
            max_chunk_duration: Longest allowed segment in seconds
            timeout: Seconds to wait for a single ffmpeg extraction
        """
        if max_chunk_duration <= 0:
            raise ValueError(f"max_chunk_duration must be positive (got {max_chunk_duration})")
        self.prober = prober or AudioProber()
        self.ffmpeg_command = ffmpeg_command
        self.max_chunk_duration = max_chunk_duration
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def needs_chunking(self, duration: float) -> bool:
        """Return True if ``duration`` seconds exceeds the segment limit."""
        return duration > self.max_chunk_duration

    def plan_chunks(self, total_duration: float) -> List[Tuple[float, float]]:
        """
        Calculate (start, duration) pairs covering ``total_duration``.

        Every segment is exactly ``max_chunk_duration`` long except the last,
        which holds the remainder. Boundaries are planned in whole
        milliseconds, the precision handed to ffmpeg, so a sub-millisecond
        tail never becomes an empty segment.

        Args:
            total_duration: Length of the recording in seconds

        Returns:
            Contiguous, non-overlapping (start, duration) pairs in order
        """
        total_duration = round(total_duration, 3)
        num_chunks = math.ceil(total_duration / self.max_chunk_duration)
        plan = []
        for i in range(num_chunks):
            start_time = i * self.max_chunk_duration
            duration = min(self.max_chunk_duration, total_duration - start_time)
            plan.append((start_time, duration))
        return plan

    def split_into_chunks(
        self,
        input_path: str,
        output_dir: str,
        on_progress: Optional[ProgressCallback] = None,
        duration: Optional[float] = None
    ) -> List[AudioChunkInfo]:
        """
        Split an audio file into segments no longer than the limit.

        Short files are not copied: the single returned chunk points at
        ``input_path`` itself.

        Args:
            input_path: Path to the input audio file
            output_dir: Directory to store chunk files (created if missing)
            on_progress: Optional callback receiving ChunkingProgress values
            duration: Known total duration; probed when omitted

        Returns:
            Chunks ordered by index

        Raises:
            ProbeError: If the duration is needed and cannot be determined
            ChunkingError: If any segment cannot be extracted
        """
        report = on_progress or (lambda progress: None)

        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise ChunkingError(input_path, f"Cannot create {output_dir}: {e}")

        report(ChunkingProgress(stage='analyzing', message='Analyzing audio...'))

        total_duration = duration if duration is not None else self.prober.probe(input_path).duration

        if not self.needs_chunking(total_duration):
            report(ChunkingProgress(
                stage='complete',
                message='Audio is short enough, no splitting needed',
                total_chunks=1,
                current_chunk=1
            ))
            return [AudioChunkInfo(
                file_path=input_path,
                start_time=0,
                duration=total_duration,
                index=0
            )]

        plan = self.plan_chunks(total_duration)
        num_chunks = len(plan)
        ext = os.path.splitext(input_path)[1] or DEFAULT_CHUNK_EXTENSION
        base_name = uuid.uuid4().hex

        report(ChunkingProgress(
            stage='splitting',
            message=f'Splitting audio into {num_chunks} parts...',
            total_chunks=num_chunks,
            current_chunk=0
        ))

        chunks: List[AudioChunkInfo] = []
        for i, (start_time, chunk_duration) in enumerate(plan):
            chunk_path = os.path.join(output_dir, f"{base_name}_chunk_{i}{ext}")

            try:
                self._extract_segment(input_path, chunk_path, start_time, chunk_duration)
            except ChunkingError:
                # No partial chunk sets: drop what this call already wrote
                self._discard(chunks, chunk_path)
                raise

            chunks.append(AudioChunkInfo(
                file_path=chunk_path,
                start_time=start_time,
                duration=chunk_duration,
                index=i
            ))

            report(ChunkingProgress(
                stage='splitting',
                message=f'Part {i + 1} of {num_chunks} created',
                total_chunks=num_chunks,
                current_chunk=i + 1
            ))

        report(ChunkingProgress(
            stage='complete',
            message=f'Audio split into {num_chunks} parts',
            total_chunks=num_chunks,
            current_chunk=num_chunks
        ))

        return chunks

    def _extract_segment(
        self,
        input_path: str,
        output_path: str,
        start_time: float,
        duration: float
    ) -> None:
        """
        Extract one segment using ffmpeg stream copy.

        Raises:
            ChunkingError: If ffmpeg fails, times out or is missing
        """
        cmd = [
            self.ffmpeg_command,
            '-y',
            '-hide_banner',
            '-loglevel', 'error',
            '-ss', f"{start_time:.3f}",
            '-i', input_path,
            '-t', f"{duration:.3f}",
            '-vn',
            '-c:a', 'copy',
            output_path
        ]
        self.logger.debug(f"Extracting segment: {' '.join(cmd)}")

        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            stderr_output = (e.stderr or "").strip()
            self.logger.error(
                f"ffmpeg failed with return code {e.returncode} when extracting "
                f"{start_time:.0f}s+{duration:.0f}s from '{input_path}'"
            )
            if stderr_output:
                self.logger.error(f"ffmpeg stderr:\n{stderr_output}")
            raise ChunkingError(input_path, stderr_output or f"ffmpeg exited with code {e.returncode}")
        except subprocess.TimeoutExpired:
            raise ChunkingError(input_path, f"ffmpeg timed out after {self.timeout}s")
        except FileNotFoundError:
            raise ChunkingError(input_path, f"ffmpeg command not found: {self.ffmpeg_command}")

        self.logger.debug(f"Segment extracted: {output_path}")

    def _discard(self, chunks: List[AudioChunkInfo], failed_path: str) -> None:
        """Remove chunk files written before a failed extraction."""
        for path in [chunk.file_path for chunk in chunks] + [failed_path]:
            if not os.path.exists(path):
                continue
            try:
                os.remove(path)
            except OSError as e:
                self.logger.warning(str(CleanupWarning(path, str(e))))


def needs_chunking(duration: float) -> bool:
    """Return True if ``duration`` exceeds the configured segment limit."""
    return duration > MAX_CHUNK_DURATION


def get_max_chunk_duration() -> int:
    """Return the configured segment limit in seconds."""
    return MAX_CHUNK_DURATION


def split_into_chunks(
    input_path: str,
    output_dir: str,
    on_progress: Optional[ProgressCallback] = None
) -> List[AudioChunkInfo]:
    """Split ``input_path`` with a default AudioChunker."""
    return AudioChunker().split_into_chunks(input_path, output_dir, on_progress)
