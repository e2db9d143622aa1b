#!/usr/bin/env python3
"""
Value types shared by the prober, chunker, providers and orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Tag carried by failed results."""

    PROBE = "probe_failed"
    CHUNKING = "chunking_failed"
    MISSING_CREDENTIALS = "missing_credentials"
    PROVIDER_REQUEST = "provider_request_failed"
    FILE_READ = "file_read_failed"


@dataclass
class AudioMetadata:
    """Basic facts about an audio file as reported by ffprobe."""

    duration: float
    format_name: str
    sample_rate: Optional[int] = None
    channels: Optional[int] = None


@dataclass
class AudioChunkInfo:
    """One time-bounded segment of a recording.

    ``file_path`` is either a temporary file owned by the job or, when the
    recording was short enough, the caller's original file.
    """

    file_path: str
    start_time: float
    duration: float
    index: int


@dataclass
class ChunkingProgress:
    """Checkpoint reported while a file is analyzed and split."""

    stage: str  # 'analyzing', 'splitting' or 'complete'
    message: str
    total_chunks: Optional[int] = None
    current_chunk: Optional[int] = None


@dataclass
class TranscriptionOptions:
    """Provider selection and hints for a transcription request."""

    model: str
    language: Optional[str] = None
    prompt: Optional[str] = None
    glossary: List[str] = field(default_factory=list)


@dataclass
class TranscriptionResult:
    """Outcome of transcribing one audio buffer."""

    text: str
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str) -> 'TranscriptionResult':
        return cls(text="", error_kind=kind, error_detail=detail)


@dataclass
class TranscribeFileResult:
    """Outcome of transcribing a whole file, possibly in several chunks.

    ``duration`` is 0 when the file could not be probed.
    """

    text: str
    duration: float
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None
    chunks_completed: int = 0
    chunks_total: int = 0

    @property
    def ok(self) -> bool:
        return self.error_kind is None
