#!/usr/bin/env python3
"""
Transcription package for the voice transcription pipeline.

This package provides modular transcription services:
- Audio metadata probing with ffprobe
- Splitting long recordings into stream-copied segments
- Speech-to-text through TogetherAI, Deepgram or OpenAI
- Sequential orchestration, transcript merging and chunk cleanup
"""

from .audio_prober import AudioProber, probe_audio
from .audio_chunker import AudioChunker, needs_chunking, split_into_chunks, get_max_chunk_duration
from .merger import merge_transcriptions, cleanup_chunks, format_duration
from .models import (
    AudioMetadata,
    AudioChunkInfo,
    ChunkingProgress,
    ErrorKind,
    TranscriptionOptions,
    TranscriptionResult,
    TranscribeFileResult,
)
from .providers import (
    ALL_TRANSCRIPTION_MODELS,
    DEFAULT_TRANSCRIPTION_MODEL,
    ProviderKind,
    TranscriptionProvider,
    AggregatorWhisperProvider,
    DeepgramProvider,
    OpenAIProvider,
    build_transcription_prompt,
    create_provider,
    transcribe_buffer,
)
from .orchestrator import TranscriptionOrchestrator, transcribe_audio_file

__all__ = [
    'AudioProber',
    'probe_audio',
    'AudioChunker',
    'needs_chunking',
    'split_into_chunks',
    'get_max_chunk_duration',
    'merge_transcriptions',
    'cleanup_chunks',
    'format_duration',
    'AudioMetadata',
    'AudioChunkInfo',
    'ChunkingProgress',
    'ErrorKind',
    'TranscriptionOptions',
    'TranscriptionResult',
    'TranscribeFileResult',
    'ALL_TRANSCRIPTION_MODELS',
    'DEFAULT_TRANSCRIPTION_MODEL',
    'ProviderKind',
    'TranscriptionProvider',
    'AggregatorWhisperProvider',
    'DeepgramProvider',
    'OpenAIProvider',
    'build_transcription_prompt',
    'create_provider',
    'transcribe_buffer',
    'TranscriptionOrchestrator',
    'transcribe_audio_file',
]
