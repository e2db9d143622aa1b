#!/usr/bin/env python3
"""
End-to-end transcription of a local audio file.

Flow: probe -> split if longer than the segment limit -> transcribe each
chunk in order -> merge -> delete temporary chunks. Chunks are transcribed one
at a time so a job never has more than one request in flight against a
rate-limited provider.
"""

import os
import logging
from typing import Callable, List, Optional

from config import TranscriberConfig
from exceptions import ChunkingError, ProbeError
from resource_managers import temporary_chunk_dir
from .audio_chunker import AudioChunker
from .audio_prober import AudioProber
from .merger import cleanup_chunks, format_duration, merge_transcriptions
from .models import (
    AudioChunkInfo,
    ChunkingProgress,
    ErrorKind,
    TranscribeFileResult,
    TranscriptionOptions,
)
from .providers import (
    TranscriptionProvider,
    create_provider,
    is_deepgram_model,
    is_whisper_model,
    resolve_language,
)

ProgressCallback = Callable[[str], None]
ProviderFactory = Callable[[str, TranscriberConfig], TranscriptionProvider]


class TranscriptionOrchestrator:
    """Runs the probe, chunk, transcribe, merge and cleanup steps for one file."""

    def __init__(
        self,
        config: Optional[TranscriberConfig] = None,
        prober: Optional[AudioProber] = None,
        chunker: Optional[AudioChunker] = None,
        provider_factory: ProviderFactory = create_provider
    ):
        """
        Initialize orchestrator.

        Args:
            config: Pipeline configuration (read from env if None)
            prober: Audio prober (built from config if None)
            chunker: Audio chunker (built from config if None)
            provider_factory: Callable returning the adapter for a model id
        """
        self.logger = logging.getLogger(__name__)
        self.config = config or TranscriberConfig.from_env(validate=False)
        self.prober = prober or AudioProber(
            ffprobe_command=self.config.ffprobe_command,
            timeout=self.config.ffprobe_timeout
        )
        self.chunker = chunker or AudioChunker(
            prober=self.prober,
            ffmpeg_command=self.config.ffmpeg_command,
            max_chunk_duration=self.config.max_chunk_duration,
            timeout=self.config.ffmpeg_timeout
        )
        self.provider_factory = provider_factory

    def transcribe_audio_file(
        self,
        file_path: str,
        mime_type: str,
        model: str,
        uploads_dir: Optional[str] = None,
        language: Optional[str] = None,
        prompt: Optional[str] = None,
        glossary: Optional[List[str]] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> TranscribeFileResult:
        """
        Transcribe an audio file, splitting it first when it is too long.

        The original file is never modified or deleted. Chunk files created
        for this call are removed before it returns, whatever the outcome.

        Args:
            file_path: Path to the recording
            mime_type: MIME type sent to the provider
            model: Transcription model id (selects the provider)
            uploads_dir: Root under which temp/{id}/ chunk dirs are created
            language: Language code (model default if None)
            prompt: Free-text prompt (only used by OpenAI models)
            glossary: Spelling hints (Deepgram keyterms, OpenAI prompt)
            on_progress: Optional callback receiving progress messages

        Returns:
            TranscribeFileResult with the merged text, or with error_kind set
        """
        log = self._progress_logger(on_progress)
        uploads_dir = uploads_dir or self.config.uploads_dir
        options = TranscriptionOptions(
            model=model,
            language=language,
            prompt=prompt,
            glossary=list(glossary or [])
        )
        provider = self.provider_factory(model, self.config)

        log(f"Starting transcription with model: {model} ({provider.name})")
        log(f"Language: {resolve_language(model, language)}")

        audio_duration = 0.0
        chunks: List[AudioChunkInfo] = []

        with temporary_chunk_dir(uploads_dir) as temp_dir:
            try:
                # Probe; an unreadable duration means a single pass over the whole file
                try:
                    audio_duration = self.prober.probe(file_path).duration
                    log(f"Audio duration: {format_duration(audio_duration)} ({audio_duration:.1f}s)")
                except ProbeError as e:
                    self.logger.warning(f"{e}")
                    log("Could not analyze audio duration, proceeding without chunking")
                    chunks = [AudioChunkInfo(file_path=file_path, start_time=0, duration=0, index=0)]

                if not chunks:
                    if self.chunker.needs_chunking(audio_duration):
                        log(
                            f"Audio is longer than {format_duration(self.chunker.max_chunk_duration)}, "
                            f"splitting into chunks..."
                        )
                        try:
                            chunks = self.chunker.split_into_chunks(
                                file_path,
                                temp_dir,
                                on_progress=lambda progress: self._log_chunking(log, progress),
                                duration=audio_duration
                            )
                        except ChunkingError as e:
                            self.logger.error(f"{e}")
                            return TranscribeFileResult(
                                text='',
                                duration=audio_duration,
                                error_kind=ErrorKind.CHUNKING,
                                error_detail=str(e)
                            )
                        log(f"Audio split into {len(chunks)} chunks")
                    else:
                        chunks = [AudioChunkInfo(
                            file_path=file_path,
                            start_time=0,
                            duration=audio_duration,
                            index=0
                        )]
                        log("Audio is short enough, no chunking needed")

                self._log_hint_handling(log, options)

                return self._transcribe_chunks(chunks, mime_type, options, provider, audio_duration, log)

            finally:
                cleanup_chunks(chunks, file_path)

    def _transcribe_chunks(
        self,
        chunks: List[AudioChunkInfo],
        mime_type: str,
        options: TranscriptionOptions,
        provider: TranscriptionProvider,
        audio_duration: float,
        log: ProgressCallback
    ) -> TranscribeFileResult:
        """Transcribe chunks in index order, stopping at the first failure."""
        transcriptions = []
        total = len(chunks)
        log(f"Number of chunks to transcribe: {total}")

        for chunk in sorted(chunks, key=lambda c: c.index):
            log(
                f"Transcribing chunk {chunk.index + 1}/{total} "
                f"(start: {format_duration(chunk.start_time)}, "
                f"duration: {format_duration(chunk.duration)})"
            )

            try:
                with open(chunk.file_path, 'rb') as f:
                    audio_bytes = f.read()
            except OSError as e:
                self.logger.error(f"Could not read chunk {chunk.file_path}: {e}")
                return TranscribeFileResult(
                    text='',
                    duration=audio_duration,
                    error_kind=ErrorKind.FILE_READ,
                    error_detail=f"Could not read audio file {chunk.file_path}: {e}",
                    chunks_completed=len(transcriptions),
                    chunks_total=total
                )

            result = provider.transcribe(
                audio_bytes,
                os.path.basename(chunk.file_path),
                mime_type,
                options
            )

            if not result.ok:
                # Partial text is dropped; a garbled transcript is worse than none
                log(f"Chunk {chunk.index + 1}/{total} failed: {result.error_kind.value}")
                return TranscribeFileResult(
                    text='',
                    duration=audio_duration,
                    error_kind=result.error_kind,
                    error_detail=result.error_detail,
                    chunks_completed=len(transcriptions),
                    chunks_total=total
                )

            log(f"Chunk {chunk.index + 1} transcribed successfully, text length: {len(result.text)}")
            transcriptions.append(result.text)

        merged = merge_transcriptions(transcriptions)
        log(f"Merged {len(transcriptions)} transcriptions, total length: {len(merged)}")

        return TranscribeFileResult(
            text=merged,
            duration=audio_duration,
            chunks_completed=len(transcriptions),
            chunks_total=total
        )

    def _progress_logger(self, on_progress: Optional[ProgressCallback]) -> ProgressCallback:
        """Return a function that logs a message and forwards it to ``on_progress``."""
        def log(message: str) -> None:
            self.logger.info(message)
            if on_progress:
                on_progress(message)
        return log

    @staticmethod
    def _log_chunking(log: ProgressCallback, progress: ChunkingProgress) -> None:
        log(f"[Chunking] {progress.message}")

    @staticmethod
    def _log_hint_handling(log: ProgressCallback, options: TranscriptionOptions) -> None:
        """Report which prompt/glossary hints the selected provider will use."""
        if is_whisper_model(options.model):
            if options.prompt or options.glossary:
                log("Note: prompt and glossary ignored for TogetherAI Whisper (causes hallucinations)")
        elif is_deepgram_model(options.model):
            if options.glossary:
                log(f"Deepgram keyterms: {', '.join(options.glossary)}")
        elif options.prompt:
            log(f"Custom transcription prompt: {options.prompt[:100]}")


def transcribe_audio_file(
    file_path: str,
    mime_type: str,
    model: str,
    uploads_dir: str,
    language: Optional[str] = None,
    prompt: Optional[str] = None,
    glossary: Optional[List[str]] = None,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[TranscriberConfig] = None
) -> TranscribeFileResult:
    """Transcribe ``file_path`` with a default TranscriptionOrchestrator."""
    orchestrator = TranscriptionOrchestrator(config=config)
    return orchestrator.transcribe_audio_file(
        file_path,
        mime_type,
        model,
        uploads_dir=uploads_dir,
        language=language,
        prompt=prompt,
        glossary=glossary,
        on_progress=on_progress
    )
