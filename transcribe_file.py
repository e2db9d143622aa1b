#!/usr/bin/env python3
"""
Script to transcribe a single audio file from the command line.

Long recordings are split into chunks automatically. The transcript is printed
to stdout or written to --output.
"""

import os
import sys
import logging
import argparse
import mimetypes
from typing import List, Optional

from tqdm import tqdm

from config import TranscriberConfig
from logging_config import setup_logging
from transcription import ALL_TRANSCRIPTION_MODELS, TranscriptionOrchestrator

logger = logging.getLogger(__name__)


def guess_mime_type(file_path: str) -> str:
    """Guess the audio MIME type from the file extension."""
    mime_type, _ = mimetypes.guess_type(file_path)
    if mime_type:
        return mime_type
    extension = os.path.splitext(file_path)[1].lstrip('.').lower() or 'm4a'
    return f"audio/{extension}"


def parse_glossary(value: Optional[str]) -> List[str]:
    """Split a comma-separated glossary argument into terms."""
    if not value:
        return []
    return [term.strip() for term in value.split(',') if term.strip()]


def build_parser(default_model: str, default_uploads_dir: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Transcribe an audio file, splitting long recordings')
    parser.add_argument('audio_file', help='Path to the audio file')
    parser.add_argument('--model', default=default_model,
                        help=f'Transcription model (default: {default_model}; '
                             f'known: {", ".join(ALL_TRANSCRIPTION_MODELS)})')
    parser.add_argument('--language', default=None,
                        help='Language code, e.g. de or de-CH (default: per model)')
    parser.add_argument('--prompt', default=None,
                        help='Free-text prompt (OpenAI models only)')
    parser.add_argument('--glossary', default=None,
                        help='Comma-separated terms to spell correctly')
    parser.add_argument('--mime-type', default=None,
                        help='MIME type sent to the provider (default: guessed from extension)')
    parser.add_argument('--uploads-dir', default=default_uploads_dir,
                        help=f'Root for temporary chunk files (default: {default_uploads_dir})')
    parser.add_argument('--output', default=None,
                        help='Write the transcript to this file instead of stdout')
    parser.add_argument('--quiet', action='store_true',
                        help='Disable the progress bar and console logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a transcription from command line arguments.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    try:
        config = TranscriberConfig.from_env()
    except ValueError as e:
        print(e, file=sys.stderr)
        return 1

    args = build_parser(config.transcription_model, config.uploads_dir).parse_args(argv)

    setup_logging(log_level=config.log_level, log_dir=config.log_dir, console_output=not args.quiet)

    if not os.path.isfile(args.audio_file):
        logger.error(f"Audio file not found: {args.audio_file}")
        return 1

    pbar = tqdm(
        desc="Transcribing",
        unit=" steps",
        bar_format="{desc} [{elapsed}]",
        disable=args.quiet
    )

    def on_progress(message: str) -> None:
        pbar.set_description_str(message[:80])
        pbar.update(1)

    orchestrator = TranscriptionOrchestrator(config=config)
    try:
        result = orchestrator.transcribe_audio_file(
            args.audio_file,
            args.mime_type or guess_mime_type(args.audio_file),
            args.model,
            uploads_dir=args.uploads_dir,
            language=args.language,
            prompt=args.prompt,
            glossary=parse_glossary(args.glossary),
            on_progress=on_progress
        )
    finally:
        pbar.close()

    if not result.ok:
        logger.error(f"Transcription failed ({result.error_kind.value}): {result.error_detail}")
        if result.chunks_total > 1:
            logger.error(f"Chunks completed before failure: {result.chunks_completed}/{result.chunks_total}")
        return 1

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(result.text + '\n')
        logger.info(f"Transcript written to {args.output}")
    else:
        print(result.text)

    logger.info(f"Transcribed {result.duration:.1f}s of audio in {result.chunks_total} chunk(s)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
