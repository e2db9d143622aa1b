#!/usr/bin/env python3
"""
Configuration module for the voice transcription pipeline.
Centralizes all configuration values for easier testing and maintenance.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)

# Directory paths
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "./uploads")
TEMP_SUBDIR = "temp"

# External command settings
FFMPEG_COMMAND = os.getenv("FFMPEG_COMMAND", "ffmpeg")
FFPROBE_COMMAND = os.getenv("FFPROBE_COMMAND", "ffprobe")
FFPROBE_TIMEOUT = int(os.getenv("FFPROBE_TIMEOUT", "30"))
FFMPEG_TIMEOUT = int(os.getenv("FFMPEG_TIMEOUT", "300"))

# Chunking settings
# 20 minutes keeps every segment safely under the providers' ~1400s upload limit
MAX_CHUNK_DURATION = int(os.getenv("MAX_CHUNK_DURATION", "1200"))
DEFAULT_CHUNK_EXTENSION = ".m4a"

# Transcription settings
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "openai/whisper-large-v3")
TRANSCRIPTION_REQUEST_TIMEOUT = int(os.getenv("TRANSCRIPTION_REQUEST_TIMEOUT", "600"))
DEFAULT_LANGUAGE = "de"

# Provider endpoints
TOGETHERAI_TRANSCRIPTION_URL = "https://api.together.xyz/v1/audio/transcriptions"
DEEPGRAM_LISTEN_URL = "https://api.deepgram.com/v1/listen"
OPENAI_TRANSCRIPTION_URL = "https://api.openai.com/v1/audio/transcriptions"

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "./logs")

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class TranscriberConfig:
    """
    Type-safe configuration with validation.

    This dataclass provides a validated, type-safe interface to the pipeline
    configuration. It ensures all required settings are present and valid before
    a transcription job starts.
    """

    # Directory paths
    uploads_dir: str

    # External command settings
    ffmpeg_command: str
    ffprobe_command: str
    ffprobe_timeout: int
    ffmpeg_timeout: int

    # Chunking settings
    max_chunk_duration: int

    # Transcription settings
    transcription_model: str
    request_timeout: int

    # Provider API keys
    togetherai_api_key: Optional[str]
    deepgram_api_key: Optional[str]
    openai_api_key: Optional[str]

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "./logs"

    @classmethod
    def from_env(cls, validate: bool = True) -> 'TranscriberConfig':
        """
        Create a TranscriberConfig instance from environment variables.

        Values are read at call time so tests and long-running callers pick up
        changes to the environment.

        Args:
            validate: Run validate() before returning (creates UPLOADS_DIR)

        Returns:
            TranscriberConfig: Validated configuration instance

        Raises:
            ValueError: If any configuration validation fails
        """
        config = cls(
            uploads_dir=os.getenv("UPLOADS_DIR", UPLOADS_DIR),
            ffmpeg_command=os.getenv("FFMPEG_COMMAND", FFMPEG_COMMAND),
            ffprobe_command=os.getenv("FFPROBE_COMMAND", FFPROBE_COMMAND),
            ffprobe_timeout=int(os.getenv("FFPROBE_TIMEOUT", str(FFPROBE_TIMEOUT))),
            ffmpeg_timeout=int(os.getenv("FFMPEG_TIMEOUT", str(FFMPEG_TIMEOUT))),
            max_chunk_duration=int(os.getenv("MAX_CHUNK_DURATION", str(MAX_CHUNK_DURATION))),
            transcription_model=os.getenv("TRANSCRIPTION_MODEL", TRANSCRIPTION_MODEL),
            request_timeout=int(os.getenv(
                "TRANSCRIPTION_REQUEST_TIMEOUT", str(TRANSCRIPTION_REQUEST_TIMEOUT)
            )),
            togetherai_api_key=os.getenv("TOGETHERAI_API_KEY") or None,
            deepgram_api_key=os.getenv("DEEPGRAM_API_KEY") or None,
            openai_api_key=(
                os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY_TRANSCRIBE") or None
            ),
            log_level=os.getenv("LOG_LEVEL", LOG_LEVEL),
            log_dir=os.getenv("LOG_DIR", LOG_DIR),
        )

        if validate:
            config.validate()

        return config

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ValueError: If any validation check fails with a descriptive message
        """
        errors = []

        # Validate uploads directory
        if not self.uploads_dir:
            errors.append("UPLOADS_DIR must not be empty")
        else:
            uploads_path = Path(self.uploads_dir)
            # Create the directory if it doesn't exist
            try:
                uploads_path.mkdir(parents=True, exist_ok=True)
                # Check if it's writable
                test_file = uploads_path / ".write_test"
                try:
                    test_file.touch()
                    test_file.unlink()
                except (OSError, PermissionError) as e:
                    errors.append(f"UPLOADS_DIR '{self.uploads_dir}' is not writable: {e}")
            except (OSError, PermissionError) as e:
                errors.append(f"Cannot create UPLOADS_DIR '{self.uploads_dir}': {e}")

        # Validate chunking settings
        if self.max_chunk_duration <= 0:
            errors.append(
                f"MAX_CHUNK_DURATION must be positive (got {self.max_chunk_duration})"
            )

        # Validate timeouts
        if self.ffprobe_timeout <= 0:
            errors.append(f"FFPROBE_TIMEOUT must be positive (got {self.ffprobe_timeout})")
        if self.ffmpeg_timeout <= 0:
            errors.append(f"FFMPEG_TIMEOUT must be positive (got {self.ffmpeg_timeout})")
        if self.request_timeout <= 0:
            errors.append(
                f"TRANSCRIPTION_REQUEST_TIMEOUT must be positive (got {self.request_timeout})"
            )

        # Validate external commands
        if not self.ffmpeg_command:
            errors.append("FFMPEG_COMMAND must not be empty")
        if not self.ffprobe_command:
            errors.append("FFPROBE_COMMAND must not be empty")

        if not self.transcription_model:
            errors.append("TRANSCRIPTION_MODEL must not be empty")

        # Validate log level
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"LOG_LEVEL must be one of {VALID_LOG_LEVELS} (got '{self.log_level}')"
            )

        # If there are any errors, raise a ValueError with all error messages
        if errors:
            error_message = "Configuration validation failed:\n" + "\n".join(
                f"  - {error}" for error in errors
            )
            logger.error(error_message)
            raise ValueError(error_message)

        logger.debug("Configuration validation passed")


def validate_config() -> TranscriberConfig:
    """
    Convenience function to validate configuration from environment.

    Returns:
        TranscriberConfig: Validated configuration instance

    Raises:
        ValueError: If any configuration validation fails
    """
    return TranscriberConfig.from_env()
