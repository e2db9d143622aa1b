#!/usr/bin/env python3
"""
Audio metadata probing via ffprobe.
"""

import json
import logging
import subprocess
from typing import Any, Dict, Optional

from config import FFPROBE_COMMAND, FFPROBE_TIMEOUT
from exceptions import ProbeError
from .models import AudioMetadata


class AudioProber:
    """Reads duration and stream info from local audio files."""

    def __init__(self, ffprobe_command: str = FFPROBE_COMMAND, timeout: int = FFPROBE_TIMEOUT):
        """
        Initialize audio prober.

        Args:
            ffprobe_command: Path to the ffprobe binary
            timeout: Seconds to wait for ffprobe before giving up
        """
        self.ffprobe_command = ffprobe_command
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def probe(self, file_path: str) -> AudioMetadata:
        """
        Inspect an audio file.

        Args:
            file_path: Path to the audio file

        Returns:
            AudioMetadata with total duration and first-stream details

        Raises:
            ProbeError: If the file cannot be opened or has no usable duration
        """
        try:
            result = subprocess.run(
                [
                    self.ffprobe_command,
                    '-v', 'error',
                    '-print_format', 'json',
                    '-show_format',
                    '-show_streams',
                    file_path
                ],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True
            )
        except subprocess.CalledProcessError as e:
            stderr_output = (e.stderr or "").strip()
            raise ProbeError(
                file_path,
                stderr_output or f"ffprobe exited with code {e.returncode}"
            )
        except subprocess.TimeoutExpired:
            raise ProbeError(file_path, f"ffprobe timed out after {self.timeout}s")
        except FileNotFoundError:
            raise ProbeError(file_path, f"ffprobe command not found: {self.ffprobe_command}")

        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ProbeError(file_path, f"Invalid ffprobe output: {e}")

        return self._parse_metadata(file_path, data)

    def _parse_metadata(self, file_path: str, data: Dict[str, Any]) -> AudioMetadata:
        """Build AudioMetadata from ffprobe's JSON document."""
        fmt = data.get('format') or {}
        duration = _to_float(fmt.get('duration'))
        if duration is None or duration <= 0:
            raise ProbeError(file_path, "Could not determine audio duration")

        streams = data.get('streams') or []
        first_stream = streams[0] if streams else {}

        metadata = AudioMetadata(
            duration=duration,
            format_name=fmt.get('format_name') or 'unknown',
            sample_rate=_to_int(first_stream.get('sample_rate')),
            channels=_to_int(first_stream.get('channels')),
        )
        self.logger.debug(
            f"Probed {file_path}: {metadata.duration:.2f}s, format={metadata.format_name}"
        )
        return metadata


def _to_float(value: Any) -> Optional[float]:
    # ffprobe reports numbers as strings ("1234.567000")
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def probe_audio(file_path: str, ffprobe_command: str = FFPROBE_COMMAND) -> AudioMetadata:
    """Probe ``file_path`` with a default AudioProber."""
    return AudioProber(ffprobe_command=ffprobe_command).probe(file_path)
