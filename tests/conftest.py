"""Pytest configuration and shared fixtures."""

import json
import subprocess

import pytest

from config import TranscriberConfig

PROVIDER_ENV_VARS = (
    'TOGETHERAI_API_KEY',
    'DEEPGRAM_API_KEY',
    'OPENAI_API_KEY',
    'OPENAI_API_KEY_TRANSCRIBE',
)


@pytest.fixture(autouse=True)
def clear_provider_keys(monkeypatch):
    """Keep real API keys from the developer's shell out of tests."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def uploads_dir(tmp_path):
    """Provide a temporary uploads root."""
    path = tmp_path / "uploads"
    path.mkdir()
    return str(path)


@pytest.fixture
def audio_file(tmp_path):
    """Provide a small stand-in recording on disk."""
    path = tmp_path / "recording.m4a"
    path.write_bytes(b"fake m4a audio bytes")
    return str(path)


@pytest.fixture
def test_config(uploads_dir, tmp_path):
    """Provide a configuration with all provider keys set."""
    return TranscriberConfig(
        uploads_dir=uploads_dir,
        ffmpeg_command="ffmpeg",
        ffprobe_command="ffprobe",
        ffprobe_timeout=30,
        ffmpeg_timeout=300,
        max_chunk_duration=1200,
        transcription_model="openai/whisper-large-v3",
        request_timeout=60,
        togetherai_api_key="together-test-key",
        deepgram_api_key="deepgram-test-key",
        openai_api_key="openai-test-key",
        log_level="INFO",
        log_dir=str(tmp_path / "logs"),
    )


def ffprobe_json(duration, format_name="mov,mp4,m4a,3gp,3g2,mj2", sample_rate="44100", channels=1):
    """Build ffprobe -print_format json output for a single audio stream."""
    return json.dumps({
        'streams': [{
            'index': 0,
            'codec_type': 'audio',
            'codec_name': 'aac',
            'sample_rate': sample_rate,
            'channels': channels,
        }],
        'format': {
            'format_name': format_name,
            'duration': None if duration is None else f"{duration:.6f}",
        },
    })


def completed(stdout="", stderr="", returncode=0, args=None):
    """Build a subprocess.CompletedProcess for mocked subprocess.run calls."""
    return subprocess.CompletedProcess(args=args or [], returncode=returncode, stdout=stdout, stderr=stderr)
