"""Unit tests for the ffprobe-based audio prober."""

import subprocess
import pytest
from unittest.mock import patch

from conftest import completed, ffprobe_json
from exceptions import ProbeError
from transcription.audio_prober import AudioProber, probe_audio
from transcription.models import AudioMetadata


@pytest.mark.unit
class TestAudioProber:
    """Test AudioProber class."""

    @patch('transcription.audio_prober.subprocess.run')
    def test_probe_success(self, mock_run):
        """Test metadata parsed from ffprobe JSON."""
        mock_run.return_value = completed(stdout=ffprobe_json(2100.5, sample_rate="48000", channels=2))

        metadata = AudioProber().probe("/uploads/voice.m4a")

        assert metadata == AudioMetadata(
            duration=2100.5,
            format_name="mov,mp4,m4a,3gp,3g2,mj2",
            sample_rate=48000,
            channels=2
        )

    @patch('transcription.audio_prober.subprocess.run')
    def test_probe_command(self, mock_run):
        """Test ffprobe is invoked with JSON output and the file path last."""
        mock_run.return_value = completed(stdout=ffprobe_json(10))

        AudioProber(ffprobe_command="/opt/bin/ffprobe", timeout=5).probe("/uploads/voice.m4a")

        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "/opt/bin/ffprobe"
        assert "-show_format" in cmd
        assert cmd[cmd.index('-print_format') + 1] == 'json'
        assert cmd[-1] == "/uploads/voice.m4a"
        assert mock_run.call_args[1]['timeout'] == 5

    @patch('transcription.audio_prober.subprocess.run')
    def test_probe_without_streams(self, mock_run):
        """Test optional stream details stay None when absent."""
        mock_run.return_value = completed(stdout='{"format": {"duration": "12.0", "format_name": "ogg"}}')

        metadata = AudioProber().probe("/uploads/voice.ogg")

        assert metadata.duration == 12.0
        assert metadata.format_name == "ogg"
        assert metadata.sample_rate is None
        assert metadata.channels is None

    @patch('transcription.audio_prober.subprocess.run')
    def test_missing_format_name(self, mock_run):
        """Test format name defaults to 'unknown'."""
        mock_run.return_value = completed(stdout='{"format": {"duration": "3.5"}}')
        assert AudioProber().probe("/x.webm").format_name == "unknown"

    @patch('transcription.audio_prober.subprocess.run')
    def test_ffprobe_failure_raises_probe_error(self, mock_run):
        """Test unreadable files raise ProbeError with ffprobe's stderr."""
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ['ffprobe'], output="", stderr="/uploads/broken.m4a: Invalid data found when processing input"
        )

        with pytest.raises(ProbeError) as exc_info:
            AudioProber().probe("/uploads/broken.m4a")

        assert exc_info.value.file_path == "/uploads/broken.m4a"
        assert "Invalid data found" in exc_info.value.details

    @pytest.mark.parametrize("duration_json", [
        '{"format": {}}',
        '{"format": {"duration": "N/A"}}',
        '{"format": {"duration": "0.000000"}}',
        '{}',
    ])
    @patch('transcription.audio_prober.subprocess.run')
    def test_unusable_duration_raises_probe_error(self, mock_run, duration_json):
        """Test missing, non-numeric or zero durations raise ProbeError."""
        mock_run.return_value = completed(stdout=duration_json)

        with pytest.raises(ProbeError, match="Could not determine audio duration"):
            AudioProber().probe("/uploads/empty.m4a")

    @patch('transcription.audio_prober.subprocess.run')
    def test_invalid_json_raises_probe_error(self, mock_run):
        """Test garbage output raises ProbeError."""
        mock_run.return_value = completed(stdout="not json")

        with pytest.raises(ProbeError, match="Invalid ffprobe output"):
            AudioProber().probe("/uploads/voice.m4a")

    @patch('transcription.audio_prober.subprocess.run')
    def test_timeout_raises_probe_error(self, mock_run):
        """Test ffprobe timeout raises ProbeError."""
        mock_run.side_effect = subprocess.TimeoutExpired(['ffprobe'], 30)

        with pytest.raises(ProbeError, match="timed out"):
            AudioProber().probe("/uploads/voice.m4a")

    @patch('transcription.audio_prober.subprocess.run')
    def test_missing_binary_raises_probe_error(self, mock_run):
        """Test missing ffprobe binary raises ProbeError."""
        mock_run.side_effect = FileNotFoundError("ffprobe")

        with pytest.raises(ProbeError, match="command not found"):
            AudioProber().probe("/uploads/voice.m4a")

    @patch('transcription.audio_prober.subprocess.run')
    def test_probe_audio_helper(self, mock_run):
        """Test module-level helper."""
        mock_run.return_value = completed(stdout=ffprobe_json(61))
        assert probe_audio("/uploads/voice.m4a").duration == 61
