"""Custom exception types for the voice transcription pipeline.

This module defines a hierarchy of domain-specific exceptions that provide
clear error handling and improved debugging capabilities.

Exception Hierarchy:
    TranscriberError (base)
    ├── AudioError
    │   ├── ProbeError
    │   └── ChunkingError
    └── TranscriptionError
        ├── MissingCredentialsError
        └── ProviderRequestError

    CleanupWarning (UserWarning, logged only)
"""

from typing import Optional

class TranscriberError(Exception):
    """Base exception for all transcriber errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception with a message and optional details.

        Args:
            message: Human-readable error message
            details: Additional technical details about the error
        """
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message."""
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


# Audio Errors
class AudioError(TranscriberError):
    """Base class for audio inspection and splitting errors."""
    pass

class ProbeError(AudioError):
    """Raised when an audio file cannot be inspected or has no usable duration."""

    def __init__(self, file_path: str = None, error: str = None):
        """Initialize with optional file path and error details.

        Args:
            file_path: Path to the audio file being probed
            error: Error details from ffprobe
        """
        self.file_path = file_path
        message = "Failed to analyze audio file"
        if file_path:
            message += f": {file_path}"
        super().__init__(message, error)

class ChunkingError(AudioError):
    """Raised when an audio file cannot be split into segments."""

    def __init__(self, file_path: str = None, error: str = None):
        """Initialize with optional file path and error details.

        Args:
            file_path: Path to the audio file being split
            error: Error details from ffmpeg
        """
        self.file_path = file_path
        message = "Failed to extract audio segment"
        if file_path:
            message += f" from {file_path}"
        super().__init__(message, error)

# Transcription Errors
class TranscriptionError(TranscriberError):
    """Base class for speech-to-text provider errors."""
    pass

class MissingCredentialsError(TranscriptionError):
    """Raised when the API key for the selected provider is not configured."""

    def __init__(self, provider: str, env_var: str):
        """Initialize with provider name and the missing environment variable.

        Args:
            provider: Name of the provider that needs the credential
            env_var: Environment variable expected to hold the key
        """
        self.provider = provider
        self.env_var = env_var
        super().__init__(f"Missing {env_var}", f"required by provider '{provider}'")

class ProviderRequestError(TranscriptionError):
    """Raised when a provider request fails or returns an error response."""

    def __init__(self, provider: str, error: str = None, status_code: Optional[int] = None):
        """Initialize with provider name, error body and optional HTTP status.

        Args:
            provider: Name of the provider that failed
            error: Raw response body or exception message
            status_code: HTTP status code if a response was received
        """
        self.provider = provider
        self.status_code = status_code
        message = f"{provider} transcription failed"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        super().__init__(message, error)

class CleanupWarning(UserWarning):
    """Describes a temporary file that could not be removed.

    Never raised by the pipeline; instances are formatted into log records.
    """

    def __init__(self, path: str, error: str = None):
        self.path = path
        self.error = error
        message = f"Failed to clean up {path}"
        if error:
            message += f": {error}"
        super().__init__(message)
