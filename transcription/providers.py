#!/usr/bin/env python3
"""
Speech-to-text provider adapters.

Three provider families sit behind one interface:

- Together AI, which hosts open Whisper models (aggregator)
- Deepgram, a dedicated speech API with keyterm boosting
- OpenAI's transcription endpoint (vendor-direct), which honors free-text prompts

Each adapter turns an audio buffer into a TranscriptionResult. Failures come
back as tagged results rather than exceptions, and nothing is retried.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

import requests

from config import (
    DEEPGRAM_LISTEN_URL,
    DEFAULT_LANGUAGE,
    OPENAI_TRANSCRIPTION_URL,
    TOGETHERAI_TRANSCRIPTION_URL,
    TRANSCRIPTION_REQUEST_TIMEOUT,
    TranscriberConfig,
)
from exceptions import MissingCredentialsError, ProviderRequestError
from .models import ErrorKind, TranscriptionOptions, TranscriptionResult


# Supported transcription models by provider
WHISPER_MODELS = ('openai/whisper-large-v3',)
DEEPGRAM_MODELS = ('deepgram/nova-3',)
OPENAI_MODELS = ('gpt-4o-transcribe', 'gpt-4o-mini-transcribe', 'whisper-1')

ALL_TRANSCRIPTION_MODELS = WHISPER_MODELS + DEEPGRAM_MODELS + OPENAI_MODELS
DEFAULT_TRANSCRIPTION_MODEL = WHISPER_MODELS[0]

# Default language codes per model
DEFAULT_MODEL_LANGUAGES = {
    'openai/whisper-large-v3': 'de',
    'deepgram/nova-3': 'de-CH',
    'gpt-4o-transcribe': 'de',
    'gpt-4o-mini-transcribe': 'de',
    'whisper-1': 'de',
}


class ProviderKind(str, Enum):
    """Closed set of provider families."""

    AGGREGATOR = "togetherai"
    DEEPGRAM = "deepgram"
    OPENAI = "openai"


def is_whisper_model(model: str) -> bool:
    return model in WHISPER_MODELS


def is_deepgram_model(model: str) -> bool:
    return model in DEEPGRAM_MODELS


def provider_kind_for(model: str) -> ProviderKind:
    """Map a model id to its provider family; unknown ids go to OpenAI."""
    if is_deepgram_model(model):
        return ProviderKind.DEEPGRAM
    if is_whisper_model(model):
        return ProviderKind.AGGREGATOR
    return ProviderKind.OPENAI


def resolve_language(model: str, language: Optional[str] = None) -> str:
    """Return ``language`` or the model's default, falling back to German."""
    return language or DEFAULT_MODEL_LANGUAGES.get(model) or DEFAULT_LANGUAGE


def build_transcription_prompt(
    prompt: Optional[str] = None,
    glossary: Optional[List[str]] = None
) -> Optional[str]:
    """
    Combine a free-text prompt and glossary terms into one prompt string.

    Args:
        prompt: User prompt text
        glossary: Terms the transcript should spell correctly

    Returns:
        "<prompt> Glossar: term1, term2" (either part may be absent), or None
    """
    parts = []

    if prompt and prompt.strip():
        parts.append(prompt.strip())

    terms = _clean_terms(glossary)
    if terms:
        parts.append(f"Glossar: {', '.join(terms)}")

    return ' '.join(parts) if parts else None


def _clean_terms(glossary: Optional[List[str]]) -> List[str]:
    return [term.strip() for term in (glossary or []) if term and term.strip()]


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ''


class TranscriptionProvider(ABC):
    """Base class for provider adapters."""

    kind: ProviderKind
    name: str
    env_var: str

    def __init__(self, api_key: Optional[str], timeout: int = TRANSCRIPTION_REQUEST_TIMEOUT):
        """
        Initialize provider adapter.

        Args:
            api_key: Credential for the provider (None if not configured)
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def transcribe(
        self,
        audio_bytes: bytes,
        filename: str,
        mime_type: str,
        options: TranscriptionOptions
    ) -> TranscriptionResult:
        """
        Transcribe one audio buffer.

        Args:
            audio_bytes: Encoded audio
            filename: Name reported to the provider
            mime_type: MIME type of ``audio_bytes``
            options: Model, language and hints

        Returns:
            TranscriptionResult with text, or with error_kind/error_detail set
        """
        language = resolve_language(options.model, options.language)

        try:
            if not self.api_key:
                raise MissingCredentialsError(self.name, self.env_var)

            self.logger.info(
                f"Transcribing {filename} ({len(audio_bytes) / (1024 * 1024):.1f} MB) "
                f"via {self.name}: model={options.model}, language={language}"
            )
            text = self._request(audio_bytes, filename, mime_type, options, language)

        except MissingCredentialsError as e:
            self.logger.error(str(e))
            return TranscriptionResult.failure(ErrorKind.MISSING_CREDENTIALS, str(e))
        except ProviderRequestError as e:
            self.logger.error(str(e))
            return TranscriptionResult.failure(ErrorKind.PROVIDER_REQUEST, str(e))

        return TranscriptionResult(text=text or '')

    @abstractmethod
    def _request(
        self,
        audio_bytes: bytes,
        filename: str,
        mime_type: str,
        options: TranscriptionOptions,
        language: str
    ) -> str:
        """Send the request and return the transcript text."""

    def _post_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """
        POST to the provider and decode the JSON body.

        Raises:
            ProviderRequestError: On network errors, non-2xx responses or a
                body that is not a JSON object
        """
        try:
            response = requests.post(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ProviderRequestError(self.name, str(e))

        if not response.ok:
            raise ProviderRequestError(self.name, response.text, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderRequestError(
                self.name, f"Invalid JSON response: {e}", response.status_code
            )

        if not isinstance(body, dict):
            raise ProviderRequestError(
                self.name, f"Unexpected response: {response.text}", response.status_code
            )
        return body


class AggregatorWhisperProvider(TranscriptionProvider):
    """Whisper models hosted by Together AI.

    Prompt and glossary are never sent: this Whisper deployment tends to
    write glossary words into the transcript that were never spoken.
    """

    kind = ProviderKind.AGGREGATOR
    name = "TogetherAI"
    env_var = "TOGETHERAI_API_KEY"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: int = TRANSCRIPTION_REQUEST_TIMEOUT,
        url: str = TOGETHERAI_TRANSCRIPTION_URL
    ):
        super().__init__(api_key, timeout)
        self.url = url

    def _request(self, audio_bytes, filename, mime_type, options, language):
        if options.prompt or options.glossary:
            self.logger.debug("Prompt and glossary not sent to TogetherAI Whisper")

        data = self._post_json(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            data={"model": options.model, "language": language},
            files={"file": (filename, audio_bytes, mime_type)},
        )
        return _as_text(data.get('text'))


class DeepgramProvider(TranscriptionProvider):
    """Deepgram prerecorded transcription with keyterm boosting."""

    kind = ProviderKind.DEEPGRAM
    name = "Deepgram"
    env_var = "DEEPGRAM_API_KEY"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: int = TRANSCRIPTION_REQUEST_TIMEOUT,
        url: str = DEEPGRAM_LISTEN_URL
    ):
        super().__init__(api_key, timeout)
        self.url = url

    def build_params(self, options: TranscriptionOptions, language: str) -> List[Tuple[str, str]]:
        """Query parameters for the listen endpoint; one ``keyterm`` per glossary term."""
        params = [
            ('model', options.model.split('/', 1)[-1]),
            ('language', language),
            ('smart_format', 'true'),
            ('mip_opt_out', 'true'),  # opt out of Deepgram's model improvement program
        ]
        params.extend(('keyterm', term) for term in _clean_terms(options.glossary))
        return params

    def _request(self, audio_bytes, filename, mime_type, options, language):
        data = self._post_json(
            self.url,
            params=self.build_params(options, language),
            headers={
                "Authorization": f"Token {self.api_key}",
                "Content-Type": mime_type,
            },
            data=audio_bytes,
        )

        try:
            return _as_text(data['results']['channels'][0]['alternatives'][0]['transcript'])
        except (KeyError, IndexError, TypeError):
            return ''


class OpenAIProvider(TranscriptionProvider):
    """OpenAI transcription endpoint; prompt and glossary go into ``prompt``."""

    kind = ProviderKind.OPENAI
    name = "OpenAI"
    env_var = "OPENAI_API_KEY"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: int = TRANSCRIPTION_REQUEST_TIMEOUT,
        url: str = OPENAI_TRANSCRIPTION_URL
    ):
        super().__init__(api_key, timeout)
        self.url = url

    def _request(self, audio_bytes, filename, mime_type, options, language):
        form = {"model": options.model, "language": language}

        prompt = build_transcription_prompt(options.prompt, options.glossary)
        if prompt:
            form["prompt"] = prompt

        data = self._post_json(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            data=form,
            files={"file": (filename, audio_bytes, mime_type)},
        )
        return _as_text(data.get('text'))


PROVIDER_CLASSES: Dict[ProviderKind, Type[TranscriptionProvider]] = {
    provider_class.kind: provider_class
    for provider_class in (AggregatorWhisperProvider, DeepgramProvider, OpenAIProvider)
}

# TranscriberConfig attribute holding each provider's key
_CONFIG_KEYS = {
    ProviderKind.AGGREGATOR: 'togetherai_api_key',
    ProviderKind.DEEPGRAM: 'deepgram_api_key',
    ProviderKind.OPENAI: 'openai_api_key',
}


def create_provider(model: str, config: Optional[TranscriberConfig] = None) -> TranscriptionProvider:
    """
    Build the adapter responsible for ``model``.

    Args:
        model: Transcription model id
        config: Configuration supplying API keys and timeouts (read from env if None)

    Returns:
        Provider adapter instance
    """
    if config is None:
        config = TranscriberConfig.from_env(validate=False)

    kind = provider_kind_for(model)
    provider_class = PROVIDER_CLASSES[kind]
    return provider_class(
        api_key=getattr(config, _CONFIG_KEYS[kind]),
        timeout=config.request_timeout,
    )


def transcribe_buffer(
    audio_bytes: bytes,
    filename: str,
    mime_type: str,
    options: TranscriptionOptions,
    config: Optional[TranscriberConfig] = None
) -> TranscriptionResult:
    """Transcribe one audio buffer with the provider selected by ``options.model``."""
    return create_provider(options.model, config).transcribe(
        audio_bytes, filename, mime_type, options
    )
