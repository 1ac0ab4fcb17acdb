"""SaluteSpeech API client package: async HTTP interface to the recognition service.

WHY: Token exchange, upload, task creation, polling and download are all
remote calls with their own failure modes. This package keeps every one of
them behind SaluteSpeechClient and its typed errors.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response data is parsed
into typed dataclasses defined in models.py; failures raise the exceptions
defined in errors.py.

RULES:
- All HTTP calls go through SaluteSpeechClient (no direct httpx usage elsewhere)
- Token requests use Basic auth, every other call uses the bearer token
"""

from salute_speech.api.client import SaluteSpeechClient
from salute_speech.api.errors import (
    AuthError,
    RecognitionFailedError,
    RecognitionStartError,
    RecognitionTimeoutError,
    ResultFetchError,
    SaluteSpeechError,
    TransportError,
    UploadError,
)
from salute_speech.api.models import AudioEncoding, SpeakerSeparationOptions
from salute_speech.core.transcript import SpeechToTextResult

__all__ = [
    "AudioEncoding",
    "AuthError",
    "RecognitionFailedError",
    "RecognitionStartError",
    "RecognitionTimeoutError",
    "ResultFetchError",
    "SaluteSpeechClient",
    "SaluteSpeechError",
    "SpeakerSeparationOptions",
    "SpeechToTextResult",
    "TransportError",
    "UploadError",
]
