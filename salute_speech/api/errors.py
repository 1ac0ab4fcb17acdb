"""Exception hierarchy for the SaluteSpeech client.

WHY: Callers need typed exceptions to tell which stage of the recognition
workflow failed (auth, upload, start, polling, download) and whether the
failure came from the service or the network.

HOW: Every error derives from SaluteSpeechError, which carries the stage
name and an optional HTTP status code. Network failures raised by httpx are
wrapped in TransportError and chained with ``raise ... from``.

RULES:
- No error is retried or swallowed inside the client
- Message always starts with the stage name
"""

from __future__ import annotations


class SaluteSpeechError(Exception):
    """Base class for all client errors."""

    stage = "request"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            text = f"{self.stage} failed (HTTP {status_code}): {message}"
        else:
            text = f"{self.stage} failed: {message}"
        super().__init__(text)


class AuthError(SaluteSpeechError):
    """Raised when the token exchange does not return a token."""

    stage = "token exchange"


class UploadError(SaluteSpeechError):
    """Raised on a non-success upload response or malformed upload body."""

    stage = "upload"


class RecognitionStartError(SaluteSpeechError):
    """Raised when the async recognition task cannot be created."""

    stage = "recognition start"


class RecognitionTimeoutError(SaluteSpeechError, TimeoutError):
    """Raised when polling exceeds the maximum wait time.

    RULES:
    - Message includes the task id and elapsed time
    """

    stage = "recognition polling"


class RecognitionFailedError(SaluteSpeechError):
    """Raised when the task reaches a terminal failure status (ERROR, CANCELED)."""

    stage = "recognition"


class ResultFetchError(SaluteSpeechError):
    """Raised when the recognition result cannot be downloaded or parsed."""

    stage = "result download"


class TransportError(SaluteSpeechError):
    """Raised for network/HTTP failures not otherwise classified."""

    def __init__(self, message: str, status_code: int | None = None, stage: str | None = None) -> None:
        if stage:
            self.stage = stage
        super().__init__(message, status_code)
