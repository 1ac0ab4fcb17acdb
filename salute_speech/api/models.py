"""SaluteSpeech request and response dataclasses.

WHY: The SaluteSpeech REST API wraps most payloads in a {"status", "result"}
envelope. The downloaded transcript itself lives in core/transcript.py.
Typed dataclasses make these shapes explicit and catch field mismatches at
the boundary instead of deep in the pipeline.

HOW: Each dataclass maps 1:1 to an API JSON object. Factory methods
(from_dict) parse raw responses and raise KeyError, TypeError or
ValueError when the shape does not match. The client converts those into
the stage-specific error.

RULES:
- Token expiry is stored in seconds since the epoch (the wire value is ms)
- response_file_id is None until the task reaches DONE
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class AudioEncoding(str, enum.Enum):
    """Audio encodings accepted by the async recognition endpoint."""

    PCM_S16LE = "PCM_S16LE"
    OPUS = "OPUS"
    MP3 = "MP3"
    FLAC = "FLAC"
    ALAW = "ALAW"
    MULAW = "MULAW"

    def content_type(self, sample_rate: int | None = None) -> str:
        """MIME type sent with the raw upload for this encoding.

        Raw PCM carries its sample rate in the MIME parameters.
        """
        content_type = _CONTENT_TYPES[self]
        if self is AudioEncoding.PCM_S16LE and sample_rate:
            content_type += f";rate={sample_rate}"
        return content_type


_CONTENT_TYPES = {
    AudioEncoding.PCM_S16LE: "audio/x-pcm;bit=16",
    AudioEncoding.OPUS: "audio/ogg;codecs=opus",
    AudioEncoding.MP3: "audio/mpeg",
    AudioEncoding.FLAC: "audio/flac",
    AudioEncoding.ALAW: "audio/pcma",
    AudioEncoding.MULAW: "audio/pcmu",
}

TASK_DONE = "DONE"
TASK_FAILED_STATUSES = frozenset({"ERROR", "CANCELED"})


def _result(data: dict) -> dict:
    result = data["result"]
    if not isinstance(result, dict):
        raise TypeError(f"expected an object in 'result', got {type(result).__name__}")
    return result


def _require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"expected a string in '{key}', got {type(value).__name__}")
    return value


@dataclass
class SaluteToken:
    """Short-lived bearer token returned by the OAuth endpoint.

    RULES:
    - expires_at is seconds since the epoch
    - A token is stale once now passes expires_at minus the safety margin
    """

    access_token: str
    expires_at: float

    @classmethod
    def from_dict(cls, data: dict) -> SaluteToken:
        return cls(
            access_token=_require_str(data, "access_token"),
            expires_at=float(data["expires_at"]) / 1000.0,
        )

    def is_stale(self, now: float, margin: float) -> bool:
        return now > self.expires_at - margin


@dataclass
class UploadResult:
    """Opaque handle for audio uploaded via POST /data:upload."""

    request_file_id: str

    @classmethod
    def from_dict(cls, data: dict) -> UploadResult:
        return cls(request_file_id=_require_str(_result(data), "request_file_id"))


@dataclass
class RecognitionJob:
    """Task descriptor returned by POST /speech:async_recognize.

    WHY: Every status query must reference the same task id, so the job is
    kept as a typed object rather than a loose dict.

    RULES:
    - status is a service-defined string (NEW, RUNNING, DONE, ERROR, ...)
    - created_at/updated_at are passed through as received
    """

    id: str
    status: str
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> RecognitionJob:
        result = _result(data)
        return cls(
            id=_require_str(result, "id"),
            status=_require_str(result, "status"),
            created_at=result.get("created_at"),
            updated_at=result.get("updated_at"),
        )


@dataclass
class RecognitionStatus(RecognitionJob):
    """Task state returned by GET /task:get.

    RULES:
    - response_file_id is only present once status is DONE
    - error is only present for failed tasks
    """

    response_file_id: str | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> RecognitionStatus:
        result = _result(data)
        return cls(
            id=_require_str(result, "id"),
            status=_require_str(result, "status"),
            created_at=result.get("created_at"),
            updated_at=result.get("updated_at"),
            response_file_id=result.get("response_file_id"),
            error=result.get("error"),
        )

    @property
    def is_done(self) -> bool:
        return self.status == TASK_DONE

    @property
    def is_failed(self) -> bool:
        return self.status in TASK_FAILED_STATUSES


@dataclass
class SpeakerSeparationOptions:
    """Optional speaker separation settings for the recognition request.

    RULES:
    - count is fixed at 2 by the service
    - Serialised into options.speaker_separation_options
    """

    enable: bool = True
    enable_only_main_speaker: bool = False
    count: int = 2

    def to_dict(self) -> dict:
        return {
            "enable": self.enable,
            "enable_only_main_speaker": self.enable_only_main_speaker,
            "count": self.count,
        }
