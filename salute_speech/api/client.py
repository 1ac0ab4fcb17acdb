"""Async HTTP client for the SaluteSpeech asynchronous recognition API.

WHY: Turning an audio file into text takes five remote steps: exchange
credentials for a bearer token, upload the audio, start a recognition task,
poll the task until it finishes, and download the result. This module hides
that workflow behind a single client class so callers (CLI, tests, other
services) only deal with a file path and an encoding.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. SaluteSpeechClient is an
async context manager: enter it to open the connection pool, exit to close
it. Each API step is a separate method:
get_valid_token → upload_audio → start_recognition → wait_for_completion →
fetch_result, and speech_to_text() runs them in order and aggregates the
result.

RULES:
- Always use the async context manager (async with SaluteSpeechClient(...) as client:)
- Every call except the token exchange is authorized with the bearer token
- The token is refreshed only when needed, before each outgoing call
- Polling uses a fixed delay and a single wall-clock ceiling, no retries
- Any failure aborts the workflow; partial transcripts are never returned
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx

from salute_speech.api.errors import (
    AuthError,
    RecognitionFailedError,
    RecognitionStartError,
    RecognitionTimeoutError,
    ResultFetchError,
    TransportError,
    UploadError,
)
from salute_speech.api.models import (
    AudioEncoding,
    RecognitionJob,
    RecognitionStatus,
    SaluteToken,
    SpeakerSeparationOptions,
    UploadResult,
)
from salute_speech.audio.metadata import AudioMetadata, read_audio_metadata
from salute_speech.config import (
    MAX_WAIT_TIME_S,
    RECOGNITION_MODEL,
    RECOGNITION_POLLING_DELAY_S,
    SALUTE_SPEECH_BASE_URL,
    SALUTE_SPEECH_TOKEN_URL,
    TOKEN_SCOPE,
    VERIFY_SSL,
    load_auth_key,
)
from salute_speech.core.aggregator import aggregate
from salute_speech.core.transcript import RecognitionResult, SpeechToTextResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_DEFAULT_CONTENT_TYPE = "audio/mpeg"
_MALFORMED = (KeyError, TypeError, ValueError)


class SaluteSpeechClient:
    """Async client for the SaluteSpeech recognition workflow.

    WHY: Provides a typed interface for the full workflow: token → upload →
    start → poll → download → aggregate. Handles token caching, request
    building, and error classification.

    HOW: Wraps httpx.AsyncClient. The bearer token is cached on the instance
    and refreshed under an asyncio.Lock, so concurrent callers on the same
    client trigger at most one token exchange. Clock, sleep, metadata reader
    and HTTP transport are injectable for testing.

    RULES:
    - Use as: async with SaluteSpeechClient() as client: ...
    - auth_key defaults to load_auth_key() from .env
    - session_id is fixed for the lifetime of the instance
    - max_wait_s is both the polling ceiling and the token freshness margin
    """

    def __init__(
        self,
        auth_key: str | None = None,
        session_id: str | None = None,
        *,
        base_url: str | None = None,
        token_url: str | None = None,
        scope: str | None = None,
        model: str | None = None,
        max_wait_s: float | None = None,
        poll_delay_s: float | None = None,
        verify: bool | str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        metadata_reader: Callable[[Path], AudioMetadata] | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._auth_key = auth_key or load_auth_key()
        self.session_id = session_id or str(uuid.uuid4())
        self._base_url = (base_url or SALUTE_SPEECH_BASE_URL).rstrip("/")
        self._token_url = token_url or SALUTE_SPEECH_TOKEN_URL
        self._scope = scope or TOKEN_SCOPE
        self._model = model or RECOGNITION_MODEL
        self._max_wait_s = MAX_WAIT_TIME_S if max_wait_s is None else max_wait_s
        self._poll_delay_s = RECOGNITION_POLLING_DELAY_S if poll_delay_s is None else poll_delay_s
        self._verify = VERIFY_SSL if verify is None else verify
        self._transport = transport
        self._metadata_reader = metadata_reader or read_audio_metadata
        self._clock = clock or time.time
        self._sleep = sleep or asyncio.sleep

        self._token: SaluteToken | None = None
        self._token_lock: asyncio.Lock | None = None
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> SaluteSpeechClient:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(300.0, connect=30.0),
            verify=self._verify,
            transport=self._transport,
        )
        self._token_lock = asyncio.Lock()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "SaluteSpeechClient must be used as an async context manager: "
                "async with SaluteSpeechClient() as client: ..."
            )
        return self._client

    async def _send(self, stage: str, method: str, url: str, **kwargs) -> httpx.Response:
        """Issue one HTTP request, wrapping network failures in TransportError."""
        client = self._ensure_client()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__, stage=stage) from exc

    async def _bearer_headers(self) -> dict[str, str]:
        token = await self.get_valid_token()
        return {"Authorization": f"Bearer {token.access_token}"}

    # ------------------------------------------------------------------
    # Token management
    # ------------------------------------------------------------------

    async def get_valid_token(self) -> SaluteToken:
        """Return a fresh bearer token, exchanging credentials if needed.

        WHY: Every recognition call needs a bearer token, and tokens are
        short-lived. Exchanging credentials on every call would be wasteful.

        HOW: Returns the cached token unless it is missing or its expiry
        minus the max-wait margin has passed; then exchanges credentials and
        replaces the cached token. The check and refresh run under a lock.

        RULES:
        - Expiry is only checked here, never proactively during polling
        - Raises AuthError if the exchange does not yield a token
        """
        self._ensure_client()
        if self._token_lock is None:
            raise RuntimeError("SaluteSpeechClient token lock is not initialised; use async with")
        async with self._token_lock:
            if self._token is None or self._token.is_stale(self._clock(), self._max_wait_s):
                self._token = await self._exchange_token()
            return self._token

    async def _exchange_token(self) -> SaluteToken:
        resp = await self._send(
            AuthError.stage,
            "POST",
            self._token_url,
            data={"scope": self._scope},
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
                "RqUID": self.session_id,
                "Authorization": f"Basic {self._auth_key}",
            },
        )
        if not resp.is_success:
            raise AuthError(resp.text, resp.status_code)

        try:
            token = SaluteToken.from_dict(resp.json())
        except _MALFORMED as exc:
            raise AuthError("response did not contain an access token") from exc

        logger.info("Obtained access token (session %s)", self.session_id)
        return token

    # ------------------------------------------------------------------
    # Step 1: Upload audio
    # ------------------------------------------------------------------

    async def upload_audio(self, path: Path, content_type: str | None = None) -> UploadResult:
        """Upload raw audio bytes and return the request_file_id handle.

        RULES:
        - Body size is not capped by the client
        - The file is read before a token is requested
        - Raises UploadError when the file cannot be read, on non-2xx, or on
          malformed response bodies
        """
        path = Path(path)
        try:
            audio = path.read_bytes()
        except OSError as exc:
            raise UploadError(f"cannot read {path}: {exc.strerror or exc}") from exc

        headers = await self._bearer_headers()
        headers["Content-Type"] = content_type or _DEFAULT_CONTENT_TYPE

        resp = await self._send(
            UploadError.stage,
            "POST",
            f"{self._base_url}/data:upload",
            content=audio,
            headers=headers,
        )
        if not resp.is_success:
            raise UploadError(resp.text, resp.status_code)

        try:
            upload = UploadResult.from_dict(resp.json())
        except _MALFORMED as exc:
            raise UploadError(f"unexpected response body: {resp.text}") from exc

        logger.info("Uploaded %s as %s", path.name, upload.request_file_id)
        return upload

    # ------------------------------------------------------------------
    # Step 2: Start recognition
    # ------------------------------------------------------------------

    async def start_recognition(
        self,
        upload: UploadResult,
        sample_rate: int,
        channels_count: int,
        encoding: AudioEncoding,
        speaker_separation: SpeakerSeparationOptions | None = None,
    ) -> RecognitionJob:
        """Create an async recognition task for an uploaded file.

        WHY: Recognition runs server-side. The task descriptor returned here
        is what the polling stage queries.

        HOW: Builds the options object from the model, the caller's encoding
        and the audio metadata, and POSTs it with the upload handle.

        RULES:
        - Raises RecognitionStartError on non-2xx or malformed response bodies
        """
        options: dict = {
            "model": self._model,
            "audio_encoding": AudioEncoding(encoding).value,
            "sample_rate": sample_rate,
            "channels_count": channels_count,
        }
        if speaker_separation is not None:
            options["speaker_separation_options"] = speaker_separation.to_dict()

        body = {"options": options, "request_file_id": upload.request_file_id}
        headers = await self._bearer_headers()

        resp = await self._send(
            RecognitionStartError.stage,
            "POST",
            f"{self._base_url}/speech:async_recognize",
            json=body,
            headers=headers,
        )
        if not resp.is_success:
            raise RecognitionStartError(resp.text, resp.status_code)

        try:
            job = RecognitionJob.from_dict(resp.json())
        except _MALFORMED as exc:
            raise RecognitionStartError(f"unexpected response body: {resp.text}") from exc

        logger.info("Created recognition task %s (status %s)", job.id, job.status)
        return job

    # ------------------------------------------------------------------
    # Step 3: Poll until complete
    # ------------------------------------------------------------------

    async def get_recognition_status(self, job: RecognitionJob) -> RecognitionStatus:
        """Query the current state of a recognition task once."""
        headers = await self._bearer_headers()
        stage = RecognitionTimeoutError.stage

        resp = await self._send(
            stage,
            "GET",
            f"{self._base_url}/task:get",
            params={"id": job.id},
            headers=headers,
        )
        if not resp.is_success:
            raise TransportError(resp.text, resp.status_code, stage=stage)

        try:
            status = RecognitionStatus.from_dict(resp.json())
        except _MALFORMED as exc:
            raise TransportError(
                f"unexpected response body: {resp.text}", stage=stage
            ) from exc

        logger.debug("Task %s status: %s", job.id, status.status)
        return status

    async def wait_for_completion(
        self,
        job: RecognitionJob,
        on_status: Callable[[str], None] | None = None,
    ) -> RecognitionStatus:
        """Poll a recognition task until it is DONE.

        WHY: Async recognition is not instant; the task must be polled until
        the service reports DONE.

        HOW: Queries the status, then sleeps a fixed delay between queries.
        Elapsed time is measured from the first query and never reset.

        RULES:
        - Returns the RecognitionStatus when status is DONE
        - Raises RecognitionFailedError on ERROR or CANCELED
        - Raises RecognitionTimeoutError once elapsed time exceeds max_wait_s,
          without issuing another query
        - Status query failures propagate immediately, no retries
        """
        start_time = self._clock()
        status = await self.get_recognition_status(job)

        while not status.is_done:
            if status.is_failed:
                detail = f": {status.error}" if status.error else ""
                raise RecognitionFailedError(
                    f"task {job.id} ended with status {status.status}{detail}"
                )

            elapsed = self._clock() - start_time
            if elapsed > self._max_wait_s:
                raise RecognitionTimeoutError(
                    f"task {job.id} still {status.status} after {elapsed:.0f}s "
                    f"(limit: {self._max_wait_s:.0f}s)"
                )

            if on_status:
                on_status(f"Recognizing... ({status.status}, {elapsed:.0f}s elapsed)")

            await self._sleep(self._poll_delay_s)
            status = await self.get_recognition_status(job)

        logger.info("Recognition task %s done", job.id)
        return status

    # ------------------------------------------------------------------
    # Step 4: Fetch result
    # ------------------------------------------------------------------

    async def fetch_result(self, status: RecognitionStatus) -> RecognitionResult:
        """Download the recognition result referenced by a DONE status.

        RULES:
        - Only call after wait_for_completion returns
        - Raises ResultFetchError on non-2xx, missing response_file_id or
          malformed bodies
        """
        if not status.response_file_id:
            raise ResultFetchError(f"task {status.id} has no response_file_id")

        headers = await self._bearer_headers()
        resp = await self._send(
            ResultFetchError.stage,
            "GET",
            f"{self._base_url}/data:download",
            params={"response_file_id": status.response_file_id},
            headers=headers,
        )
        if not resp.is_success:
            raise ResultFetchError(resp.text, resp.status_code)

        try:
            return RecognitionResult.from_list(resp.json())
        except _MALFORMED as exc:
            raise ResultFetchError(f"unexpected response body: {resp.text}") from exc

    # ------------------------------------------------------------------
    # Full workflow
    # ------------------------------------------------------------------

    async def speech_to_text(
        self,
        path: Path,
        encoding: AudioEncoding,
        speaker_separation: SpeakerSeparationOptions | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> SpeechToTextResult:
        """Transcribe one audio file end to end.

        WHY: Most callers only want the text. This runs every stage once, in
        order, and returns the aggregated transcript.

        HOW: metadata → upload → start → poll → download → aggregate. Each
        stage obtains a valid token itself.

        RULES:
        - No retries across stages
        - Any stage error propagates unchanged
        """
        path = Path(path)
        encoding = AudioEncoding(encoding)

        metadata = self._metadata_reader(path)

        if on_status:
            on_status(f"Uploading {path.name}...")
        upload = await self.upload_audio(
            path, content_type=encoding.content_type(metadata.sample_rate)
        )

        if on_status:
            on_status("Starting recognition...")
        job = await self.start_recognition(
            upload,
            metadata.sample_rate,
            metadata.channels_count,
            encoding,
            speaker_separation=speaker_separation,
        )

        status = await self.wait_for_completion(job, on_status=on_status)

        if on_status:
            on_status("Downloading result...")
        result = await self.fetch_result(status)
        return aggregate(result)
