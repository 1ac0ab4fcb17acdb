"""Configuration constants, endpoint defaults, and .env loading.

WHY: Centralizes every configurable value (endpoints, OAuth scope, model,
polling limits, TLS policy) so it is easy to find, update, and override
without touching client logic.

HOW: python-dotenv loads the .env file on import. Constants are module-level
values read from environment variables with sensible defaults. The
load_auth_key() function gives a clear error when credentials are missing.

RULES:
- Credentials are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- Time values are in seconds
"""

from __future__ import annotations

import base64
import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

SALUTE_SPEECH_BASE_URL = os.getenv(
    "SALUTE_SPEECH_BASE_URL", "https://smartspeech.sber.ru/rest/v1"
)
SALUTE_SPEECH_TOKEN_URL = os.getenv(
    "SALUTE_SPEECH_TOKEN_URL", "https://ngw.devices.sberbank.ru:9443/api/v2/oauth"
)

# ---------------------------------------------------------------------------
# Recognition defaults
# ---------------------------------------------------------------------------

TOKEN_SCOPE = os.getenv("SALUTE_SPEECH_SCOPE", "SALUTE_SPEECH_PERS")
RECOGNITION_MODEL = os.getenv("SALUTE_SPEECH_MODEL", "general")

MAX_WAIT_TIME_S = float(os.getenv("SALUTE_SPEECH_MAX_WAIT_S", "300"))
"""Polling ceiling, also used as the token freshness margin."""

RECOGNITION_POLLING_DELAY_S = float(os.getenv("SALUTE_SPEECH_POLL_DELAY_S", "2"))


def _load_verify() -> bool | str:
    ca_bundle = os.getenv("SALUTE_SPEECH_CA_BUNDLE", "").strip()
    if ca_bundle:
        return ca_bundle
    return os.getenv("SALUTE_SPEECH_VERIFY_SSL", "true").lower() == "true"


VERIFY_SSL = _load_verify()
"""TLS verification for httpx: True, False, or a CA bundle path."""


def build_auth_key(client_id: str, client_secret: str) -> str:
    """Encode client credentials as the Basic authorization key."""
    raw = "{}:{}".format(client_id, client_secret).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def load_auth_key() -> str:
    """Load the SaluteSpeech authorization key from the environment.

    WHY: The key is required for every token exchange. Loading it from the
    environment (via .env) keeps it out of source code.

    HOW: Reads SALUTE_SPEECH_AUTH_KEY. If absent, builds the key from
    SALUTE_SPEECH_CLIENT_ID and SALUTE_SPEECH_CLIENT_SECRET.

    RULES:
    - Raises ValueError if no usable credentials are configured
    - Never returns a default/placeholder value
    """
    key = os.getenv("SALUTE_SPEECH_AUTH_KEY", "").strip()
    if key:
        return key

    client_id = os.getenv("SALUTE_SPEECH_CLIENT_ID", "").strip()
    client_secret = os.getenv("SALUTE_SPEECH_CLIENT_SECRET", "").strip()
    if client_id and client_secret:
        return build_auth_key(client_id, client_secret)

    raise ValueError(
        "SaluteSpeech credentials not configured. Add SALUTE_SPEECH_AUTH_KEY "
        "(or SALUTE_SPEECH_CLIENT_ID and SALUTE_SPEECH_CLIENT_SECRET) to the .env file."
    )


# ---------------------------------------------------------------------------
# File extension → default audio encoding
# ---------------------------------------------------------------------------

EXTENSION_ENCODINGS: dict[str, str] = {
    ".wav": "PCM_S16LE",
    ".mp3": "MP3",
    ".flac": "FLAC",
    ".ogg": "OPUS",
    ".opus": "OPUS",
}
"""Encoding assumed for a file when the caller does not name one (lowercase, with dot)."""
