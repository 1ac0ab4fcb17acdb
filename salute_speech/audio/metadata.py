"""Read the sample rate and channel count of an audio file.

WHY: The recognition request must state the audio's sample rate and channel
count. Nothing else about the audio is decoded locally.

HOW: WAV files are read with the standard ``wave`` module. Every other
format is probed with ``ffprobe`` (JSON output) when it is on PATH.

RULES:
- Raises ValueError when the file is missing or cannot be probed
- Only the first audio stream is considered
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import wave
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class AudioMetadata:
    """Sample rate and channel count needed by the recognition request."""

    sample_rate: int
    channels_count: int


def _read_wav(path: Path) -> AudioMetadata:
    with wave.open(str(path), "rb") as wf:
        return AudioMetadata(sample_rate=wf.getframerate(), channels_count=wf.getnchannels())


def _probe(path: Path) -> AudioMetadata:
    ffprobe = shutil.which("ffprobe")
    if not ffprobe:
        raise ValueError(
            "Reading metadata of {} requires `ffprobe` (install ffmpeg).".format(path.name)
        )

    cmd = [
        ffprobe,
        "-v",
        "error",
        "-select_streams",
        "a:0",
        "-show_entries",
        "stream=sample_rate,channels",
        "-of",
        "json",
        str(path),
    ]
    try:
        proc = subprocess.run(cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode("utf-8", "ignore") if e.stderr else ""
        raise ValueError(
            "ffprobe failed for {}: {}".format(path.name, stderr.strip() or "unknown error")
        ) from e

    try:
        streams = json.loads(proc.stdout.decode("utf-8") or "{}").get("streams") or []
    except (AttributeError, ValueError) as e:
        raise ValueError("Unreadable ffprobe output for {}".format(path.name)) from e
    if not streams:
        raise ValueError("No audio stream found in {}".format(path.name))

    try:
        stream = streams[0]
        return AudioMetadata(
            sample_rate=int(stream["sample_rate"]),
            channels_count=int(stream["channels"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(
            "ffprobe reported no usable sample rate/channel count for {}".format(path.name)
        ) from e


def read_audio_metadata(path: Path) -> AudioMetadata:
    """Return the sample rate and channel count of the audio at *path*."""
    path = Path(path)
    if not path.is_file():
        raise ValueError("Audio file not found: {}".format(path))

    if path.suffix.lower() == ".wav":
        try:
            metadata = _read_wav(path)
        except wave.Error:
            # Non-PCM WAV (e.g. A-law) is not readable by wave; fall through to ffprobe.
            metadata = _probe(path)
        except EOFError as e:
            raise ValueError("Truncated or empty WAV file: {}".format(path.name)) from e
    else:
        metadata = _probe(path)

    logger.debug(
        "Audio %s: %d Hz, %d channel(s)", path.name, metadata.sample_rate, metadata.channels_count
    )
    return metadata
