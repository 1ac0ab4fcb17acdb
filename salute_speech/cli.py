"""Command-line interface for the SaluteSpeech recognition client.

WHY: Users need a simple way to transcribe an audio file from the terminal
without writing any async code.

HOW: Uses argparse to accept an input file and an optional encoding, runs
SaluteSpeechClient.speech_to_text() via asyncio.run(), and prints the
transcript to stdout. Status messages go to stderr so the output can be
piped.

RULES:
- Positional argument: input audio file path
- --encoding defaults to the encoding implied by the file extension
- --normalized prints normalized text instead of raw text
- --json prints {"text", "normalizedText"}
- Exit code 1 on recognition errors, 2 on bad input or missing credentials
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from salute_speech.api.client import SaluteSpeechClient
from salute_speech.api.errors import SaluteSpeechError
from salute_speech.api.models import AudioEncoding, SpeakerSeparationOptions
from salute_speech.config import EXTENSION_ENCODINGS
from salute_speech.core.transcript import SpeechToTextResult


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str, code: int) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(code)


def resolve_encoding(input_path: Path, encoding: Optional[str]) -> AudioEncoding:
    """Pick the audio encoding from the flag or the file extension.

    RULES:
    - An explicit --encoding always wins
    - Unknown extensions without --encoding raise ValueError
    """
    if encoding:
        return AudioEncoding(encoding.upper())

    ext = input_path.suffix.lower()
    if ext not in EXTENSION_ENCODINGS:
        raise ValueError(
            "Cannot infer encoding for '{}'. Pass --encoding (one of: {}).".format(
                ext, ", ".join(e.value for e in AudioEncoding)
            )
        )
    return AudioEncoding(EXTENSION_ENCODINGS[ext])


def render(result: SpeechToTextResult, as_json: bool, normalized: bool) -> str:
    if as_json:
        return json.dumps(result.to_dict(), ensure_ascii=False)
    return result.normalized_text if normalized else result.text


async def _run(args: argparse.Namespace) -> SpeechToTextResult:
    input_path = Path(args.input_file).resolve()
    encoding = resolve_encoding(input_path, args.encoding)
    speaker_separation = SpeakerSeparationOptions() if args.speakers else None

    async with SaluteSpeechClient(session_id=args.session_id) as client:
        if not args.quiet:
            _status(f"Session {client.session_id}")
        return await client.speech_to_text(
            input_path,
            encoding,
            speaker_separation=speaker_separation,
            on_status=None if args.quiet else _status,
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="salute_speech",
        description="Transcribe an audio file with SaluteSpeech async recognition.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the audio file to transcribe.",
    )

    parser.add_argument(
        "--encoding",
        default=None,
        choices=[e.value for e in AudioEncoding],
        type=str.upper,
        help="Audio encoding (default: inferred from the file extension).",
    )

    parser.add_argument(
        "--normalized",
        action="store_true",
        help="Print normalized text instead of raw recognized text.",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print both texts as a JSON object.",
    )

    parser.add_argument(
        "--speakers",
        action="store_true",
        help="Enable speaker separation in the recognition request.",
    )

    parser.add_argument(
        "--session-id",
        default=None,
        help="Correlation id sent with token requests (default: random UUID).",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress status messages.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m salute_speech``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx debug output is connection-level noise
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    if not Path(args.input_file).is_file():
        _fail("File not found: {}".format(args.input_file), 2)

    try:
        result = asyncio.run(_run(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except SaluteSpeechError as e:
        _fail(str(e), 1)
    except ValueError as e:
        # Config errors (missing credentials, unknown encoding, unreadable metadata)
        _fail(str(e), 2)

    print(render(result, args.json, args.normalized))


if __name__ == "__main__":
    main()
