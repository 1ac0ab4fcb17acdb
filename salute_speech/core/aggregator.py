"""Flatten a downloaded recognition result into plain transcript text.

WHY: The service returns the transcript as segments of fragments, each
fragment carrying raw and normalized text. Callers want two flat strings.

HOW: Walks segments and fragments in order, prefixing every fragment with a
single space, then strips the ends of the full concatenation. Raw text and
normalized text are built independently.

RULES:
- Segment and fragment order is preserved
- No deduplication, reordering, or normalization beyond the service's own
- An empty result yields two empty strings
"""

from __future__ import annotations

from salute_speech.core.transcript import RecognitionResult, SpeechToTextResult


def _join(pieces) -> str:
    acc = ""
    for piece in pieces:
        acc += " " + piece
    return acc.strip()


def aggregate(result: RecognitionResult) -> SpeechToTextResult:
    """Build the final SpeechToTextResult from a RecognitionResult."""
    fragments = [fragment for segment in result.segments for fragment in segment.results]
    return SpeechToTextResult(
        text=_join(f.text for f in fragments),
        normalized_text=_join(f.normalized_text for f in fragments),
    )
