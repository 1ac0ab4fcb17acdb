"""Pure transcript processing (no network access)."""

from salute_speech.core.aggregator import aggregate
from salute_speech.core.transcript import (
    RecognitionFragment,
    RecognitionResult,
    RecognitionSegment,
    SpeechToTextResult,
)

__all__ = [
    "RecognitionFragment",
    "RecognitionResult",
    "RecognitionSegment",
    "SpeechToTextResult",
    "aggregate",
]
