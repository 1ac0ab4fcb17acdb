"""Transcript dataclasses: the downloaded result and the final text.

WHY: The recognition download is a bare JSON array of segments, each with
an ordered list of text fragments. The aggregator consumes this structure
and produces SpeechToTextResult, the only thing callers see.

HOW: RecognitionResult.from_list parses the array; every nested object has
its own from_dict. Shape mismatches raise KeyError or TypeError.

RULES:
- Segment and fragment order is preserved exactly as received
- normalized_text is passed through as the service provides it
"""

from __future__ import annotations

from dataclasses import dataclass, field


def _str_field(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError("expected a string in '{}', got {}".format(key, type(value).__name__))
    return value


@dataclass
class RecognitionFragment:
    """One recognized piece of text with its normalized variant."""

    text: str
    normalized_text: str

    @classmethod
    def from_dict(cls, data: dict) -> RecognitionFragment:
        return cls(
            text=_str_field(data, "text"),
            normalized_text=_str_field(data, "normalized_text"),
        )


@dataclass
class RecognitionSegment:
    """An utterance in the downloaded result, holding ordered fragments."""

    results: list[RecognitionFragment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> RecognitionSegment:
        results = data["results"]
        if not isinstance(results, list):
            raise TypeError("expected a list in 'results'")
        return cls(results=[RecognitionFragment.from_dict(r) for r in results])


@dataclass
class RecognitionResult:
    """Full downloaded recognition result: an ordered list of segments."""

    segments: list[RecognitionSegment] = field(default_factory=list)

    @classmethod
    def from_list(cls, data: list) -> RecognitionResult:
        if not isinstance(data, list):
            raise TypeError("expected a JSON array of segments, got {}".format(type(data).__name__))
        return cls(segments=[RecognitionSegment.from_dict(s) for s in data])


@dataclass
class SpeechToTextResult:
    """Final transcript returned to callers."""

    text: str
    normalized_text: str

    def to_dict(self) -> dict:
        return {"text": self.text, "normalizedText": self.normalized_text}
