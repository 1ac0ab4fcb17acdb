"""Local audio inspection: metadata only, no decoding."""

from salute_speech.audio.metadata import AudioMetadata, read_audio_metadata

__all__ = ["AudioMetadata", "read_audio_metadata"]
