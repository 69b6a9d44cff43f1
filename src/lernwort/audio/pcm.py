"""Decoding of raw 16-bit PCM speech payloads."""
import base64
import binascii
import re
from dataclasses import dataclass

import numpy as np

from lernwort.config import SPEECH_CHANNELS, SPEECH_SAMPLE_RATE
from lernwort.exceptions import DecodeError

DATA_URI_PREFIX = re.compile(r"^data:audio/[\w.+-]+;base64,")
WHITESPACE = re.compile(r"\s+")

SAMPLE_WIDTH = 2  # bytes per 16-bit sample
SAMPLE_SCALE = 32768.0


@dataclass
class AudioBuffer:
    """Decoded audio ready for playback.

    ``samples`` holds float32 values in [-1.0, 1.0) shaped (frames, channels).
    """
    samples: np.ndarray
    sample_rate: int

    @property
    def frames(self) -> int:
        return self.samples.shape[0]

    @property
    def channels(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frames / self.sample_rate


def decode_base64(payload: str) -> bytes:
    """Turn a base64 payload, optionally a data URI, into raw bytes."""
    if not payload:
        raise DecodeError("Empty audio payload")
    clean = WHITESPACE.sub("", DATA_URI_PREFIX.sub("", payload.strip()))
    try:
        return base64.b64decode(clean, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Audio payload is not valid base64: {e}") from e


def decode_pcm16(
    data: bytes,
    sample_rate: int = SPEECH_SAMPLE_RATE,
    channels: int = SPEECH_CHANNELS,
) -> AudioBuffer:
    """Decode interleaved little-endian signed 16-bit samples.

    A trailing partial frame is dropped.
    """
    if channels <= 0:
        raise DecodeError(f"Channel count must be positive, got {channels}")
    if sample_rate <= 0:
        raise DecodeError(f"Sample rate must be positive, got {sample_rate}")
    if not data:
        raise DecodeError("Empty PCM data")

    frame_count = len(data) // (SAMPLE_WIDTH * channels)
    usable = data[:frame_count * SAMPLE_WIDTH * channels]
    samples = np.frombuffer(usable, dtype="<i2").astype(np.float32) / SAMPLE_SCALE
    return AudioBuffer(samples=samples.reshape(frame_count, channels), sample_rate=sample_rate)
