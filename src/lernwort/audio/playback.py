"""Process-wide audio output."""
import asyncio
import logging
from typing import Any, Callable, Optional

import numpy as np

from lernwort.audio.pcm import AudioBuffer
from lernwort.config import SPEECH_CHANNELS, SPEECH_SAMPLE_RATE

logger = logging.getLogger(__name__)

StreamFactory = Callable[..., Any]


def _open_output_stream(**kwargs: Any) -> Any:
    # PortAudio is only loaded once something is actually played
    import sounddevice as sd

    return sd.OutputStream(**kwargs)


class AudioPlaybackContext:
    """Single output stream shared by every player in the process.

    The stream is opened on first use and sits in the ``suspended`` state
    whenever nothing is playing; :meth:`play` resumes it first.
    """

    RUNNING = "running"
    SUSPENDED = "suspended"
    CLOSED = "closed"

    def __init__(
        self,
        sample_rate: int = SPEECH_SAMPLE_RATE,
        channels: int = SPEECH_CHANNELS,
        device: Optional[str] = None,
        stream_factory: Optional[StreamFactory] = None,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self._stream_factory = stream_factory or _open_output_stream
        self._stream: Optional[Any] = None
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self.state = self.SUSPENDED

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def acquire(self) -> "AudioPlaybackContext":
        """Open the output stream if it is not open yet."""
        if self.state == self.CLOSED:
            raise RuntimeError("Audio playback context is closed")
        if self._stream is None:
            self._stream = self._stream_factory(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                device=self.device,
            )
            self.state = self.SUSPENDED
            logger.info(f"Audio output opened at {self.sample_rate} Hz, {self.channels} channel(s)")
        return self

    def resume(self) -> None:
        """Start the output stream."""
        self.acquire()
        if self.state == self.SUSPENDED:
            self._stream.start()
            self.state = self.RUNNING

    def suspend(self) -> None:
        """Stop the output stream once queued audio has played."""
        if self._stream is not None and self.state == self.RUNNING:
            self._stream.stop()
            self.state = self.SUSPENDED

    async def play(self, buffer: AudioBuffer) -> None:
        """Play a decoded buffer and return once it has finished."""
        if buffer.sample_rate != self.sample_rate or buffer.channels != self.channels:
            raise ValueError(
                f"Buffer format {buffer.sample_rate} Hz/{buffer.channels} ch does not match "
                f"output {self.sample_rate} Hz/{self.channels} ch"
            )

        async with self._get_lock():
            self.acquire()
            if self.state == self.SUSPENDED:
                self.resume()
            try:
                await asyncio.to_thread(self._write_and_drain, buffer.samples)
            finally:
                self.state = self.SUSPENDED

    def _get_lock(self) -> asyncio.Lock:
        # asyncio locks belong to one loop, so a new loop gets a fresh lock
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _write_and_drain(self, samples: np.ndarray) -> None:
        self._stream.write(np.ascontiguousarray(samples, dtype=np.float32))
        self._stream.stop()

    def close(self) -> None:
        """Release the audio device."""
        if self._stream is not None:
            self._stream.close()
            self._stream = None
            logger.info("Audio output closed")
        self.state = self.CLOSED
