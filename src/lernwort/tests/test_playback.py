"""Tests for the shared audio playback context."""
import asyncio

import numpy as np
import pytest

from lernwort.audio.pcm import AudioBuffer
from lernwort.audio.playback import AudioPlaybackContext
from lernwort.tests.fakes import StreamRecorder


def make_buffer(frames: int = 240, sample_rate: int = 24000, channels: int = 1) -> AudioBuffer:
    return AudioBuffer(samples=np.zeros((frames, channels), dtype=np.float32), sample_rate=sample_rate)


def test_acquire_is_lazy_and_idempotent(stream_recorder: StreamRecorder) -> None:
    """The output stream is opened on first use only."""
    context = AudioPlaybackContext(stream_factory=stream_recorder)
    assert not context.is_open
    assert stream_recorder.streams == []

    assert context.acquire() is context
    context.acquire()

    assert len(stream_recorder.streams) == 1
    assert stream_recorder.stream.kwargs["samplerate"] == 24000
    assert stream_recorder.stream.kwargs["channels"] == 1
    assert context.state == AudioPlaybackContext.SUSPENDED


@pytest.mark.asyncio
async def test_play_resumes_suspended_stream(stream_recorder: StreamRecorder) -> None:
    """Playing starts the stream, writes the samples and drains it."""
    context = AudioPlaybackContext(stream_factory=stream_recorder)
    buffer = make_buffer()

    await context.play(buffer)

    stream = stream_recorder.stream
    assert stream.starts == 1
    assert len(stream.written) == 1
    assert stream.written[0].shape == (240, 1)
    assert stream.active is False
    assert context.state == AudioPlaybackContext.SUSPENDED


@pytest.mark.asyncio
async def test_consecutive_plays_share_one_stream(stream_recorder: StreamRecorder) -> None:
    context = AudioPlaybackContext(stream_factory=stream_recorder)

    await context.play(make_buffer())
    await context.play(make_buffer(frames=100))

    assert len(stream_recorder.streams) == 1
    assert stream_recorder.stream.starts == 2
    assert len(stream_recorder.stream.written) == 2


@pytest.mark.asyncio
async def test_play_rejects_mismatched_format(stream_recorder: StreamRecorder) -> None:
    context = AudioPlaybackContext(stream_factory=stream_recorder)

    with pytest.raises(ValueError):
        await context.play(make_buffer(sample_rate=16000))


def test_close_releases_stream(stream_recorder: StreamRecorder) -> None:
    context = AudioPlaybackContext(stream_factory=stream_recorder)
    context.acquire()

    context.close()

    assert stream_recorder.stream.closed is True
    assert context.state == AudioPlaybackContext.CLOSED
    with pytest.raises(RuntimeError):
        context.acquire()


def test_resume_and_suspend(stream_recorder: StreamRecorder) -> None:
    context = AudioPlaybackContext(stream_factory=stream_recorder)

    context.resume()
    context.resume()
    assert context.state == AudioPlaybackContext.RUNNING
    assert stream_recorder.stream.starts == 1

    context.suspend()
    assert context.state == AudioPlaybackContext.SUSPENDED
    assert stream_recorder.stream.active is False


def test_context_plays_from_successive_event_loops(stream_recorder: StreamRecorder) -> None:
    """A long-lived context keeps working when a later event loop drives it."""
    context = AudioPlaybackContext(stream_factory=stream_recorder)
    locks = []

    async def play_twice() -> None:
        await asyncio.gather(context.play(make_buffer()), context.play(make_buffer()))
        locks.append(context._lock)

    asyncio.run(play_twice())
    asyncio.run(play_twice())

    assert len(stream_recorder.stream.written) == 4
    assert locks[0] is not locks[1]
