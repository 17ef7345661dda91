"""Fake collaborators shared by the voice tests. No audio hardware or network."""

import asyncio
from typing import Optional

import pytest

from voicelearn.audio.base import AudioCapture
from voicelearn.stt.base import Transcriber
from voicelearn.tts.playback import NullPlaybackManager
from voicelearn.ui.notifier import LoggingNotifier

AUDIO_PATH = "/tmp/voicelearn-test.wav"


class FakeCapture(AudioCapture):
    """Counts every call; optionally slow or failing to open."""

    def __init__(self, error: Optional[Exception] = None, acquire_delay: float = 0.0):
        self.error = error
        self.acquire_delay = acquire_delay
        self.acquired = 0
        self.finalized = 0
        self.released = 0
        self.discarded: list[str] = []

    async def acquire_recording(self):
        self.acquired += 1
        if self.acquire_delay:
            await asyncio.sleep(self.acquire_delay)
        if self.error is not None:
            raise self.error
        return f"handle-{self.acquired}"

    async def finalize_recording(self, handle) -> str:
        self.finalized += 1
        return AUDIO_PATH

    async def release(self, handle) -> None:
        self.released += 1

    async def discard(self, audio_path: str) -> None:
        self.discarded.append(audio_path)


class FakeTranscriber(Transcriber):
    """Returns scripted transcripts in order, repeating the last one."""

    def __init__(self, *transcripts: str, configured: bool = True, error=None):
        self.transcripts = list(transcripts) or [""]
        self.configured = configured
        self.error = error
        self.calls = 0

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def transcribe(self, audio_path: str) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if len(self.transcripts) > 1:
            return self.transcripts.pop(0)
        return self.transcripts[0]


class FakeTones:
    def __init__(self):
        self.played: list[str] = []

    async def correct(self) -> None:
        self.played.append("correct")

    async def wrong(self) -> None:
        self.played.append("wrong")


@pytest.fixture
def capture():
    return FakeCapture()


@pytest.fixture
def transcriber():
    return FakeTranscriber("please open lesson one now")


@pytest.fixture
def speech():
    return NullPlaybackManager()


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def tones():
    return FakeTones()
