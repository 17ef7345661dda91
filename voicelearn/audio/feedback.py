"""Short sine-wave tones for right/wrong answers."""

import asyncio
import logging

import numpy as np

logger = logging.getLogger(__name__)

TONE_SAMPLE_RATE = 8000
CORRECT_TONE = (880.0, 120)  # Hz, ms
WRONG_TONE = (220.0, 160)


def build_tone(
    frequency: float, duration_ms: int, volume: float = 0.3, sample_rate: int = TONE_SAMPLE_RATE
) -> np.ndarray:
    """Return a 16-bit mono sine tone."""
    num_samples = int(sample_rate * duration_ms / 1000)
    t = np.arange(num_samples) / sample_rate
    wave = np.sin(2 * np.pi * frequency * t) * volume
    return (wave * 0x7FFF).astype(np.int16)


class FeedbackTones:
    """Plays the correct/wrong tones through sounddevice."""

    def __init__(self, sample_rate: int = TONE_SAMPLE_RATE):
        self._sample_rate = sample_rate

    def _play_sync(self, tone: np.ndarray) -> None:
        import sounddevice as sd

        sd.play(tone, samplerate=self._sample_rate)
        sd.wait()

    async def _play(self, frequency: float, duration_ms: int) -> None:
        tone = build_tone(frequency, duration_ms, sample_rate=self._sample_rate)
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._play_sync, tone)
        except Exception:
            # A missing output device shouldn't break the lesson.
            logger.warning("Could not play feedback tone", exc_info=True)

    async def correct(self) -> None:
        await self._play(*CORRECT_TONE)

    async def wrong(self) -> None:
        await self._play(*WRONG_TONE)


class NullFeedbackTones:
    """Silent tones for --no-tts mode and tests."""

    async def correct(self) -> None:
        pass

    async def wrong(self) -> None:
        pass
