import asyncio
from typing import Optional

from voicelearn.tts.base import SpeechOutput

ANNOUNCE_DELAY_S = 0.4


class ScreenAnnouncer:
    """Speaks a screen's title shortly after it is shown.

    The delay gives the TTS engine time to settle after the previous
    screen stopped it. A new announcement replaces a pending one.
    """

    def __init__(self, speech: SpeechOutput, delay_s: float = ANNOUNCE_DELAY_S):
        self._speech = speech
        self._delay_s = delay_s
        self._pending: Optional[asyncio.Task] = None

    def announce(self, message: str) -> None:
        self.cancel()
        if not message:
            return
        self._pending = asyncio.ensure_future(self._announce_later(message))

    async def _announce_later(self, message: str) -> None:
        await asyncio.sleep(self._delay_s)
        await self._speech.speak(message)

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
