import asyncio
import logging
from typing import Optional

from voicelearn.tts.base import SpeechOutput, TTSEngine

logger = logging.getLogger(__name__)


class PlaybackManager(SpeechOutput):
    """Speaks queued text one utterance at a time; stop_speaking flushes the queue."""

    def __init__(self, engine: TTSEngine):
        self._engine = engine
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=100)
        self._task: Optional[asyncio.Task] = None
        self._stopping = False

    async def start(self) -> None:
        await self._engine.initialize()
        self._task = asyncio.create_task(self._playback_loop())

    async def speak(self, text: str) -> None:
        if not text or not text.strip() or self._stopping:
            return
        await self._queue.put(text)

    async def stop_speaking(self) -> None:
        self._stopping = True
        try:
            while not self._queue.empty():
                try:
                    self._queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
            await self._engine.stop()
        finally:
            self._stopping = False

    async def wait_done(self) -> None:
        await self._queue.put(None)
        if self._task:
            await self._task
        # Restart the playback loop for the next utterance
        self._task = asyncio.create_task(self._playback_loop())

    async def _playback_loop(self) -> None:
        while True:
            text = await self._queue.get()
            if text is None:
                break
            try:
                await self._engine.speak(text)
            except Exception:
                logger.warning("TTS failed for %r", text, exc_info=True)

    @property
    def is_speaking(self) -> bool:
        return self._engine.is_speaking or not self._queue.empty()

    async def shutdown(self) -> None:
        await self.stop_speaking()
        await self._queue.put(None)
        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=2.0)
            except asyncio.TimeoutError:
                self._task.cancel()
        await self._engine.shutdown()


class NullPlaybackManager(SpeechOutput):
    """No-op playback for --no-tts mode. Records what would have been spoken."""

    def __init__(self):
        self.spoken: list[str] = []
        self.stop_count = 0

    async def speak(self, text: str) -> None:
        if text and text.strip():
            self.spoken.append(text)

    async def stop_speaking(self) -> None:
        self.stop_count += 1

    async def wait_done(self) -> None:
        pass

    @property
    def is_speaking(self) -> bool:
        return False
