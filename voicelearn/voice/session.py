"""Per-screen voice command controller.

A session records one utterance at a time, transcribes it, matches it
against the screen's commands and runs the winner:

    IDLE --start()--> LISTENING --stop()/auto-stop--> PROCESSING --> IDLE

There is no error state. Every failure is reported through the notifier
and the session drops back to IDLE, ready for another try.
"""

import asyncio
import inspect
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from voicelearn.audio.base import AudioCapture
from voicelearn.errors import (
    STT_NOT_CONFIGURED_MESSAGE,
    NotConfiguredError,
    VoiceError,
)
from voicelearn.stt.base import Transcriber
from voicelearn.tts.base import SpeechOutput
from voicelearn.ui.notifier import Notifier
from voicelearn.voice.matcher import Command, match

logger = logging.getLogger(__name__)

DEFAULT_AUTO_STOP_MS = 6000
NOTIFY_TITLE = "Voice control"


class SessionState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"


async def _call(callback: Callable[..., Any], *args) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class VoiceCommandSession:
    """Owns the listen -> transcribe -> match -> dispatch cycle for one screen."""

    def __init__(
        self,
        capture: AudioCapture,
        transcriber: Transcriber,
        speech: SpeechOutput,
        notifier: Notifier,
        commands: Sequence[Command] = (),
        enabled: bool = True,
        auto_stop_ms: int = DEFAULT_AUTO_STOP_MS,
        on_unrecognized: Optional[Callable[[str], Any]] = None,
        on_state_change: Optional[Callable[[SessionState], None]] = None,
    ):
        if auto_stop_ms <= 0:
            raise ValueError(f"auto_stop_ms must be positive, got {auto_stop_ms}")
        self._capture = capture
        self._transcriber = transcriber
        self._speech = speech
        self._notifier = notifier
        self._commands = tuple(commands)
        self._enabled = enabled
        self._auto_stop_ms = auto_stop_ms
        self._on_unrecognized = on_unrecognized
        self._on_state_change = on_state_change

        self._state = SessionState.IDLE
        self._handle: Any = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._auto_stop_task: Optional[asyncio.Task] = None
        self._acquiring = False
        self._closed = False
        self._last_transcript: Optional[str] = None
        self._started_at: Optional[float] = None

    # -- observable state --

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def listening(self) -> bool:
        return self._state is SessionState.LISTENING

    @property
    def processing(self) -> bool:
        return self._state is SessionState.PROCESSING

    @property
    def last_transcript(self) -> Optional[str]:
        return self._last_transcript

    @property
    def started_at(self) -> Optional[float]:
        """time.monotonic() when listening began, None unless listening."""
        return self._started_at

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def commands(self) -> tuple[Command, ...]:
        return self._commands

    def set_commands(self, commands: Sequence[Command]) -> None:
        """Re-register commands, e.g. after the screen's data changed."""
        self._commands = tuple(commands)

    # -- operations --

    async def start(self) -> None:
        if (
            not self._enabled
            or self._closed
            or self._acquiring
            or self._state is not SessionState.IDLE
        ):
            return
        if not self._transcriber.is_configured:
            self._notifier.notify(NotConfiguredError.title, STT_NOT_CONFIGURED_MESSAGE)
            return

        self._acquiring = True
        try:
            # Never listen while speaking, or the app hears itself.
            await self._speech.stop_speaking()
            self._last_transcript = None
            handle = await self._capture.acquire_recording()
        except VoiceError as e:
            logger.warning("Could not start listening: %s", e)
            self._notifier.notify(e.title, str(e))
            return
        except Exception as e:
            logger.error("Could not start listening", exc_info=True)
            self._notifier.notify(NOTIFY_TITLE, str(e) or "Unable to start listening.")
            return
        finally:
            self._acquiring = False

        if self._closed or not self._enabled:
            # Torn down while the microphone was opening.
            await self._release(handle)
            return

        self._handle = handle
        self._started_at = time.monotonic()
        self._set_state(SessionState.LISTENING)
        loop = asyncio.get_event_loop()
        self._timer = loop.call_later(self._auto_stop_ms / 1000, self._auto_stop)

    async def stop(self) -> None:
        # The state check and transition happen before the first await, so a
        # manual stop racing the auto-stop timer runs exactly once.
        if self._state is not SessionState.LISTENING:
            return
        self._set_state(SessionState.PROCESSING)
        self._cancel_timer()
        handle, self._handle = self._handle, None

        audio_path = None
        try:
            audio_path = await self._capture.finalize_recording(handle)
            if not self._transcriber.is_configured:
                raise NotConfiguredError(STT_NOT_CONFIGURED_MESSAGE)
            transcript = await self._transcriber.transcribe(audio_path)
            self._last_transcript = transcript
            await self._dispatch(transcript)
        except VoiceError as e:
            logger.warning("Voice command failed: %s", e)
            self._notifier.notify(e.title, str(e))
        except Exception as e:
            logger.error("Voice command failed", exc_info=True)
            self._notifier.notify(NOTIFY_TITLE, str(e) or "Voice command failed.")
        finally:
            if audio_path is not None:
                await self._discard(audio_path)
            self._started_at = None
            self._set_state(SessionState.IDLE)

    async def toggle(self) -> None:
        if self._state is SessionState.LISTENING:
            await self.stop()
        else:
            await self.start()

    async def disable(self) -> None:
        """Stop accepting start(); an active recording is stopped and processed."""
        self._enabled = False
        await self._teardown()

    def enable(self) -> None:
        self._enabled = True

    async def close(self) -> None:
        """Tear down for good when the owning screen goes away."""
        self._closed = True
        await self._teardown()

    # -- internals --

    async def _dispatch(self, transcript: str) -> None:
        command = match(transcript, self._commands)
        if command is None:
            logger.info("Unrecognized command: %r", transcript)
            if self._on_unrecognized is not None:
                await _call(self._on_unrecognized, transcript)
            return
        logger.info("Matched %r -> %s", transcript, command.phrases[0])
        await _call(command.action)

    async def _teardown(self) -> None:
        self._cancel_timer()
        if self._state is SessionState.LISTENING:
            await self.stop()

    def _auto_stop(self) -> None:
        self._timer = None
        logger.debug("Auto-stop after %d ms", self._auto_stop_ms)
        self._auto_stop_task = asyncio.ensure_future(self.stop())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _release(self, handle: Any) -> None:
        try:
            await self._capture.release(handle)
        except Exception:
            logger.warning("Failed to release recording", exc_info=True)

    async def _discard(self, audio_path: str) -> None:
        try:
            await self._capture.discard(audio_path)
        except Exception:
            logger.warning("Failed to delete %s", audio_path, exc_info=True)

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("Voice session %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)
