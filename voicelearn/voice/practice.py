"""Pronunciation practice: cue the child, record one attempt, grade it, give feedback."""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from voicelearn.audio.base import AudioCapture
from voicelearn.audio.feedback import NullFeedbackTones
from voicelearn.errors import STT_NOT_CONFIGURED_MESSAGE, NotConfiguredError
from voicelearn.stt.base import Transcriber
from voicelearn.tts.base import SpeechOutput
from voicelearn.ui.notifier import Notifier
from voicelearn.voice.pronunciation import PronunciationResult, score_pronunciation

logger = logging.getLogger(__name__)

START_CUE = "Start speaking now."
PRAISE = "Great job. That was correct."


class PracticeState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    RECORDING = "recording"
    CHECKING = "checking"


class PronunciationPractice:
    def __init__(
        self,
        target: str,
        capture: AudioCapture,
        transcriber: Transcriber,
        speech: SpeechOutput,
        notifier: Notifier,
        tones=None,
        on_state_change: Optional[Callable[[PracticeState], None]] = None,
    ):
        self._target = target
        self._capture = capture
        self._transcriber = transcriber
        self._speech = speech
        self._notifier = notifier
        self._tones = tones or NullFeedbackTones()
        self._on_state_change = on_state_change

        self._state = PracticeState.IDLE
        self._handle: Any = None
        self._closed = False
        self._result: Optional[PronunciationResult] = None

    @property
    def target(self) -> str:
        return self._target

    @property
    def state(self) -> PracticeState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is not PracticeState.IDLE

    @property
    def result(self) -> Optional[PronunciationResult]:
        """Outcome of the last completed attempt."""
        return self._result

    async def start(self) -> None:
        if self._closed or self._state is not PracticeState.IDLE:
            return
        self._result = None
        self._set_state(PracticeState.STARTING)
        try:
            await self._speech.stop_speaking()
            await self._cue()
            handle = await self._capture.acquire_recording()
        except Exception as e:
            logger.warning("Recording failed: %s", e)
            self._notifier.notify("Recording failed", str(e) or "Recording failed.")
            self._set_state(PracticeState.IDLE)
            return

        if self._closed:
            await self._release(handle)
            self._set_state(PracticeState.IDLE)
            return
        self._handle = handle
        self._set_state(PracticeState.RECORDING)

    async def _cue(self) -> None:
        # Record even when the cue can't be spoken.
        try:
            await self._speech.speak(START_CUE)
            await self._speech.wait_done()
        except Exception:
            logger.warning("Could not speak start cue", exc_info=True)

    async def stop(self) -> Optional[PronunciationResult]:
        """Grade the recorded attempt. Returns None if the check failed."""
        if self._state is not PracticeState.RECORDING:
            return None
        self._set_state(PracticeState.CHECKING)
        handle, self._handle = self._handle, None

        audio_path = None
        try:
            audio_path = await self._capture.finalize_recording(handle)
            if not self._transcriber.is_configured:
                raise NotConfiguredError(STT_NOT_CONFIGURED_MESSAGE)
            transcript = await self._transcriber.transcribe(audio_path)
            result = score_pronunciation(self._target, transcript)
            self._result = result
            logger.info(
                "Pronunciation of %r: heard %r, score %.2f",
                self._target, transcript, result.score,
            )
            await self._feedback(result)
            return result
        except NotConfiguredError as e:
            self._notifier.notify(e.title, str(e))
            return None
        except Exception as e:
            logger.warning("Pronunciation check failed", exc_info=True)
            self._notifier.notify("Check failed", str(e) or "Pronunciation check failed.")
            return None
        finally:
            if audio_path is not None:
                await self._discard(audio_path)
            self._set_state(PracticeState.IDLE)

    async def _feedback(self, result: PronunciationResult) -> None:
        # The score stands even if the tone or voice fails.
        try:
            if result.matched:
                await self._tones.correct()
                await self._speech.speak(PRAISE)
            else:
                await self._tones.wrong()
                await self._speech.speak(f"Try again. The correct answer is {self._target}.")
        except Exception:
            logger.warning("Could not give pronunciation feedback", exc_info=True)

    async def close(self) -> None:
        """Drop an in-progress recording without grading it."""
        self._closed = True
        if self._state is PracticeState.RECORDING:
            handle, self._handle = self._handle, None
            await self._release(handle)
            self._set_state(PracticeState.IDLE)

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

    def _set_state(self, state: PracticeState) -> None:
        if state is self._state:
            return
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)
