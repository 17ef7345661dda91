import inspect
import logging
from typing import Any, Callable, Optional, Sequence

from rich.console import Console

from voicelearn.audio.base import AudioCapture
from voicelearn.audio.feedback import NullFeedbackTones
from voicelearn.stt.base import Transcriber
from voicelearn.tts.announce import ScreenAnnouncer
from voicelearn.tts.base import SpeechOutput
from voicelearn.ui.input_prompt import RichKeyInput
from voicelearn.ui.notifier import Notifier
from voicelearn.voice.matcher import Command, match
from voicelearn.voice.session import DEFAULT_AUTO_STOP_MS, VoiceCommandSession

logger = logging.getLogger(__name__)


class VoiceLearnApp:
    """Main application: a stack of voice-driven lesson screens."""

    def __init__(
        self,
        capture: AudioCapture,
        transcriber: Transcriber,
        speech: SpeechOutput,
        notifier: Notifier,
        key_input: RichKeyInput,
        console: Console,
        tones=None,
        auto_stop_ms: int = DEFAULT_AUTO_STOP_MS,
    ):
        self.capture = capture
        self.transcriber = transcriber
        self.speech = speech
        self.notifier = notifier
        self.console = console
        self.tones = tones or NullFeedbackTones()
        self.announcer = ScreenAnnouncer(speech)
        self.completed: set[str] = set()
        self._input = key_input
        self._auto_stop_ms = auto_stop_ms
        self._stack: list = []
        self._running = True

    @property
    def current(self):
        return self._stack[-1] if self._stack else None

    def create_session(
        self,
        commands: Sequence[Command],
        on_unrecognized: Optional[Callable[[str], Any]] = None,
        on_state_change: Optional[Callable] = None,
    ) -> VoiceCommandSession:
        return VoiceCommandSession(
            capture=self.capture,
            transcriber=self.transcriber,
            speech=self.speech,
            notifier=self.notifier,
            commands=commands,
            auto_stop_ms=self._auto_stop_ms,
            on_unrecognized=on_unrecognized,
            on_state_change=on_state_change,
        )

    async def navigate(self, screen) -> None:
        """Show a new screen on top of the current one."""
        if self.current is not None:
            await self.current.unmount()
        self._stack.append(screen)
        await screen.mount()

    async def go_back(self) -> None:
        """Leave the current screen. Leaving the last one quits."""
        if not self._stack:
            return
        await self._stack.pop().unmount()
        if self.current is None:
            self._running = False
            return
        await self.current.mount()

    async def handle_line(self, line: str) -> None:
        """Enter toggles the microphone; typed text is dispatched like a transcript."""
        screen = self.current
        if screen is None:
            return
        if not line:
            await screen.on_enter()
            return
        command = match(line, screen.session.commands)
        if command is None:
            await screen.on_unrecognized(line)
            return
        result = command.action()
        if inspect.isawaitable(result):
            await result

    async def run(self, first_screen) -> None:
        await self.speech.start()
        await self.navigate(first_screen)
        try:
            while self._running:
                line = await self._input.read()
                if line is None:
                    break
                try:
                    await self.handle_line(line)
                except Exception as e:
                    logger.error("Command failed", exc_info=True)
                    self.notifier.notify("Voice control", str(e) or "Command failed.")
        except KeyboardInterrupt:
            pass
        finally:
            while self._stack:
                await self._stack.pop().unmount()
            await self.speech.speak("Goodbye.")
            await self.speech.wait_done()
            await self.speech.shutdown()
