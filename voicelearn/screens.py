"""Voice-driven screens for the terminal app.

Each screen owns one VoiceCommandSession for as long as it is shown.
"""

from typing import TYPE_CHECKING, Optional

from rich.text import Text

from voicelearn.lessons.catalog import LESSON_CATEGORIES, LESSONS, Lesson
from voicelearn.ui.components import screen_banner, voice_control_bar
from voicelearn.voice.matcher import Command
from voicelearn.voice.practice import PracticeState, PronunciationPractice
from voicelearn.voice.session import VoiceCommandSession

if TYPE_CHECKING:
    from voicelearn.app import VoiceLearnApp


class Screen:
    title = ""
    hint: Optional[str] = None

    def __init__(self, app: "VoiceLearnApp"):
        self.app = app
        self.session: Optional[VoiceCommandSession] = None
        self.mounted = False

    @property
    def announcement(self) -> str:
        return self.title

    def commands(self) -> list[Command]:
        return []

    async def mount(self) -> None:
        self.session = self.app.create_session(
            self.commands(),
            on_unrecognized=self.on_unrecognized,
            on_state_change=lambda state: self.render_status(),
        )
        self.mounted = True
        self.app.console.print(screen_banner(self.title))
        self.app.announcer.announce(self.announcement)
        self.render_status()

    async def unmount(self) -> None:
        self.mounted = False
        self.app.announcer.cancel()
        if self.session is not None:
            await self.session.close()

    async def on_enter(self) -> None:
        """Enter key: the voice control button."""
        # A pending title announcement must not play into the open microphone.
        self.app.announcer.cancel()
        if self.session is not None:
            await self.session.toggle()

    async def on_unrecognized(self, transcript: str) -> None:
        await self.app.speech.speak(
            f"Sorry, I didn't understand {transcript or 'that'}. Say help to hear the commands."
        )

    def render_status(self) -> None:
        if self.session is None or not self.mounted:
            return
        self.app.console.print(
            voice_control_bar(
                self.session.listening,
                self.session.processing,
                self.session.last_transcript,
                self.hint,
            )
        )


class LessonListScreen(Screen):
    def __init__(self, app: "VoiceLearnApp", category: str):
        super().__init__(app)
        self.category = category
        self.lessons: list[Lesson] = LESSONS.get(category, [])
        self.title = f"{LESSON_CATEGORIES.get(category, category)} lessons"
        self.hint = "Say: start lesson, open " + (
            self.lessons[0].title.lower() if self.lessons else "a lesson"
        ) + ", help, or go back."

    @property
    def announcement(self) -> str:
        return "Lesson list. Choose a lesson to play."

    def commands(self) -> list[Command]:
        lesson_commands = [
            Command(
                phrases=(f"open {lesson.title.lower()}", lesson.title.lower()),
                action=self._opener(lesson),
            )
            for lesson in self.lessons
        ]
        return [
            Command(("start lesson", "open lesson"), self._open_first),
            *lesson_commands,
            Command(("help", "commands", "what can i say"), self._help),
            Command(("go back", "back"), self.app.go_back),
        ]

    def _opener(self, lesson: Lesson):
        async def open_lesson():
            await self.app.navigate(LessonScreen(self.app, lesson))

        return open_lesson

    async def _open_first(self) -> None:
        if self.lessons:
            await self.app.navigate(LessonScreen(self.app, self.lessons[0]))

    async def _help(self) -> None:
        titles = ", ".join(f"open {lesson.title.lower()}" for lesson in self.lessons)
        await self.app.speech.speak(f"You can say: start lesson, {titles}, or go back.")

    async def mount(self) -> None:
        await super().mount()
        for lesson in self.lessons:
            done = " (completed)" if lesson.id in self.app.completed else ""
            self.app.console.print(f"  - {lesson.title}: {lesson.prompt}{done}")


class LessonScreen(Screen):
    hint = "Say: repeat, start pronunciation, mark completed, help, or go back."

    def __init__(self, app: "VoiceLearnApp", lesson: Lesson):
        super().__init__(app)
        self.lesson = lesson
        self.title = f"Lesson: {lesson.title}"
        self.practice = PronunciationPractice(
            target=lesson.target,
            capture=app.capture,
            transcriber=app.transcriber,
            speech=app.speech,
            notifier=app.notifier,
            tones=app.tones,
            on_state_change=self._practice_changed,
        )

    @property
    def announcement(self) -> str:
        return f"Lesson. {self.lesson.title}. {self.lesson.prompt}"

    def commands(self) -> list[Command]:
        return [
            Command(("repeat", "listen"), self._listen),
            Command(("start pronunciation", "start speaking"), self.start_pronunciation),
            Command(("stop check", "stop and check"), self.stop_pronunciation),
            Command(("mark completed", "complete lesson", "done"), self._complete),
            Command(
                ("help", "commands", "what can i say"),
                lambda: self.app.speech.speak(
                    "You can say: repeat, start pronunciation, stop check, "
                    "mark completed, or go back."
                ),
            ),
            Command(("go back", "back"), self.app.go_back),
        ]

    async def _listen(self) -> None:
        await self.app.speech.speak(self.lesson.prompt)

    async def start_pronunciation(self) -> None:
        # The microphone belongs to the practice while it runs.
        self.app.announcer.cancel()
        await self.session.disable()
        await self.practice.start()
        if not self.practice.busy:
            self.session.enable()

    async def stop_pronunciation(self) -> None:
        try:
            result = await self.practice.stop()
        finally:
            self.session.enable()
        if result is not None:
            verdict = "correct" if result.matched else "try again"
            self.app.console.print(
                f"  Heard: {result.transcript!r}  score {result.score:.2f} ({verdict})"
            )

    async def _complete(self) -> None:
        self.app.completed.add(self.lesson.id)
        await self.app.speech.speak("Lesson completed.")
        await self.app.go_back()

    async def on_enter(self) -> None:
        if self.practice.state is PracticeState.RECORDING:
            await self.stop_pronunciation()
        elif not self.practice.busy:
            await super().on_enter()

    def _practice_changed(self, state: PracticeState) -> None:
        if not self.mounted:
            return
        if state is PracticeState.RECORDING:
            self.app.console.print(
                Text("[Recording… press Enter to check]", style="listening")
            )
        elif state is PracticeState.CHECKING:
            self.app.console.print(Text("[Checking…]", style="processing"))

    async def unmount(self) -> None:
        await self.practice.close()
        await super().unmount()
