import asyncio
from typing import Optional

from rich.console import Console

QUIT_WORDS = ("quit", "exit", "q")
PROMPT = "[bold blue]Enter[/] to talk, [bold blue]q[/] to quit: "


class RichKeyInput:
    """Reads one line per key press; Enter alone means "toggle the microphone"."""

    def __init__(self, console: Console, prompt: str = PROMPT):
        self._console = console
        self._prompt = prompt

    async def read(self) -> Optional[str]:
        """Return the typed line (possibly ""), or None to quit."""
        loop = asyncio.get_event_loop()
        try:
            line = await loop.run_in_executor(
                None, lambda: self._console.input(self._prompt)
            )
        except (EOFError, KeyboardInterrupt):
            return None
        line = line.strip()
        if line.lower() in QUIT_WORDS:
            return None
        return line
