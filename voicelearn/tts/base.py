from abc import ABC, abstractmethod


class TTSEngine(ABC):
    """Abstract base class for text-to-speech engines."""

    @abstractmethod
    async def initialize(self) -> None:
        ...

    @abstractmethod
    async def speak(self, text: str) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        ...

    @property
    @abstractmethod
    def is_speaking(self) -> bool:
        ...


class SpeechOutput(ABC):
    """What the voice controllers need from TTS.

    ``stop_speaking`` must be idempotent: sessions call it unconditionally
    before opening the microphone so the app never hears itself.
    """

    async def start(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    @abstractmethod
    async def speak(self, text: str) -> None:
        """Queue text to be spoken and return without waiting."""
        ...

    @abstractmethod
    async def stop_speaking(self) -> None:
        ...

    @abstractmethod
    async def wait_done(self) -> None:
        """Wait until everything queued so far has been spoken."""
        ...
