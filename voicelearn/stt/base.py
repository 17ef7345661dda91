from abc import ABC, abstractmethod


class Transcriber(ABC):
    """Abstract speech-to-text service."""

    @property
    def is_configured(self) -> bool:
        """False when the service has no credentials or endpoint to call."""
        return True

    @abstractmethod
    async def transcribe(self, audio_path: str) -> str:
        """Transcribe a finalized recording. Returns "" when nothing was heard."""
        ...
