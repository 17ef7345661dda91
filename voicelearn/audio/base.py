from abc import ABC, abstractmethod
from typing import Any


class AudioCapture(ABC):
    """Abstract microphone capture: open a recording, later turn it into a file."""

    @abstractmethod
    async def acquire_recording(self) -> Any:
        """Start capturing and return an opaque recording handle.

        Raises AcquisitionError when the device cannot be opened.
        """
        ...

    @abstractmethod
    async def finalize_recording(self, handle: Any) -> str:
        """Stop capturing and return the path of the completed audio file."""
        ...

    @abstractmethod
    async def release(self, handle: Any) -> None:
        """Stop capturing and discard the audio."""
        ...

    async def discard(self, audio_path: str) -> None:
        """Delete a finalized recording once it has been transcribed."""
