"""Push-to-talk microphone capture written to 16 kHz WAV files."""

import asyncio
import logging
import os
import tempfile
import threading
import wave
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from voicelearn.audio.base import AudioCapture
from voicelearn.errors import AcquisitionError

logger = logging.getLogger(__name__)

# Constants
FRAME_MS = 30
SAMPLE_RATE = 16000
MAX_FRAMES = 2000  # ~60s at 30ms frames


@dataclass
class RecordingHandle:
    """An open input stream and the frames captured so far."""

    stream: Any
    device_rate: int
    frames: list = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)


def resample(audio: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """Resample audio using linear interpolation."""
    if from_rate == to_rate:
        return audio
    duration = len(audio) / from_rate
    new_length = int(duration * to_rate)
    old_indices = np.linspace(0, len(audio) - 1, new_length)
    orig_indices = np.arange(len(audio))
    return np.interp(old_indices, orig_indices, audio).astype(np.float32)


def write_wav(path: str, audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> None:
    """Write float32 mono audio as 16-bit little-endian PCM."""
    pcm = (np.clip(audio, -1.0, 1.0) * 0x7FFF).astype("<i2")
    with wave.open(path, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm.tobytes())


class MicrophoneCapture(AudioCapture):
    """Records from the default input device until told to stop."""

    def __init__(self, output_dir: Optional[str] = None):
        self._output_dir = output_dir

    def _open(self) -> RecordingHandle:
        import sounddevice as sd

        device_info = sd.query_devices(kind="input")
        device_rate = int(device_info["default_samplerate"])
        handle = RecordingHandle(stream=None, device_rate=device_rate)

        def callback(indata, frames, time_info, status):
            with handle.lock:
                if len(handle.frames) < MAX_FRAMES:
                    handle.frames.append(indata[:, 0].copy())

        handle.stream = sd.InputStream(
            samplerate=device_rate,
            channels=1,
            dtype="float32",
            blocksize=int(device_rate * FRAME_MS / 1000),
            callback=callback,
        )
        try:
            handle.stream.start()
        except Exception:
            handle.stream.close()
            raise
        return handle

    async def acquire_recording(self) -> RecordingHandle:
        loop = asyncio.get_event_loop()
        try:
            handle = await loop.run_in_executor(None, self._open)
        except Exception as e:
            raise AcquisitionError(f"Unable to start listening: {e}") from e
        logger.debug("Microphone open at %d Hz", handle.device_rate)
        return handle

    @staticmethod
    def _close(handle: RecordingHandle) -> None:
        try:
            handle.stream.stop()
        finally:
            handle.stream.close()

    def _finalize_sync(self, handle: RecordingHandle) -> str:
        self._close(handle)
        with handle.lock:
            frames = list(handle.frames)
            handle.frames.clear()
        if not frames:
            raise AcquisitionError("Recording failed.")

        audio = resample(np.concatenate(frames), handle.device_rate, SAMPLE_RATE)
        fd, path = tempfile.mkstemp(prefix="voicelearn-", suffix=".wav", dir=self._output_dir)
        os.close(fd)
        write_wav(path, audio)
        logger.debug("Wrote %.1fs of audio to %s", len(audio) / SAMPLE_RATE, path)
        return path

    async def finalize_recording(self, handle: RecordingHandle) -> str:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._finalize_sync, handle)

    async def release(self, handle: RecordingHandle) -> None:
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._close, handle)
        with handle.lock:
            handle.frames.clear()

    async def discard(self, audio_path: str) -> None:
        try:
            os.remove(audio_path)
        except FileNotFoundError:
            pass
