import asyncio
import logging
import os
import platform
import threading
from typing import Iterator

from voicelearn.tts.base import TTSEngine

logger = logging.getLogger(__name__)

VOICE_DIRS = [
    os.path.expanduser("~/.local/share/piper-voices"),
    "/usr/share/piper-voices",
]


def find_piper_model(voice_name: str) -> str:
    """Locate a downloaded Piper voice by name. Raises FileNotFoundError."""
    if os.sep in voice_name or "/" in voice_name or ".." in voice_name:
        raise ValueError(f"Invalid voice name: {voice_name}")
    for data_dir in VOICE_DIRS:
        for path in (
            os.path.join(data_dir, f"{voice_name}.onnx"),
            os.path.join(data_dir, voice_name, f"{voice_name}.onnx"),
        ):
            if os.path.exists(path):
                return path
    raise FileNotFoundError(
        f"Piper voice model not found: {voice_name} (searched {', '.join(VOICE_DIRS)})"
    )


class PiperTTSEngine(TTSEngine):
    """Piper neural TTS, spoken a little slower for young listeners.

    ``rate`` follows the usual speech-rate convention (1.0 is normal,
    lower is slower) and maps onto Piper's ``length_scale``.
    """

    def __init__(self, model_path: str, rate: float = 0.9):
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self._model_path = model_path
        self._length_scale = 1.0 / rate
        self._voice = None
        self._syn_config = None
        self._output = None
        self._output_lock = threading.Lock()
        self._interrupted = threading.Event()
        self._speaking = False

    @property
    def length_scale(self) -> float:
        return self._length_scale

    async def initialize(self) -> None:
        from piper import SynthesisConfig
        from piper.voice import PiperVoice

        loop = asyncio.get_event_loop()
        self._voice = await loop.run_in_executor(
            None, PiperVoice.load, self._model_path
        )
        self._syn_config = SynthesisConfig(length_scale=self._length_scale)
        logger.debug("Loaded Piper voice %s", self._model_path)

    def pcm_chunks(self, text: str) -> Iterator:
        """Yield int16 audio for ``text`` until it ends or stop() is called."""
        for chunk in self._voice.synthesize(text, syn_config=self._syn_config):
            if self._interrupted.is_set():
                return
            yield chunk.audio_int16_array

    def _open_output(self):
        import sounddevice as sd

        # WSL audio underruns at the default latency.
        on_wsl = "microsoft" in platform.release().lower()
        output = sd.OutputStream(
            samplerate=self._voice.config.sample_rate,
            channels=1,
            dtype="int16",
            latency="high" if on_wsl else None,
        )
        output.start()
        return output

    def _play(self, text: str) -> None:
        output = self._open_output()
        with self._output_lock:
            self._output = output
        try:
            for pcm in self.pcm_chunks(text):
                output.write(pcm)
        finally:
            with self._output_lock:
                self._output = None
            output.stop()
            output.close()

    async def speak(self, text: str) -> None:
        if self._voice is None or not text.strip():
            return
        self._interrupted.clear()
        self._speaking = True
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._play, text)
        finally:
            self._speaking = False

    async def stop(self) -> None:
        self._interrupted.set()
        with self._output_lock:
            output = self._output
        if output is None:
            return
        try:
            output.abort()
        except Exception:
            logger.debug("Output stream already closed", exc_info=True)

    async def shutdown(self) -> None:
        await self.stop()
        self._voice = None

    @property
    def is_speaking(self) -> bool:
        return self._speaking
