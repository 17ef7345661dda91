"""Offline speech-to-text with OpenAI Whisper."""

import asyncio
import re
import wave

import numpy as np

from voicelearn.errors import TranscriptionError
from voicelearn.stt.base import Transcriber

# Matches empty/hallucinated Whisper outputs
EMPTY_RESULTS = re.compile(
    r"^[\s.,!?\-—…]*$"  # punctuation/whitespace only
    r"|^(you|thank you|thanks)\.?$",  # common hallucinations
    re.IGNORECASE,
)


def load_wav(path: str) -> np.ndarray:
    """Read a 16-bit mono WAV as float32 in [-1, 1]."""
    with wave.open(path, "rb") as wav:
        frames = wav.readframes(wav.getnframes())
    return np.frombuffer(frames, dtype="<i2").astype(np.float32) / 0x7FFF


class WhisperTranscriber(Transcriber):
    """Wraps OpenAI Whisper for speech-to-text. Always configured."""

    def __init__(self, model_name: str = "base", language: str = "en"):
        self._model_name = model_name
        self._language = language
        self._model = None

    def _ensure_model(self):
        if self._model is None:
            import whisper

            self._model = whisper.load_model(self._model_name)

    def transcribe_sync(self, audio_path: str) -> str:
        """Transcribe a 16kHz WAV file. Returns "" for empty results."""
        self._ensure_model()
        audio = load_wav(audio_path)
        result = self._model.transcribe(
            audio, language=self._language, fp16=False, no_speech_threshold=0.6
        )
        text = result["text"].strip()
        if not text or EMPTY_RESULTS.match(text):
            return ""
        return text

    async def transcribe(self, audio_path: str) -> str:
        """Async wrapper, runs transcription in thread pool."""
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, self.transcribe_sync, audio_path)
        except (OSError, RuntimeError, wave.Error) as e:
            raise TranscriptionError(f"Whisper transcription failed: {e}") from e
