"""Google Speech-to-Text over HTTP, direct or through a proxy."""

import base64
import logging
from typing import Optional

import httpx

from voicelearn.errors import (
    STT_NOT_CONFIGURED_MESSAGE,
    NotConfiguredError,
    TranscriptionError,
)
from voicelearn.stt.base import Transcriber

logger = logging.getLogger(__name__)

GOOGLE_RECOGNIZE_URL = "https://speech.googleapis.com/v1p1beta1/speech:recognize"

# Matches what MicrophoneCapture writes.
PROXY_AUDIO_CONFIG = {
    "encoding": "LINEAR16",
    "sampleRateHertz": 16000,
    "audioChannelCount": 1,
}


def decode_body(resp: httpx.Response) -> dict:
    """Parse a JSON object body; anything else is a failed transcription."""
    try:
        data = resp.json()
    except ValueError as e:
        raise TranscriptionError(f"Speech service sent an unreadable response: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TranscriptionError(
            f"Speech service sent an unexpected response: {type(data).__name__}"
        )
    return data


def extract_transcript(data: dict) -> str:
    """Pull the top alternative out of a speech:recognize response."""
    results = data.get("results") or []
    if not results:
        return ""
    alternatives = results[0].get("alternatives") or []
    if not alternatives:
        return ""
    return alternatives[0].get("transcript", "") or ""


class GoogleSpeechTranscriber(Transcriber):
    """Sends a WAV file to the STT proxy, or to Google with an API key.

    The proxy is preferred when both are set so the key never leaves
    the server.
    """

    def __init__(
        self,
        proxy_url: str = "",
        api_key: str = "",
        language_code: str = "en-US",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._proxy_url = proxy_url.rstrip("/")
        self._api_key = api_key
        self._language_code = language_code
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._proxy_url or self._api_key)

    @staticmethod
    def _read_audio(audio_path: str) -> str:
        with open(audio_path, "rb") as f:
            return base64.b64encode(f.read()).decode("ascii")

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Request to speech service failed: %s", e)
            raise TranscriptionError(f"Speech-to-text failed: {e}") from e
        if resp.is_error:
            logger.error("Speech service returned %d", resp.status_code)
            raise TranscriptionError(resp.text or "Speech-to-text failed.")
        return resp

    async def transcribe(self, audio_path: str) -> str:
        if not self.is_configured:
            raise NotConfiguredError(STT_NOT_CONFIGURED_MESSAGE)

        try:
            content = self._read_audio(audio_path)
        except OSError as e:
            raise TranscriptionError(f"Could not read recording: {e}") from e

        if self._proxy_url:
            resp = await self._post(
                f"{self._proxy_url}/stt",
                json={
                    "audio": content,
                    "languageCode": self._language_code,
                    "config": PROXY_AUDIO_CONFIG,
                },
            )
            data = decode_body(resp)
            return data.get("transcript", "") or ""

        resp = await self._post(
            GOOGLE_RECOGNIZE_URL,
            params={"key": self._api_key},
            json={
                "config": {
                    "encoding": "ENCODING_UNSPECIFIED",
                    "languageCode": self._language_code,
                },
                "audio": {"content": content},
            },
        )
        return extract_transcript(decode_body(resp))
