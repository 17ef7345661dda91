import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class VoiceLearnConfig:
    # Speech-to-text settings
    stt_engine: str = "google"
    stt_proxy_url: str = ""
    google_stt_api_key: str = ""
    whisper_model: str = "base"
    language_code: str = "en-US"
    http_timeout_s: float = 30.0

    # TTS settings
    piper_model: Optional[str] = None
    piper_voice: str = "en_US-lessac-medium"

    # Listening behavior
    auto_stop_ms: int = 6000

    @property
    def stt_configured(self) -> bool:
        if self.stt_engine == "whisper":
            return True
        return bool(self.stt_proxy_url or self.google_stt_api_key)

    @classmethod
    def from_env(cls, environ=None) -> "VoiceLearnConfig":
        """Build a config from VOICELEARN_* environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        auto_stop = env.get("VOICELEARN_AUTO_STOP_MS")
        return cls(
            stt_engine=env.get("VOICELEARN_STT_ENGINE", defaults.stt_engine),
            stt_proxy_url=env.get("VOICELEARN_STT_PROXY_URL", ""),
            google_stt_api_key=env.get("VOICELEARN_GOOGLE_STT_API_KEY", ""),
            whisper_model=env.get("VOICELEARN_WHISPER_MODEL", defaults.whisper_model),
            language_code=env.get("VOICELEARN_LANGUAGE", defaults.language_code),
            piper_model=env.get("VOICELEARN_PIPER_MODEL") or None,
            piper_voice=env.get("VOICELEARN_PIPER_VOICE", defaults.piper_voice),
            auto_stop_ms=int(auto_stop) if auto_stop else defaults.auto_stop_ms,
        )
