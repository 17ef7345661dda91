class VoiceError(Exception):
    """Base class for failures surfaced by the voice subsystem."""

    title = "Voice control"


class NotConfiguredError(VoiceError):
    """Speech-to-text has no credentials or proxy endpoint."""

    title = "STT not configured"


class AcquisitionError(VoiceError):
    """The microphone could not be opened (permission denied, device busy)."""


class TranscriptionError(VoiceError):
    """The speech-to-text service failed or could not be reached."""


class InvalidPhraseError(VoiceError, ValueError):
    """A command phrase normalizes to nothing and could never match."""


STT_NOT_CONFIGURED_MESSAGE = (
    "Set VOICELEARN_STT_PROXY_URL (recommended) or "
    "VOICELEARN_GOOGLE_STT_API_KEY, or use --stt whisper."
)
