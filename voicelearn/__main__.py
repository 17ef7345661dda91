import argparse
import asyncio
import logging
import os
import sys

from voicelearn.config import VoiceLearnConfig
from voicelearn.lessons.catalog import LESSON_CATEGORIES


def setup_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    from voicelearn.ui.console import console

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def build_speech(config: VoiceLearnConfig, no_tts: bool):
    if no_tts:
        from voicelearn.tts.playback import NullPlaybackManager
        return NullPlaybackManager()

    from voicelearn.tts.piper_engine import PiperTTSEngine, find_piper_model
    from voicelearn.tts.playback import PlaybackManager

    if config.piper_model:
        model_path = config.piper_model
        if not os.path.exists(model_path):
            print(f"Error: TTS model not found at {model_path}")
            sys.exit(1)
    else:
        try:
            model_path = find_piper_model(config.piper_voice)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}")
            print("Download a voice from https://huggingface.co/rhasspy/piper-voices,")
            print("pass --tts-model /path/to/model.onnx, or run with --no-tts.")
            sys.exit(1)
    return PlaybackManager(PiperTTSEngine(model_path=model_path))


def build_transcriber(config: VoiceLearnConfig):
    if config.stt_engine == "whisper":
        from voicelearn.stt.whisper_local import WhisperTranscriber
        return WhisperTranscriber(
            model_name=config.whisper_model,
            language=config.language_code.split("-")[0],
        )

    from voicelearn.stt.google import GoogleSpeechTranscriber
    return GoogleSpeechTranscriber(
        proxy_url=config.stt_proxy_url,
        api_key=config.google_stt_api_key,
        language_code=config.language_code,
        timeout=config.http_timeout_s,
    )


def main():
    parser = argparse.ArgumentParser(
        description="VoiceLearn - hands-free lessons and pronunciation practice"
    )
    parser.add_argument(
        "--category", default="animals", choices=sorted(LESSON_CATEGORIES),
        help="Lesson category to open (default: animals)",
    )
    parser.add_argument(
        "--stt", choices=("google", "whisper"), default=None,
        help="Speech-to-text engine (default: $VOICELEARN_STT_ENGINE or google)",
    )
    parser.add_argument(
        "--stt-proxy", default=None,
        help="Speech-to-text proxy base URL (POST <url>/stt)",
    )
    parser.add_argument(
        "--whisper-model", default=None,
        help="Whisper model size for --stt whisper (default: base)",
    )
    parser.add_argument(
        "--auto-stop-ms", type=int, default=None,
        help="Maximum listening time in milliseconds (default: 6000)",
    )
    parser.add_argument(
        "--tts-model", default=None,
        help="Path to Piper .onnx model file",
    )
    parser.add_argument(
        "--voice", default=None,
        help="Piper voice name (default: en_US-lessac-medium)",
    )
    parser.add_argument(
        "--no-tts", action="store_true",
        help="Disable TTS and tones, visual output only",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show debug logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    config = VoiceLearnConfig.from_env()
    if args.stt:
        config.stt_engine = args.stt
    if args.stt_proxy:
        config.stt_proxy_url = args.stt_proxy
    if args.whisper_model:
        config.whisper_model = args.whisper_model
    if args.auto_stop_ms is not None:
        if args.auto_stop_ms <= 0:
            parser.error("--auto-stop-ms must be positive")
        config.auto_stop_ms = args.auto_stop_ms
    if args.tts_model:
        config.piper_model = args.tts_model
    if args.voice:
        config.piper_voice = args.voice
    if not config.stt_configured:
        logging.getLogger(__name__).warning(
            "Speech-to-text is not configured; voice commands will be unavailable."
        )

    from voicelearn.audio.feedback import FeedbackTones, NullFeedbackTones
    from voicelearn.audio.recorder import MicrophoneCapture
    from voicelearn.app import VoiceLearnApp
    from voicelearn.screens import LessonListScreen
    from voicelearn.ui.console import console
    from voicelearn.ui.input_prompt import RichKeyInput
    from voicelearn.ui.notifier import ConsoleNotifier

    transcriber = build_transcriber(config)
    speech = build_speech(config, args.no_tts)
    app = VoiceLearnApp(
        capture=MicrophoneCapture(),
        transcriber=transcriber,
        speech=speech,
        notifier=ConsoleNotifier(console),
        key_input=RichKeyInput(console),
        console=console,
        tones=NullFeedbackTones() if args.no_tts else FeedbackTones(),
        auto_stop_ms=config.auto_stop_ms,
    )
    asyncio.run(app.run(LessonListScreen(app, args.category)))


if __name__ == "__main__":
    main()
