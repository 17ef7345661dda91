"""Audio helpers: resampling, WAV files, tones, Whisper filtering. No hardware."""

import sys
import types
import wave

import numpy as np
import pytest

from voicelearn.audio.feedback import CORRECT_TONE, WRONG_TONE, build_tone
from voicelearn.audio.recorder import SAMPLE_RATE, MicrophoneCapture, resample, write_wav
from voicelearn.errors import AcquisitionError
from voicelearn.stt.whisper_local import EMPTY_RESULTS, load_wav
from voicelearn.tts.piper_engine import PiperTTSEngine, find_piper_model


# ── resample ──


def test_resample_same_rate():
    audio = np.array([1.0, 2.0, 3.0, 4.0], dtype=np.float32)
    result = resample(audio, 16000, 16000)
    np.testing.assert_array_equal(result, audio)


def test_resample_downsample():
    audio = np.ones(48000, dtype=np.float32)  # 1s at 48kHz
    result = resample(audio, 48000, 16000)
    assert len(result) == 16000
    assert result.dtype == np.float32


def test_resample_upsample():
    audio = np.ones(8000, dtype=np.float32)  # 1s at 8kHz
    result = resample(audio, 8000, 16000)
    assert len(result) == 16000


# ── WAV output ──


def test_write_wav_is_16k_mono_pcm(tmp_path):
    path = str(tmp_path / "out.wav")
    audio = np.linspace(-1.0, 1.0, SAMPLE_RATE, dtype=np.float32)
    write_wav(path, audio)

    with wave.open(path, "rb") as wav:
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == 2
        assert wav.getframerate() == SAMPLE_RATE
        assert wav.getnframes() == SAMPLE_RATE

    loaded = load_wav(path)
    np.testing.assert_allclose(loaded, audio, atol=1e-4)


def test_write_wav_clips(tmp_path):
    path = str(tmp_path / "loud.wav")
    write_wav(path, np.array([2.0, -2.0], dtype=np.float32))
    loaded = load_wav(path)
    assert loaded.max() <= 1.0
    assert loaded.min() >= -1.0


@pytest.mark.asyncio
async def test_discard_removes_file(tmp_path):
    path = tmp_path / "done.wav"
    path.write_bytes(b"x")
    capture = MicrophoneCapture()
    await capture.discard(str(path))
    assert not path.exists()
    # Second discard is harmless
    await capture.discard(str(path))


# ── tones ──


def test_correct_tone_length():
    tone = build_tone(*CORRECT_TONE)
    assert tone.dtype == np.int16
    assert len(tone) == 960  # 120ms at 8kHz


def test_wrong_tone_is_longer_and_quiet():
    tone = build_tone(*WRONG_TONE)
    assert len(tone) == 1280
    assert np.abs(tone).max() <= int(0.3 * 0x7FFF)


# ── EMPTY_RESULTS regex ──


def test_empty_results_filters_punctuation():
    assert EMPTY_RESULTS.match("...") is not None
    assert EMPTY_RESULTS.match("  ") is not None
    assert EMPTY_RESULTS.match("!?") is not None


def test_empty_results_filters_hallucinations():
    assert EMPTY_RESULTS.match("you") is not None
    assert EMPTY_RESULTS.match("Thank you.") is not None


def test_empty_results_passes_real_text():
    assert EMPTY_RESULTS.match("go back") is None
    assert EMPTY_RESULTS.match("cat") is None


# ── piper voices ──


def test_find_piper_model_rejects_paths():
    with pytest.raises(ValueError):
        find_piper_model("../etc/passwd")


def test_find_piper_model_missing(monkeypatch, tmp_path):
    monkeypatch.setattr("voicelearn.tts.piper_engine.VOICE_DIRS", [str(tmp_path)])
    with pytest.raises(FileNotFoundError):
        find_piper_model("en_US-lessac-medium")


def test_find_piper_model_found(monkeypatch, tmp_path):
    model = tmp_path / "en_US-lessac-medium.onnx"
    model.write_bytes(b"")
    monkeypatch.setattr("voicelearn.tts.piper_engine.VOICE_DIRS", [str(tmp_path)])
    assert find_piper_model("en_US-lessac-medium") == str(model)


# ── microphone open failure ──


@pytest.mark.asyncio
async def test_stream_that_fails_to_start_is_closed(monkeypatch):
    streams = []

    class DeadStream:
        def __init__(self, **kwargs):
            self.closed = False
            streams.append(self)

        def start(self):
            raise RuntimeError("device busy")

        def close(self):
            self.closed = True

    fake_sd = types.SimpleNamespace(
        query_devices=lambda kind: {"default_samplerate": 48000.0},
        InputStream=DeadStream,
    )
    monkeypatch.setitem(sys.modules, "sounddevice", fake_sd)

    with pytest.raises(AcquisitionError, match="device busy"):
        await MicrophoneCapture().acquire_recording()
    assert len(streams) == 1
    assert streams[0].closed is True


# ── piper engine ──


class FakeChunk:
    def __init__(self, n):
        self.audio_int16_array = np.full(n, n, dtype=np.int16)


class FakeVoice:
    def synthesize(self, text, syn_config=None):
        for n in (1, 2, 3):
            yield FakeChunk(n)


def test_piper_rate_maps_to_length_scale():
    assert PiperTTSEngine("voice.onnx", rate=0.5).length_scale == 2.0
    with pytest.raises(ValueError):
        PiperTTSEngine("voice.onnx", rate=0)


@pytest.mark.asyncio
async def test_piper_stop_interrupts_synthesis():
    engine = PiperTTSEngine("voice.onnx")
    engine._voice = FakeVoice()
    chunks = engine.pcm_chunks("Great job.")
    assert len(next(chunks)) == 1
    await engine.stop()
    assert list(chunks) == []


@pytest.mark.asyncio
async def test_piper_speak_before_initialize_is_silent():
    engine = PiperTTSEngine("voice.onnx")
    await engine.speak("hello")
    assert engine.is_speaking is False
