"""GoogleSpeechTranscriber request/response handling over a mock transport."""

import base64
import json

import httpx
import pytest

from voicelearn.errors import NotConfiguredError, TranscriptionError
from voicelearn.stt.google import GoogleSpeechTranscriber, extract_transcript

AUDIO = b"RIFF....WAVEfmt fake audio"


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "utterance.wav"
    path.write_bytes(AUDIO)
    return str(path)


def recording_transport(requests, status=200, body=None, text=None):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=body or {})

    return httpx.MockTransport(handler)


def test_extract_transcript():
    data = {"results": [{"alternatives": [{"transcript": "go back"}, {"transcript": "no"}]}]}
    assert extract_transcript(data) == "go back"
    assert extract_transcript({}) == ""
    assert extract_transcript({"results": [{}]}) == ""


def test_is_configured():
    assert GoogleSpeechTranscriber().is_configured is False
    assert GoogleSpeechTranscriber(proxy_url="http://proxy").is_configured is True
    assert GoogleSpeechTranscriber(api_key="k").is_configured is True


@pytest.mark.asyncio
async def test_unconfigured_raises(audio_file):
    with pytest.raises(NotConfiguredError):
        await GoogleSpeechTranscriber().transcribe(audio_file)


@pytest.mark.asyncio
async def test_proxy_request(audio_file):
    requests = []
    stt = GoogleSpeechTranscriber(
        proxy_url="http://proxy.local/",
        transport=recording_transport(requests, body={"transcript": "open lesson one"}),
    )
    assert await stt.transcribe(audio_file) == "open lesson one"

    (request,) = requests
    assert str(request.url) == "http://proxy.local/stt"
    payload = json.loads(request.content)
    assert base64.b64decode(payload["audio"]) == AUDIO
    assert payload["languageCode"] == "en-US"
    assert payload["config"] == {
        "encoding": "LINEAR16",
        "sampleRateHertz": 16000,
        "audioChannelCount": 1,
    }


@pytest.mark.asyncio
async def test_proxy_preferred_over_key(audio_file):
    requests = []
    stt = GoogleSpeechTranscriber(
        proxy_url="http://proxy.local",
        api_key="secret",
        transport=recording_transport(requests, body={"transcript": "hi"}),
    )
    await stt.transcribe(audio_file)
    assert requests[0].url.host == "proxy.local"
    assert "secret" not in str(requests[0].url)


@pytest.mark.asyncio
async def test_proxy_missing_transcript(audio_file):
    stt = GoogleSpeechTranscriber(
        proxy_url="http://proxy.local",
        transport=recording_transport([], body={}),
    )
    assert await stt.transcribe(audio_file) == ""


@pytest.mark.asyncio
async def test_direct_request(audio_file):
    requests = []
    body = {"results": [{"alternatives": [{"transcript": "start quiz"}]}]}
    stt = GoogleSpeechTranscriber(
        api_key="secret",
        language_code="en-GB",
        transport=recording_transport(requests, body=body),
    )
    assert await stt.transcribe(audio_file) == "start quiz"

    (request,) = requests
    assert request.url.host == "speech.googleapis.com"
    assert request.url.path == "/v1p1beta1/speech:recognize"
    assert request.url.params["key"] == "secret"
    payload = json.loads(request.content)
    assert payload["config"]["languageCode"] == "en-GB"
    assert base64.b64decode(payload["audio"]["content"]) == AUDIO


@pytest.mark.asyncio
async def test_http_error_carries_body(audio_file):
    stt = GoogleSpeechTranscriber(
        proxy_url="http://proxy.local",
        transport=recording_transport([], status=502, text="upstream timeout"),
    )
    with pytest.raises(TranscriptionError, match="upstream timeout"):
        await stt.transcribe(audio_file)


@pytest.mark.asyncio
async def test_network_error(audio_file):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    stt = GoogleSpeechTranscriber(
        proxy_url="http://proxy.local", transport=httpx.MockTransport(handler)
    )
    with pytest.raises(TranscriptionError):
        await stt.transcribe(audio_file)


@pytest.mark.asyncio
async def test_missing_audio_file(tmp_path):
    stt = GoogleSpeechTranscriber(proxy_url="http://proxy.local")
    with pytest.raises(TranscriptionError):
        await stt.transcribe(str(tmp_path / "missing.wav"))


@pytest.mark.asyncio
async def test_unreadable_reply(audio_file):
    stt = GoogleSpeechTranscriber(
        proxy_url="http://proxy.local",
        transport=recording_transport([], text="<html>bad gateway</html>"),
    )
    with pytest.raises(TranscriptionError, match="unreadable"):
        await stt.transcribe(audio_file)


@pytest.mark.asyncio
async def test_reply_that_is_not_an_object(audio_file):
    stt = GoogleSpeechTranscriber(
        api_key="secret",
        transport=recording_transport([], body=["go back"]),
    )
    with pytest.raises(TranscriptionError, match="unexpected"):
        await stt.transcribe(audio_file)
