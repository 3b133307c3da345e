from __future__ import annotations

import base64
import struct

import pytest
from fastapi.testclient import TestClient

from narration_api.config import settings
from narration_api.core.gemini_client import GeminiTTSClient
from narration_api.main import app
from narration_api.routers import tts_api
from narration_api.services.retry import FixedRetryPolicy
from narration_api.services.synthesis import NarrationSynthesizer

PCM = struct.pack("<3h", 10, -10, 20)


class FakeGemini(GeminiTTSClient):
    def __init__(self, *outcomes) -> None:
        super().__init__(api_key="test", model="gemini-tts")
        self._outcomes = list(outcomes)
        self.calls = 0

    async def generate_speech(self, text: str, voice_name: str, *, timeout: float) -> dict:
        self.calls += 1
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _pcm_response() -> dict:
    encoded = base64.b64encode(PCM).decode()
    return {"candidates": [{"content": {"parts": [{"inlineData": {"data": encoded, "mimeType": "audio/L16;rate=24000"}}]}}]}


@pytest.fixture
def fake_gemini():
    holder: dict[str, FakeGemini] = {}

    def install(*outcomes) -> FakeGemini:
        client = FakeGemini(*outcomes)
        holder["client"] = client

        async def no_sleep(_: float) -> None:
            return None

        synthesizer = NarrationSynthesizer(
            client, timeout=5.0, policy=FixedRetryPolicy(max_attempts=2, delay=1.0), sleep=no_sleep
        )
        app.dependency_overrides[tts_api.get_synthesizer] = lambda: synthesizer
        return client

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": settings.app_name, "model": settings.tts_model}


def test_voices_listing(client: TestClient) -> None:
    body = client.get("/voices").json()

    assert body["model"] == settings.tts_model
    assert body["voices"]["es-latam"] == {"male": "Sulafat", "female": "Achernar", "neutral": "Aoede"}
    assert body["voices"]["en"]["female"] == "Vindemiatrix"
    assert body["descriptions"]["Enceladus"].startswith("Breathy")
    assert len(body["allAvailableVoices"]) == 30


def test_synthesize_returns_wav(client: TestClient, fake_gemini) -> None:
    gemini = fake_gemini(_pcm_response())

    resp = client.post("/synthesize", json={"text": "Relájate", "gender": "male"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["mimeType"] == "audio/wav"
    assert body["voice"] == "Sulafat"
    assert body["language"] == "es-latam"
    wav = base64.b64decode(body["audioContent"])
    assert wav[:4] == b"RIFF" and wav[44:] == PCM
    assert gemini.calls == 1


@pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": None, "gender": "female"}])
def test_synthesize_requires_text(client: TestClient, fake_gemini, payload: dict) -> None:
    gemini = fake_gemini(_pcm_response())

    resp = client.post("/synthesize", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Text is required"}
    assert gemini.calls == 0


def test_synthesize_without_body_is_client_error(client: TestClient, fake_gemini) -> None:
    gemini = fake_gemini(_pcm_response())

    resp = client.post("/synthesize")

    assert resp.status_code == 400
    assert resp.json() == {"error": "Text is required"}
    assert gemini.calls == 0


def test_synthesize_recovers_after_one_failure(client: TestClient, fake_gemini) -> None:
    gemini = fake_gemini(RuntimeError("fetch failed"), _pcm_response())

    resp = client.post("/synthesize", json={"text": "hello", "contentLanguage": "en"})

    assert resp.status_code == 200
    assert resp.json()["voice"] == "Enceladus"
    assert gemini.calls == 2


def test_synthesize_reports_failure_after_retries(client: TestClient, fake_gemini) -> None:
    gemini = fake_gemini(RuntimeError("read ECONNRESET"))

    resp = client.post("/synthesize", json={"text": "hello"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Connection to Gemini API failed. Please try again."}
    assert gemini.calls == 2


def test_oversized_body_is_rejected(client: TestClient, fake_gemini, monkeypatch: pytest.MonkeyPatch) -> None:
    gemini = fake_gemini(_pcm_response())
    monkeypatch.setattr(settings, "max_body_bytes", 16)

    resp = client.post("/synthesize", json={"text": "x" * 64})

    assert resp.status_code == 413
    assert "error" in resp.json()
    assert gemini.calls == 0


def _chunks(*parts: bytes):
    for part in parts:
        yield part


def test_oversized_chunked_body_is_rejected(client: TestClient, fake_gemini, monkeypatch: pytest.MonkeyPatch) -> None:
    gemini = fake_gemini(_pcm_response())
    monkeypatch.setattr(settings, "max_body_bytes", 16)

    resp = client.post(
        "/synthesize",
        content=_chunks(b'{"text": "', b"x" * 64, b'"}'),
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 413
    assert resp.json() == {"error": "Request body too large"}
    assert gemini.calls == 0


def test_chunked_body_within_limit_is_accepted(client: TestClient, fake_gemini) -> None:
    gemini = fake_gemini(_pcm_response())

    resp = client.post(
        "/synthesize",
        content=_chunks(b'{"text": ', b'"hola", "gender": "female"}'),
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 200
    assert resp.json()["voice"] == "Achernar"
    assert gemini.calls == 1


@pytest.mark.parametrize(
    ("payload", "voice", "language"),
    [
        ({"text": "hola", "contentLanguage": "", "gender": "male"}, "Aoede", ""),
        ({"text": "hello", "contentLanguage": "en", "gender": ""}, "Aoede", "en"),
        ({"text": "hola", "gender": None}, "Aoede", "es-latam"),
        ({"text": "hello", "contentLanguage": None, "gender": "female"}, "Aoede", None),
    ],
)
def test_unmapped_language_or_gender_uses_fallback_voice(
    client: TestClient, fake_gemini, payload: dict, voice: str, language
) -> None:
    fake_gemini(_pcm_response())

    resp = client.post("/synthesize", json=payload)

    assert resp.status_code == 200
    assert resp.json()["voice"] == voice
    assert resp.json()["language"] == language
