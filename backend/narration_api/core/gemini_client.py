# narration_api/core/gemini_client.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict

import aiohttp

from .wav import DEFAULT_PCM_MIME_TYPE

LOGGER = logging.getLogger(__name__)

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiAPIError(RuntimeError):
    """Raised when the generateContent endpoint answers with a non-200 status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Gemini HTTP {status}: {body[:300]}")
        self.status = status


class NoAudioContentError(RuntimeError):
    """Raised when a response carries no inline audio part."""


@dataclass(frozen=True)
class InlineAudio:
    data: str
    mime_type: str


class GeminiTTSClient:
    """Thin async client for Gemini's speech generation endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def build_payload(self, text: str, voice_name: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {
                        "prebuiltVoiceConfig": {"voiceName": voice_name},
                    },
                },
            },
        }

    async def generate_speech(self, text: str, voice_name: str, *, timeout: float) -> Dict[str, Any]:
        """Call generateContent once, aborting when ``timeout`` seconds elapse.

        Raises ``asyncio.TimeoutError`` on the deadline, ``GeminiAPIError`` on a
        non-200 answer and lets ``aiohttp.ClientError`` propagate.
        """
        return await asyncio.wait_for(self._post(text, voice_name, timeout), timeout=timeout)

    async def _post(self, text: str, voice_name: str, timeout: float) -> Dict[str, Any]:
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = self.build_payload(text, voice_name)
        client_timeout = aiohttp.ClientTimeout(total=timeout)

        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.post(self.url, json=payload, headers=headers) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise GeminiAPIError(resp.status, body)
                data = await resp.json()
        LOGGER.debug("[gemini] response type: %s", type(data).__name__)
        return data


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_inline_audio(response: Any) -> InlineAudio:
    """Return the first inline audio part of the first candidate.

    Replies of any other shape raise ``NoAudioContentError``.
    """
    candidates = _as_dict(response).get("candidates")
    candidate = _as_dict(candidates[0]) if isinstance(candidates, list) and candidates else {}
    parts = _as_dict(candidate.get("content")).get("parts")
    if not isinstance(parts, list) or not parts:
        raise NoAudioContentError("No audio content in response")

    for part in parts:
        part = _as_dict(part)
        inline = _as_dict(part.get("inlineData") or part.get("inline_data"))
        if not inline:
            continue
        data = inline.get("data")
        if not isinstance(data, str) or not data:
            break
        mime_type = inline.get("mimeType") or inline.get("mime_type")
        if not isinstance(mime_type, str) or not mime_type:
            mime_type = DEFAULT_PCM_MIME_TYPE
        return InlineAudio(data=data, mime_type=mime_type)
    raise NoAudioContentError("No audio data found in response")


__all__ = [
    "GeminiAPIError",
    "GeminiTTSClient",
    "InlineAudio",
    "NoAudioContentError",
    "extract_inline_audio",
]
