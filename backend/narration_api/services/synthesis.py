from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import aiohttp

from ..core.gemini_client import GeminiTTSClient, extract_inline_audio
from ..core.wav import WAV_MIME_TYPE, is_raw_pcm, pcm_base64_to_wav_base64
from ..schemas import NarrationRequest
from .retry import FixedRetryPolicy, RetryPolicy
from .voices import build_prompt, resolve_voice

LOGGER = logging.getLogger(__name__)

CONNECTION_FAILED_MESSAGE = "Connection to Gemini API failed. Please try again."
TIMED_OUT_MESSAGE = "Request timed out. The text might be too long."


class NarrationValidationError(ValueError):
    """Raised when a narration request is rejected before calling upstream."""


class SynthesisError(RuntimeError):
    """Raised when every synthesis attempt failed. ``str()`` is safe to show users."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


@dataclass(frozen=True)
class SynthesisResult:
    audio_content: str
    mime_type: str
    voice: str
    language: Optional[str]


def friendly_error_message(exc: BaseException) -> str:
    """Rewrite the last upstream failure into a user-facing message."""
    message = str(exc) or exc.__class__.__name__
    if "fetch failed" in message or "ECONNRESET" in message:
        return CONNECTION_FAILED_MESSAGE
    if isinstance(exc, asyncio.TimeoutError) or "timeout" in message or "aborted" in message:
        return TIMED_OUT_MESSAGE
    if isinstance(exc, aiohttp.ClientConnectionError):
        return CONNECTION_FAILED_MESSAGE
    return message


class NarrationSynthesizer:
    """Turn a narration request into encoded audio through Gemini TTS."""

    def __init__(
        self,
        client: GeminiTTSClient,
        *,
        timeout: float,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.timeout = timeout
        self.policy = policy or FixedRetryPolicy()
        self._sleep = sleep

    async def synthesize(self, request: NarrationRequest) -> SynthesisResult:
        text = request.text
        if not text:
            raise NarrationValidationError("Text is required")

        language = request.content_language
        voice = resolve_voice(language, request.gender)
        full_text = build_prompt(text, language)
        LOGGER.info("[tts] request: voice=%s, lang=%s, textLen=%d", voice, language, len(text))

        started = time.monotonic()
        attempt = 0
        while True:
            attempt += 1
            try:
                LOGGER.info("[tts] attempt %d/%d...", attempt, self.policy.max_attempts)
                return await self._attempt(full_text, voice, language, started)
            except Exception as exc:
                LOGGER.warning("[tts] attempt %d failed: %s", attempt, exc)
                decision = self.policy.decide(attempt, exc)
                if not decision.retry:
                    elapsed = time.monotonic() - started
                    LOGGER.error("[tts] failed after %.1fs: %s", elapsed, exc)
                    raise SynthesisError(friendly_error_message(exc), attempts=attempt) from exc
                LOGGER.info("[tts] retrying in %.1fs...", decision.delay)
                await self._sleep(decision.delay)

    async def _attempt(self, full_text: str, voice: str, language: Optional[str], started: float) -> SynthesisResult:
        response = await self.client.generate_speech(full_text, voice, timeout=self.timeout)
        audio = extract_inline_audio(response)
        LOGGER.info(
            "[tts] received in %.1fs: voice=%s, rawMimeType=%s, rawSize=%d chars",
            time.monotonic() - started,
            voice,
            audio.mime_type,
            len(audio.data),
        )

        audio_content = audio.data
        mime_type = audio.mime_type
        if is_raw_pcm(mime_type):
            audio_content = pcm_base64_to_wav_base64(audio.data)
            mime_type = WAV_MIME_TYPE
            LOGGER.info("[tts] PCM converted to WAV, size=%d chars", len(audio_content))

        return SynthesisResult(
            audio_content=audio_content,
            mime_type=mime_type,
            voice=voice,
            language=language,
        )


__all__ = [
    "CONNECTION_FAILED_MESSAGE",
    "NarrationSynthesizer",
    "NarrationValidationError",
    "SynthesisError",
    "SynthesisResult",
    "TIMED_OUT_MESSAGE",
    "friendly_error_message",
]
