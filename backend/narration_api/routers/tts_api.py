from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends

from ..config import settings
from ..core.gemini_client import GeminiTTSClient
from ..schemas import ErrorResponse, HealthResponse, NarrationRequest, SynthesisResponse, VoicesResponse
from ..services.retry import FixedRetryPolicy
from ..services.synthesis import NarrationSynthesizer
from ..services.voices import ALL_AVAILABLE_VOICES, VOICE_DESCRIPTIONS, voice_table

router = APIRouter()


@lru_cache
def get_synthesizer() -> NarrationSynthesizer:
    client = GeminiTTSClient(
        api_key=settings.require_api_key(),
        model=settings.tts_model,
        base_url=settings.gemini_base_url,
    )
    policy = FixedRetryPolicy(max_attempts=settings.max_attempts, delay=settings.retry_delay)
    return NarrationSynthesizer(client, timeout=settings.request_timeout, policy=policy)


@router.get("/", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", service=settings.app_name, model=settings.tts_model)


@router.post(
    "/synthesize",
    response_model=SynthesisResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def synthesize(
    payload: NarrationRequest,
    synthesizer: NarrationSynthesizer = Depends(get_synthesizer),
) -> SynthesisResponse:
    """Generate narration audio. Errors are rendered by the app-level handlers."""
    result = await synthesizer.synthesize(payload)
    return SynthesisResponse(
        audio_content=result.audio_content,
        mime_type=result.mime_type,
        voice=result.voice,
        language=result.language,
    )


@router.get("/voices", response_model=VoicesResponse)
async def list_voices() -> VoicesResponse:
    return VoicesResponse(
        model=settings.tts_model,
        voices=voice_table(),
        descriptions=dict(VOICE_DESCRIPTIONS),
        all_available_voices=list(ALL_AVAILABLE_VOICES),
    )
