from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from .services.voices import DEFAULT_GENDER, DEFAULT_LANGUAGE


class NarrationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    gender: Optional[str] = DEFAULT_GENDER
    content_language: Optional[str] = Field(default=DEFAULT_LANGUAGE, alias="contentLanguage")


class SynthesisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_content: str = Field(alias="audioContent")
    mime_type: str = Field(alias="mimeType")
    voice: str
    language: Optional[str]


class HealthResponse(BaseModel):
    status: str
    service: str
    model: str


class VoicesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str
    voices: Dict[str, Dict[str, str]]
    descriptions: Dict[str, str]
    all_available_voices: List[str] = Field(alias="allAvailableVoices")


class ErrorResponse(BaseModel):
    error: str
