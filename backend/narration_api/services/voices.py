from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

DEFAULT_LANGUAGE = "es-latam"
DEFAULT_GENDER = "neutral"
FALLBACK_VOICE = "Aoede"

# Prebuilt Gemini voices picked for calm meditation narration.
VOICE_CONFIG: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "es-latam": MappingProxyType(
            {
                "male": "Sulafat",  # Warm
                "female": "Achernar",  # Soft
                "neutral": "Aoede",  # Breezy
            }
        ),
        "en": MappingProxyType(
            {
                "male": "Sulafat",  # Warm
                "female": "Vindemiatrix",  # Gentle
                "neutral": "Enceladus",  # Breathy
            }
        ),
    }
)

VOICE_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "Sulafat": "Warm - Soothing and comforting",
        "Achernar": "Soft - Gentle and delicate",
        "Aoede": "Breezy - Light and serene",
        "Vindemiatrix": "Gentle - Calm and peaceful",
        "Enceladus": "Breathy - Ethereal and meditative",
    }
)

ALL_AVAILABLE_VOICES: tuple[str, ...] = (
    "Zephyr", "Puck", "Charon", "Kore", "Fenrir", "Leda", "Orus", "Aoede",
    "Callirrhoe", "Autonoe", "Enceladus", "Iapetus", "Umbriel", "Algieba",
    "Despina", "Erinome", "Algenib", "Rasalgethi", "Laomedeia", "Achernar",
    "Alnilam", "Schedar", "Gacrux", "Pulcherrima", "Achird", "Zubenelgenubi",
    "Vindemiatrix", "Sadachbia", "Sadaltager", "Sulafat",
)

_SPANISH_STYLE_PROMPT = (
    "Habla en un susurro suave y cercano, con un ritmo muy lento, pausas prolongadas "
    "entre frases y un tono cálido tipo ASMR:"
)
_ENGLISH_STYLE_PROMPT = (
    "Speak in a soft whisper, very slow rhythm, long pauses between phrases, "
    "and a warm tone like ASMR:"
)


def resolve_voice(language: str | None, gender: str | None) -> str:
    """Look up the voice for a language/gender pair, falling back to ``FALLBACK_VOICE``.

    Values are matched as given: ``None`` and empty strings are unmapped.
    Request defaults are applied by ``NarrationRequest``.
    """
    if language is None or gender is None:
        return FALLBACK_VOICE
    voices = VOICE_CONFIG.get(language) or {}
    return voices.get(gender) or FALLBACK_VOICE


def style_prompt(language: str | None) -> str:
    if language == "es-latam":
        return _SPANISH_STYLE_PROMPT
    return _ENGLISH_STYLE_PROMPT


def build_prompt(text: str, language: str | None) -> str:
    """Prefix the narration with the delivery instruction for its language."""
    return f"{style_prompt(language)} {text}"


def voice_table() -> dict[str, dict[str, str]]:
    return {language: dict(voices) for language, voices in VOICE_CONFIG.items()}


__all__ = [
    "ALL_AVAILABLE_VOICES",
    "DEFAULT_GENDER",
    "DEFAULT_LANGUAGE",
    "FALLBACK_VOICE",
    "VOICE_CONFIG",
    "VOICE_DESCRIPTIONS",
    "build_prompt",
    "resolve_voice",
    "style_prompt",
    "voice_table",
]
