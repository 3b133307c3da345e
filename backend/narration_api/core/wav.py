from __future__ import annotations

import base64
import struct

# Gemini TTS returns 24 kHz, 16-bit, mono PCM
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_BITS_PER_SAMPLE = 16

WAV_HEADER_SIZE = 44
WAV_MIME_TYPE = "audio/wav"
DEFAULT_PCM_MIME_TYPE = f"audio/L16;rate={PCM_SAMPLE_RATE}"

_FMT_CHUNK_SIZE = 16
_FORMAT_PCM = 1


def is_raw_pcm(mime_type: str) -> bool:
    """True when the declared MIME type is headerless linear PCM (``audio/L16``, ``audio/pcm``)."""
    return "L16" in mime_type or "pcm" in mime_type


def pcm_to_wav(
    pcm: bytes,
    *,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    bits_per_sample: int = PCM_BITS_PER_SAMPLE,
) -> bytes:
    """Wrap little-endian PCM samples in a minimal RIFF/WAVE container.

    The samples are copied unmodified after a 44-byte header. The buffer
    length is not checked against the block alignment, so a truncated
    trailing sample is passed through as-is.
    """
    bytes_per_sample = bits_per_sample // 8
    byte_rate = sample_rate * channels * bytes_per_sample
    block_align = channels * bytes_per_sample
    data_size = len(pcm)

    header = b"RIFF" + struct.pack("<I", WAV_HEADER_SIZE - 8 + data_size) + b"WAVE"
    header += b"fmt " + struct.pack(
        "<IHHIIHH",
        _FMT_CHUNK_SIZE,
        _FORMAT_PCM,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    )
    header += b"data" + struct.pack("<I", data_size)
    return header + bytes(pcm)


def pcm_base64_to_wav_base64(pcm_base64: str) -> str:
    """Decode a base64 PCM payload, wrap it as WAV and re-encode it."""
    wav = pcm_to_wav(base64.b64decode(pcm_base64))
    return base64.b64encode(wav).decode("ascii")


__all__ = [
    "DEFAULT_PCM_MIME_TYPE",
    "WAV_HEADER_SIZE",
    "WAV_MIME_TYPE",
    "is_raw_pcm",
    "pcm_base64_to_wav_base64",
    "pcm_to_wav",
]
