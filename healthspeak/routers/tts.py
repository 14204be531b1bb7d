"""Voice playback router.

No audio is synthesized server-side: ``POST /tts`` returns a sanitized,
clamped configuration for the browser's speech engine, and ``/tts/voices``
lists commonly available voice names.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from healthspeak.core.config import Settings
from healthspeak.core.errors import ValidationError
from healthspeak.routers.dependencies import get_app_settings
from healthspeak.schemas.envelope import format_success_response
from healthspeak.services.sanitization import sanitize_input, validate_text_input

router = APIRouter(prefix="/tts", tags=["tts"])

MIN_SPEED = 0.5
MAX_SPEED = 2.0

RECOMMENDED_VOICES = ["Google US English", "Microsoft Zira - English (United States)", "Alex"]

VOICES = [
    {"name": "Google US English", "lang": "en-US", "gender": "female", "recommended": True},
    {"name": "Google UK English Female", "lang": "en-GB", "gender": "female", "recommended": True},
    {"name": "Google UK English Male", "lang": "en-GB", "gender": "male", "recommended": True},
    {"name": "Microsoft Zira", "lang": "en-US", "gender": "female", "recommended": False},
    {"name": "Microsoft David", "lang": "en-US", "gender": "male", "recommended": False},
    {"name": "Alex", "lang": "en-US", "gender": "male", "recommended": False},
]


class TTSRequest(BaseModel):
    text: str = Field(..., min_length=1)
    voice: Optional[str] = None
    speed: Optional[float] = None
    language: Optional[str] = None


def clamp_speed(speed: Optional[float]) -> float:
    return max(MIN_SPEED, min(MAX_SPEED, speed or 1.0))


@router.post("")
async def prepare_tts(payload: TTSRequest, settings: Settings = Depends(get_app_settings)):
    text = sanitize_input(payload.text)
    validation = validate_text_input(text, settings.tts_max_text_length)
    if not validation.is_valid:
        raise ValidationError.from_errors(validation.errors, prefix="Text validation failed")

    config = {
        "text": text,
        "voice": sanitize_input(payload.voice) or "default",
        "speed": clamp_speed(payload.speed),
        "language": sanitize_input(payload.language) or "en-US",
        "instructions": {
            "useWebSpeechAPI": True,
            "fallbackMessage": "Text-to-speech is not supported in your browser",
            "recommendedVoices": RECOMMENDED_VOICES,
        },
    }
    return format_success_response(config, "TTS configuration prepared successfully")


@router.get("/voices")
async def list_voices():
    return format_success_response(
        {
            "voices": VOICES,
            "instructions": {
                "note": "Actual available voices depend on the user's browser and operating system",
                "clientSideDetection": "Use speechSynthesis.getVoices() in the browser for real-time voice detection",
                "fallback": "If no voices are available, display text instructions instead",
            },
        }
    )
