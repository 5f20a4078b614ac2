"""Model preferences for the translate/explain actions.

Only model identifiers are stored. The API credential lives in the server's
environment, so ``api_key`` is always empty on this side.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List

from pydantic import BaseModel

from . import storage

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_GEMINI_EXPLANATION_MODEL = "gemini-2.0-flash"

GEMINI_SETTINGS_KEY = "pedaru_gemini_settings"

GEMINI_MODELS: List[Dict[str, str]] = [
    {
        "id": "gemini-2.0-flash",
        "name": "Gemini 2.0 Flash",
        "description": "Fast and efficient (Recommended)",
    },
    {
        "id": "gemini-2.0-flash-lite",
        "name": "Gemini 2.0 Flash-Lite",
        "description": "Cost-effective for high volume",
    },
    {
        "id": "gemini-2.5-flash",
        "name": "Gemini 2.5 Flash",
        "description": "Latest flash model with adaptive thinking",
    },
    {
        "id": "gemini-2.5-flash-lite",
        "name": "Gemini 2.5 Flash-Lite",
        "description": "Optimized for efficiency",
    },
    {
        "id": "gemini-2.5-pro",
        "name": "Gemini 2.5 Pro",
        "description": "Best for complex tasks",
    },
    {
        "id": "gemini-3-flash-preview",
        "name": "Gemini 3 Flash (Preview)",
        "description": "Latest preview with advanced reasoning",
    },
    {
        "id": "gemini-3-pro-preview",
        "name": "Gemini 3 Pro (Preview)",
        "description": "Most capable preview model",
    },
]

_STORAGE_ERRORS = (sqlite3.Error, OSError, ValueError)


class GeminiSettings(BaseModel):
    api_key: str = ""
    model: str = DEFAULT_GEMINI_MODEL
    explanation_model: str = DEFAULT_GEMINI_EXPLANATION_MODEL


def _from_record(record: Dict[str, Any]) -> GeminiSettings:
    model = record.get("model")
    explanation_model = record.get("explanation_model") or record.get("explanationModel")
    return GeminiSettings(
        model=model if isinstance(model, str) and model else DEFAULT_GEMINI_MODEL,
        explanation_model=(
            explanation_model
            if isinstance(explanation_model, str) and explanation_model
            else DEFAULT_GEMINI_EXPLANATION_MODEL
        ),
    )


def get_gemini_settings() -> GeminiSettings:
    try:
        record = storage.get_record(GEMINI_SETTINGS_KEY)
    except _STORAGE_ERRORS as exc:
        logger.error("Failed to get Gemini settings: %s", exc)
        return GeminiSettings()
    if record is None:
        return GeminiSettings()
    return _from_record(record)


def save_gemini_settings(settings: GeminiSettings) -> None:
    record = {"model": settings.model, "explanation_model": settings.explanation_model}
    try:
        storage.save_record(GEMINI_SETTINGS_KEY, record)
    except _STORAGE_ERRORS as exc:
        logger.error("Failed to save Gemini settings: %s", exc)


def reset_gemini_settings() -> None:
    try:
        storage.delete_record(GEMINI_SETTINGS_KEY)
    except _STORAGE_ERRORS as exc:
        logger.error("Failed to reset Gemini settings: %s", exc)


def is_gemini_configured() -> bool:
    # The credential is checked server-side on each request.
    return True
