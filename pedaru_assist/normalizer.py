"""Coerce raw model output into a ``{<primary>: str, points: [str]}`` shape.

Models are asked for bare JSON but routinely wrap it in a markdown fence,
return a one-element array, or nest objects inside ``points``. ``normalize``
runs a fixed list of parse strategies, most strict first, and falls back to
the raw text so the caller always has something to show. It never raises.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from .models import ExplanationResult, TranslationResult

logger = logging.getLogger(__name__)

StructuredResult = Dict[str, Any]
ParseStrategy = Callable[[str, str], Optional[StructuredResult]]

_OPENING_JSON_FENCE = re.compile(r"^```json\s*")
_OPENING_FENCE = re.compile(r"^```\s*")
_CLOSING_FENCE = re.compile(r"\s*```\Z")


def _loads(text: str) -> Any:
    """Parse JSON, returning ``None`` for anything unparseable."""
    try:
        return json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return None


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    cleaned = _OPENING_JSON_FENCE.sub("", cleaned)
    cleaned = _OPENING_FENCE.sub("", cleaned)
    cleaned = _CLOSING_FENCE.sub("", cleaned)
    return cleaned.strip()


def flatten_points(value: Any) -> List[str]:
    """Keep only the string entries of ``value``; anything else is dropped."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _shape(candidate: Dict[str, Any], primary_field: str) -> StructuredResult:
    primary = candidate.get(primary_field)
    return {
        primary_field: primary if isinstance(primary, str) else "",
        "points": flatten_points(candidate.get("points")),
    }


def _accept_strict(value: Any, primary_field: str) -> Optional[StructuredResult]:
    if isinstance(value, dict) and primary_field in value and isinstance(value.get("points"), list):
        return _shape(value, primary_field)
    return None


def parse_direct(raw_text: str, primary_field: str) -> Optional[StructuredResult]:
    return _accept_strict(_loads(raw_text), primary_field)


def parse_fenced(raw_text: str, primary_field: str) -> Optional[StructuredResult]:
    return _accept_strict(_loads(strip_code_fence(raw_text)), primary_field)


def parse_lenient(raw_text: str, primary_field: str) -> Optional[StructuredResult]:
    value = _loads(strip_code_fence(raw_text))
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, dict):
        return None
    return _shape(value, primary_field)


STRATEGIES: List[ParseStrategy] = [parse_direct, parse_fenced, parse_lenient]


def normalize(raw_text: str, primary_field: str) -> StructuredResult:
    for strategy in STRATEGIES:
        result = strategy(raw_text, primary_field)
        if result is not None:
            return result
    logger.debug("Model output is not structured JSON; returning it verbatim")
    return {primary_field: raw_text, "points": []}


def normalize_translation(raw_text: str) -> TranslationResult:
    return TranslationResult(**normalize(raw_text, "translation"))


def normalize_explanation(raw_text: str) -> ExplanationResult:
    return ExplanationResult(**normalize(raw_text, "summary"))
