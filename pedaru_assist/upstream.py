"""Calls to the upstream generation providers.

Both helpers return the raw text of the first candidate and raise
``AnnotationError`` for everything else. Callers check the credential with
``require_api_key`` before anything else.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx
import litellm
from dotenv import load_dotenv

from .errors import AnnotationError, ErrorCategory, classify, missing_credential, no_response
from .settings import DEFAULT_GEMINI_MODEL

load_dotenv()

logger = logging.getLogger(__name__)

PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"
PROVIDERS = (PROVIDER_GEMINI, PROVIDER_OPENAI)

GEMINI_API_BASE = os.getenv("GEMINI_API_BASE") or "https://generativelanguage.googleapis.com/v1beta"
JSON_MIME_TYPE = "application/json"


def _normalize_model_name(raw_model: Optional[str], *, default: str) -> str:
    model = raw_model or default
    if not model.startswith("openai/"):
        model = f"openai/{model}"
    return model


OPENAI_API_BASE_URL = os.getenv("OPENAI_API_BASE_URL") or "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = os.getenv("OPENAI_MODEL") or "gpt-4.1"


def _read_timeout() -> Optional[float]:
    raw = os.getenv("UPSTREAM_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


UPSTREAM_TIMEOUT = _read_timeout()

# Override with e.g. httpx.MockTransport to stub the provider.
UPSTREAM_TRANSPORT: Optional[httpx.AsyncBaseTransport] = None


CREDENTIAL_VARIABLES = {
    PROVIDER_GEMINI: "GEMINI_API_KEY",
    PROVIDER_OPENAI: "OPENAI_API_KEY",
}


def require_api_key(provider: str) -> str:
    """Read the provider credential at call time; raise if it is unset."""
    variable = CREDENTIAL_VARIABLES[provider]
    api_key = os.getenv(variable)
    if not api_key:
        raise missing_credential(variable)
    return api_key


def default_model(provider: str) -> str:
    if provider == PROVIDER_OPENAI:
        return DEFAULT_OPENAI_MODEL
    return DEFAULT_GEMINI_MODEL


def _extract_gemini_text(data: Dict[str, Any]) -> Optional[str]:
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) and text else None


async def generate_gemini(*, api_key: str, system_instruction: str, prompt: str, model: Optional[str]) -> str:
    model_id = model or DEFAULT_GEMINI_MODEL
    url = f"{GEMINI_API_BASE}/models/{model_id}:generateContent"
    body = {
        "contents": [{"parts": [{"text": prompt}]}],
        "systemInstruction": {"parts": [{"text": system_instruction}]},
        "generationConfig": {"responseMimeType": JSON_MIME_TYPE},
    }
    try:
        async with httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT, transport=UPSTREAM_TRANSPORT) as client:
            response = await client.post(url, headers={"x-goog-api-key": api_key}, json=body)
    except httpx.RequestError as exc:
        logger.warning("Gemini request failed: %s", exc)
        raise AnnotationError(ErrorCategory.TRANSPORT, f"Request to Gemini failed: {exc}", 500) from exc

    if response.is_error:
        error = classify(response.status_code, response.text)
        logger.warning("Gemini returned %s (%s)", response.status_code, error.category.value)
        raise error

    try:
        data = response.json()
    except ValueError:
        logger.warning("Gemini returned a non-JSON body")
        raise no_response()
    if not isinstance(data, dict):
        raise no_response()
    if data.get("error"):
        message = (data["error"] or {}).get("message") if isinstance(data["error"], dict) else None
        raise AnnotationError(ErrorCategory.UPSTREAM, message or str(data["error"]), 500)

    text = _extract_gemini_text(data)
    if text is None:
        raise no_response()
    return text


async def generate_openai(*, api_key: str, system_instruction: str, prompt: str, model: Optional[str]) -> str:
    messages = [
        {"role": "system", "content": system_instruction},
        {"role": "user", "content": prompt},
    ]
    try:
        response = await litellm.acompletion(
            api_key=api_key,
            base_url=OPENAI_API_BASE_URL,
            model=_normalize_model_name(model, default=DEFAULT_OPENAI_MODEL),
            messages=messages,
            response_format={"type": "json_object"},
            n=1,
            timeout=UPSTREAM_TIMEOUT,
        )
    except (litellm.APIConnectionError, litellm.Timeout) as exc:
        logger.warning("LiteLLM/OpenAI connection failed: %s", exc)
        raise AnnotationError(ErrorCategory.TRANSPORT, f"Request to OpenAI failed: {exc}", 500) from exc
    except Exception as exc:  # litellm maps provider errors onto exceptions with status_code
        status_code = getattr(exc, "status_code", None)
        if not isinstance(status_code, int):
            raise
        error = classify(status_code, str(exc))
        logger.warning("LiteLLM/OpenAI returned %s (%s)", status_code, error.category.value)
        raise error from exc

    choices = response.get("choices") or []
    for choice in choices:
        message = choice.get("message") or {}
        content = message.get("content")
        if content:
            return content
    raise no_response()


GENERATORS = {
    PROVIDER_GEMINI: generate_gemini,
    PROVIDER_OPENAI: generate_openai,
}
