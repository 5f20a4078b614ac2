from __future__ import annotations

import logging
from typing import Callable, Optional, Union

import httpx
from anyio import to_thread
from pydantic import ValidationError

from .errors import AnnotationError, ErrorCategory, classify, missing_input
from .models import AnnotationRequest, ExplanationResult, Operation, TranslationResult
from .settings import (
    DEFAULT_GEMINI_EXPLANATION_MODEL,
    DEFAULT_GEMINI_MODEL,
    GeminiSettings,
    get_gemini_settings,
)
from .upstream import PROVIDER_GEMINI

logger = logging.getLogger(__name__)


class AnnotationDispatcher:
    """Client for the translate/explain endpoints.

    Each call reads a fresh settings snapshot, sends one request and returns
    the server-shaped result as-is. Failures raise ``AnnotationError``; there
    are no retries and overlapping calls are not coordinated.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        provider: str = PROVIDER_GEMINI,
        settings_loader: Callable[[], GeminiSettings] = get_gemini_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.provider = provider
        self.settings_loader = settings_loader
        self.transport = transport

    def endpoint(self, operation: Operation) -> str:
        return f"{self.base_url}/api/{self.provider}/{operation.value}"

    def resolve_model(self, operation: Operation, model_override: Optional[str] = None) -> Optional[str]:
        """Pick the model id to send.

        Saved preferences only describe Gemini models; other providers send
        ``None`` unless overridden so the server applies its own default.
        ``settings_loader`` may block, so ``dispatch`` runs this in a worker thread.
        """
        if model_override:
            return model_override
        if self.provider != PROVIDER_GEMINI:
            return None
        settings = self.settings_loader()
        if operation is Operation.TRANSLATE:
            return settings.model or DEFAULT_GEMINI_MODEL
        return settings.explanation_model or DEFAULT_GEMINI_EXPLANATION_MODEL

    async def dispatch(
        self,
        operation: Operation,
        text: str,
        context_before: str = "",
        context_after: str = "",
        model_override: Optional[str] = None,
    ) -> Union[TranslationResult, ExplanationResult]:
        if not text:
            raise missing_input()

        model = await to_thread.run_sync(self.resolve_model, operation, model_override)
        request = AnnotationRequest(
            text=text,
            context_before=context_before,
            context_after=context_after,
            model=model,
        )
        try:
            async with httpx.AsyncClient(timeout=None, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint(operation),
                    json=request.model_dump(by_alias=True),
                )
        except httpx.RequestError as exc:
            logger.warning("%s request failed: %s", operation.value, exc)
            raise AnnotationError(ErrorCategory.TRANSPORT, f"Network error: {exc}", 0) from exc

        if response.is_error:
            error = classify(response.status_code, response.text)
            logger.warning("%s returned %s (%s)", operation.value, response.status_code, error.category.value)
            raise error

        try:
            return operation.result_model(**response.json())
        except (ValueError, TypeError, ValidationError) as exc:
            raise AnnotationError(
                ErrorCategory.UPSTREAM,
                f"API error ({response.status_code}): {response.text}",
                response.status_code,
            ) from exc

    async def translate(
        self,
        text: str,
        context_before: str = "",
        context_after: str = "",
        model_override: Optional[str] = None,
    ) -> TranslationResult:
        return await self.dispatch(Operation.TRANSLATE, text, context_before, context_after, model_override)

    async def explain(
        self,
        text: str,
        context_before: str = "",
        context_after: str = "",
        model_override: Optional[str] = None,
    ) -> ExplanationResult:
        return await self.dispatch(Operation.EXPLAIN, text, context_before, context_after, model_override)
