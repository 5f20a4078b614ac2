from __future__ import annotations

import logging
import os
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import APP_NAME, APP_VERSION, upstream
from .errors import AnnotationError, ErrorCategory, missing_input
from .models import (
    AnnotationRequest,
    ErrorResponse,
    ExplanationResult,
    HealthResponse,
    ModelCatalogueResponse,
    ModelOption,
    Operation,
    TranslationResult,
)
from .normalizer import normalize
from .prompts import SYSTEM_INSTRUCTIONS, build_prompt
from .settings import GEMINI_MODELS

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 429, 500)
}

app = FastAPI(title=APP_NAME.replace("-", " ").title(), version=APP_VERSION)

allowed_origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://127.0.0.1",
    "http://127.0.0.1:3000",
]
allowed_origins.extend(
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "").split(",") if origin.strip()
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class UnknownProviderError(Exception):
    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


@app.exception_handler(AnnotationError)
async def annotation_error_handler(request: Request, exc: AnnotationError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(tuple(error.get("loc", ()))[-1:] == ("text",) for error in errors):
        error = missing_input()
    else:
        detail = errors[0].get("msg", "malformed body") if errors else "malformed body"
        error = AnnotationError(ErrorCategory.MISSING_INPUT, f"Invalid request body: {detail}", 400)
    logger.warning("Rejected request to %s: %s", request.url.path, error.message)
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


@app.exception_handler(UnknownProviderError)
async def unknown_provider_handler(request: Request, exc: UnknownProviderError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


def _check_provider(provider: str) -> str:
    provider = provider.lower()
    if provider not in upstream.PROVIDERS:
        raise UnknownProviderError(provider)
    return provider


async def handle_annotation(provider: str, operation: Operation, payload: AnnotationRequest) -> dict:
    """Run one translate/explain exchange against the upstream provider.

    The credential is checked before the input, and both before any network
    call. The raw model text is normalized into the operation's result shape.
    """
    api_key = upstream.require_api_key(provider)
    if not payload.text:
        raise missing_input()

    prompt = build_prompt(operation, payload.text, payload.context_before, payload.context_after)
    generate = upstream.GENERATORS[provider]
    try:
        raw_text = await generate(
            api_key=api_key,
            system_instruction=SYSTEM_INSTRUCTIONS[operation],
            prompt=prompt,
            model=payload.model or upstream.default_model(provider),
        )
    except AnnotationError:
        raise
    except Exception as exc:
        logger.error("%s error: %s", operation.value.title(), exc)
        raise AnnotationError(ErrorCategory.UPSTREAM, str(exc) or "Unknown error", 500) from exc

    return normalize(raw_text, operation.primary_field)


@app.get("/healthz", response_model=HealthResponse)
async def healthz() -> HealthResponse:
    """Basic liveness probe to verify the service is up."""
    return HealthResponse(ok=True, service=APP_NAME, version=APP_VERSION)


@app.post("/api/{provider}/translate", response_model=TranslationResult, responses=ERROR_RESPONSES)
async def translate_endpoint(provider: str, payload: AnnotationRequest) -> TranslationResult:
    provider = _check_provider(provider)
    result = await handle_annotation(provider, Operation.TRANSLATE, payload)
    return TranslationResult(**result)


@app.post("/api/{provider}/explain", response_model=ExplanationResult, responses=ERROR_RESPONSES)
async def explain_endpoint(provider: str, payload: AnnotationRequest) -> ExplanationResult:
    provider = _check_provider(provider)
    result = await handle_annotation(provider, Operation.EXPLAIN, payload)
    return ExplanationResult(**result)


@app.get("/api/{provider}/models", response_model=ModelCatalogueResponse)
async def models_endpoint(provider: str) -> ModelCatalogueResponse:
    provider = _check_provider(provider)
    if provider == upstream.PROVIDER_GEMINI:
        models: List[ModelOption] = [ModelOption(**option) for option in GEMINI_MODELS]
    else:
        model_id = upstream.DEFAULT_OPENAI_MODEL
        models = [ModelOption(id=model_id, name=model_id, description="Configured OpenAI-compatible model")]
    return ModelCatalogueResponse(
        provider=provider,
        default_model=upstream.default_model(provider),
        models=models,
    )
