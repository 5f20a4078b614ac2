from __future__ import annotations

from enum import Enum
from typing import List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field


class Operation(str, Enum):
    TRANSLATE = "translate"
    EXPLAIN = "explain"

    @property
    def primary_field(self) -> str:
        return "translation" if self is Operation.TRANSLATE else "summary"

    @property
    def result_model(self) -> Type[BaseModel]:
        return TranslationResult if self is Operation.TRANSLATE else ExplanationResult


class AnnotationRequest(BaseModel):
    """Body accepted by the translate and explain endpoints.

    ``text`` is optional at the schema level so that an empty or absent value
    is reported as a missing-input error rather than a validation error.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: Optional[str] = None
    context_before: Optional[str] = Field(default=None, alias="contextBefore")
    context_after: Optional[str] = Field(default=None, alias="contextAfter")
    model: Optional[str] = None


class TranslationResult(BaseModel):
    translation: str
    points: List[str] = Field(default_factory=list)


class ExplanationResult(BaseModel):
    summary: str
    points: List[str] = Field(default_factory=list)


AnnotationResult = Union[TranslationResult, ExplanationResult]


class ErrorResponse(BaseModel):
    error: str
    category: Optional[str] = None


class ModelOption(BaseModel):
    id: str
    name: str
    description: str


class ModelCatalogueResponse(BaseModel):
    provider: str
    default_model: str
    models: List[ModelOption]


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
