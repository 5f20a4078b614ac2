from __future__ import annotations

from enum import Enum
from typing import Any, Dict

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."
UNAUTHORIZED_MESSAGE = "Invalid API key. Please check your Gemini API key in Settings."
NO_RESPONSE_MESSAGE = "No response from API"


class ErrorCategory(str, Enum):
    RATE_LIMITED = "RateLimited"
    UNAUTHORIZED = "Unauthorized"
    UPSTREAM = "Upstream"
    TRANSPORT = "Transport"
    MISSING_INPUT = "MissingInput"
    MISSING_CREDENTIAL = "MissingCredential"


class AnnotationError(Exception):
    """A failure with a user-facing message and the HTTP status it maps to."""

    def __init__(self, category: ErrorCategory, message: str, http_status: int) -> None:
        super().__init__(message)
        self.category = category
        self.message = message
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "category": self.category.value}

    def __repr__(self) -> str:
        return (
            f"AnnotationError(category={self.category.value!r}, "
            f"message={self.message!r}, http_status={self.http_status})"
        )


def classify(status: int, body: str) -> AnnotationError:
    """Map a non-success HTTP status to a classified error.

    Rate-limit and auth failures get fixed messages whatever the body says;
    everything else embeds the raw status and body.
    """
    if status == 429:
        return AnnotationError(ErrorCategory.RATE_LIMITED, RATE_LIMIT_MESSAGE, status)
    if status in (401, 403):
        return AnnotationError(ErrorCategory.UNAUTHORIZED, UNAUTHORIZED_MESSAGE, status)
    return AnnotationError(ErrorCategory.UPSTREAM, f"API error ({status}): {body}", status)


def missing_input() -> AnnotationError:
    return AnnotationError(ErrorCategory.MISSING_INPUT, "Text required", 400)


def missing_credential(variable: str) -> AnnotationError:
    return AnnotationError(
        ErrorCategory.MISSING_CREDENTIAL,
        f"{variable} is not configured. Please set it in .env",
        500,
    )


def no_response() -> AnnotationError:
    return AnnotationError(ErrorCategory.UPSTREAM, NO_RESPONSE_MESSAGE, 500)
