from __future__ import annotations

from typing import Any, Dict, Optional

GENERATION_FAILED_MESSAGE = "Failed to generate content. Please ensure the API Key is valid and try again."
EXPORT_FAILED_MESSAGE = "Could not generate Word document."


class BookCraftError(Exception):
    """Base for errors that are surfaced to the client as a single opaque message."""

    code = "internal_error"
    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return {"error": payload}


class ConfigurationError(BookCraftError):
    code = "configuration_error"
    status_code = 503
    default_message = (
        "The API Key is missing. This app requires a valid API key to function. "
        "OPENAI_API_KEY is undefined."
    )


class GenerationFailure(BookCraftError):
    code = "generation_failed"
    status_code = 502
    default_message = GENERATION_FAILED_MESSAGE


class GenerationInProgress(BookCraftError):
    code = "generation_in_progress"
    status_code = 409
    default_message = "A manuscript is already being generated for this session."


class NoBookError(BookCraftError):
    code = "no_book"
    status_code = 409
    default_message = "No manuscript has been generated yet."


class ExportFailure(BookCraftError):
    code = "export_failed"
    status_code = 500
    default_message = EXPORT_FAILED_MESSAGE
