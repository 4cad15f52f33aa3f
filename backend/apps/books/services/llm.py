from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from openai import OpenAI

from .config import GenerationConfig
from .contract import build_response_schema, build_system_instruction, build_user_prompt, chapter_count_for
from .errors import GenerationFailure
from .schemas import BookStructure, GenerationParameters

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA_NAME = "book_structure"


class LLMService:
    """
    Adapter around the generative-AI text service.

    One ``generate_book`` call issues exactly one outbound request. The
    client is built with ``max_retries=0``; nothing here retries. Every
    failure (transport, empty text, bad JSON, invalid structure) surfaces as
    a single ``GenerationFailure``.
    """

    def __init__(self, config: Optional[GenerationConfig] = None, client: Any = None) -> None:
        self.config = config or GenerationConfig.from_settings()
        self._client = client or OpenAI(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            max_retries=0,
        )

    def __call__(self, params: GenerationParameters) -> BookStructure:
        return self.generate_book(params)

    def generate_book(self, params: GenerationParameters) -> BookStructure:
        logger.info(
            "Generating book topic=%r language=%s pages=%d references=%d target_chapters=%d",
            params.topic,
            params.language,
            params.page_count,
            params.reference_count,
            chapter_count_for(params.page_count),
        )
        payload = self._call_json(
            system_prompt=build_system_instruction(params),
            user_prompt=build_user_prompt(params),
            schema=build_response_schema(params),
        )
        try:
            book = BookStructure.from_payload(payload, default_language=params.language)
        except ValueError as exc:
            logger.warning("AI response failed book validation: %s", exc)
            raise GenerationFailure(details={"reason": str(exc)}) from exc

        if len(book.references) != params.reference_count:
            logger.info(
                "Reference count differs from request (requested=%d received=%d)",
                params.reference_count,
                len(book.references),
            )
        logger.info("Generated book title=%r chapters=%d", book.title, len(book.chapters))
        return book

    # ------------------------------------------------------------------
    # Private — API layer
    # ------------------------------------------------------------------

    def _call_json(self, system_prompt: str, user_prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.chat.completions.create(
                model=self.config.model,
                temperature=self.config.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": RESPONSE_SCHEMA_NAME, "schema": schema},
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except Exception as exc:
            logger.error("AI generation request failed", exc_info=True)
            raise GenerationFailure() from exc

        content = _response_text(response)
        if not content.strip():
            logger.warning("AI generation returned no text")
            raise GenerationFailure(details={"reason": "No response generated from AI"})
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.warning("AI generation returned invalid JSON: %s", exc)
            raise GenerationFailure(details={"reason": "Response was not valid JSON"}) from exc
        if not isinstance(payload, dict):
            raise GenerationFailure(details={"reason": "Top-level JSON must be an object"})
        return payload


def _response_text(response: Any) -> str:
    try:
        return response.choices[0].message.content or ""
    except (AttributeError, IndexError, TypeError):
        return ""
