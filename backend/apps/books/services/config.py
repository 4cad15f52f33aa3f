from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from .errors import ConfigurationError


@dataclass(frozen=True)
class GenerationConfig:
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.3

    @classmethod
    def from_settings(cls) -> "GenerationConfig":
        """Build the config from Django settings; raises ConfigurationError without a credential."""
        api_key = str(getattr(settings, "OPENAI_API_KEY", "") or "").strip()
        if not api_key:
            raise ConfigurationError()
        return cls(
            api_key=api_key,
            model=str(getattr(settings, "OPENAI_MODEL", "") or "").strip() or "gemini-2.5-flash",
            base_url=str(getattr(settings, "OPENAI_BASE_URL", "") or "").strip() or None,
            temperature=float(getattr(settings, "BOOK_AGENT_TEMPERATURE", 0.3)),
        )


def configuration_error() -> Optional[ConfigurationError]:
    """The ConfigurationError the current settings would raise, if any."""
    try:
        GenerationConfig.from_settings()
    except ConfigurationError as exc:
        return exc
    return None
