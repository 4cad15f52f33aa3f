from __future__ import annotations

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class BooksConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.books"
    label = "books"

    def ready(self) -> None:
        from .services.config import configuration_error

        error = configuration_error()
        if error is not None:
            logger.error("Configuration error: %s", error.message)
