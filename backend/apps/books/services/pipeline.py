from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, Dict, MutableMapping, Optional

from ..models import ManuscriptState
from .errors import GenerationFailure, GenerationInProgress, NoBookError
from .export import ExportResult, export_docx, render_plain_text
from .schemas import BookStructure, GenerationParameters

logger = logging.getLogger(__name__)

BookGenerator = Callable[[GenerationParameters], BookStructure]

SESSION_KEY = "manuscript"


class ManuscriptSession:
    """Typed view over the manuscript entry of a Django session (or any mutable mapping)."""

    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self.store = store
        if not isinstance(store.get(SESSION_KEY), dict):
            store[SESSION_KEY] = {"state": ManuscriptState.IDLE.value, "error": "", "book": None, "parameters": None}

    @property
    def _data(self) -> Dict[str, Any]:
        return self.store[SESSION_KEY]

    def _update(self, **values: Any) -> None:
        data = dict(self._data)
        data.update(values)
        self.store[SESSION_KEY] = data

    @property
    def state(self) -> str:
        return str(self._data.get("state") or ManuscriptState.IDLE.value)

    @property
    def error(self) -> str:
        return str(self._data.get("error") or "")

    @property
    def parameters(self) -> Optional[Dict[str, Any]]:
        return self._data.get("parameters")

    @property
    def book(self) -> Optional[BookStructure]:
        raw = self._data.get("book")
        if not raw:
            return None
        return BookStructure.from_payload(raw)

    def set_state(self, state: str, *, error: str = "") -> None:
        self._update(state=str(state), error=error)

    def set_book(self, book: Optional[BookStructure]) -> None:
        self._update(book=book.to_dict() if book is not None else None)

    def set_parameters(self, params: GenerationParameters) -> None:
        self._update(parameters=asdict(params))

    def commit(self) -> None:
        """Persist immediately so concurrent requests on the same session see the state."""
        save = getattr(self.store, "save", None)
        if callable(save):
            save()

    def snapshot(self) -> Dict[str, Any]:
        book = self._data.get("book")
        return {
            "state": self.state,
            "error": self.error or None,
            "parameters": self.parameters,
            "book": book,
        }


class BookWorkflowService:
    """
    Drives one user's manuscript through idle -> generating -> viewing / error.

    The generator is any callable from parameters to a book; by default the
    configured LLMService. Only one generation may be in flight per session.
    """

    def __init__(self, generator: Optional[BookGenerator] = None) -> None:
        self._generator = generator

    @property
    def generator(self) -> BookGenerator:
        if self._generator is None:
            from .llm import LLMService

            self._generator = LLMService()
        return self._generator

    def generate(self, session: ManuscriptSession, params: GenerationParameters) -> Dict[str, Any]:
        if session.state == ManuscriptState.GENERATING:
            raise GenerationInProgress()
        generator = self.generator

        session.set_parameters(params)
        session.set_book(None)
        session.set_state(ManuscriptState.GENERATING)
        session.commit()

        try:
            book = generator(params)
        except GenerationFailure as exc:
            self._fail(session, exc)
            raise
        except Exception as exc:
            logger.error("Unexpected error while generating book", exc_info=True)
            failure = GenerationFailure()
            self._fail(session, failure)
            raise failure from exc

        session.set_book(book)
        session.set_state(ManuscriptState.VIEWING)
        session.commit()
        return session.snapshot()

    def retry(self, session: ManuscriptSession) -> Dict[str, Any]:
        """Leave the error screen and return to the input form; the last parameters are kept."""
        if session.state == ManuscriptState.ERROR:
            session.set_state(ManuscriptState.IDLE)
        return session.snapshot()

    def reset(self, session: ManuscriptSession) -> Dict[str, Any]:
        if session.state == ManuscriptState.GENERATING:
            raise GenerationInProgress()
        session.set_book(None)
        session.set_state(ManuscriptState.IDLE)
        return session.snapshot()

    def export(self, session: ManuscriptSession) -> ExportResult:
        book = self._require_book(session)
        result = export_docx(book)
        logger.info("Exported %s (%d bytes)", result.filename, len(result.content))
        return result

    def plain_text(self, session: ManuscriptSession) -> str:
        return render_plain_text(self._require_book(session))

    def _require_book(self, session: ManuscriptSession) -> BookStructure:
        book = session.book
        if book is None:
            raise NoBookError()
        return book

    def _fail(self, session: ManuscriptSession, failure: GenerationFailure) -> None:
        logger.warning("Generation failed: %s", failure.details or failure.message)
        session.set_state(ManuscriptState.ERROR, error=failure.message)
        session.commit()
