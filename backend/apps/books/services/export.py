from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .docx_packer import DOCX_CONTENT_TYPE, pack_docx
from .errors import ExportFailure
from .layout import build_layout
from .sanitizer import sanitize
from .schemas import BookStructure

logger = logging.getLogger(__name__)

EXPORT_SUFFIX = "_AntoniBookCraft"
MAX_STEM_LENGTH = 100
DOCX_EXTENSION = ".docx"

_NON_WORD_RUN_RE = re.compile(r"[\s\W]+")


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    content_type: str = DOCX_CONTENT_TYPE


def export_filename(title: Optional[str]) -> str:
    stem = _NON_WORD_RUN_RE.sub("_", sanitize(title))[:MAX_STEM_LENGTH] or "book"
    return f"{stem}{EXPORT_SUFFIX}{DOCX_EXTENSION}"


def export_docx(book: BookStructure, *, year: Optional[int] = None) -> ExportResult:
    """Build and pack the Word document. Any failure becomes one opaque ExportFailure."""
    try:
        content = pack_docx(build_layout(book, year=year))
    except Exception as exc:
        logger.error("Error generating Word document title=%r", book.title, exc_info=True)
        raise ExportFailure() from exc
    return ExportResult(filename=export_filename(book.title), content=content)


def render_plain_text(book: BookStructure) -> str:
    """Markdown rendering of the whole book, as offered by the "copy text" action."""
    lines: List[str] = [f"# {book.title}", book.subtitle, "", f"By {book.author}", ""]
    lines += ["## Abstract", book.abstract, ""]
    for number, chapter in enumerate(book.chapters, start=1):
        lines += [f"## Chapter {number}: {chapter.title}", ""]
        for section in chapter.sections:
            lines += [f"### {section.title}", section.content, ""]
    lines.append("## References")
    lines += [f"- {ref}" for ref in book.references]
    return "\n".join(lines) + "\n"
