from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, TypedDict

MIN_PAGE_COUNT = 1
MAX_PAGE_COUNT = 100
MIN_REFERENCE_COUNT = 1
MAX_REFERENCE_COUNT = 50


@dataclass(frozen=True)
class GenerationParameters:
    topic: str
    author_name: str
    madzhab: str = "Shafi'i"
    target_audience: str = "General Public"
    include_multimedia: bool = True
    page_count: int = 20
    reference_count: int = 15
    language: str = "Indonesia"

    def __post_init__(self) -> None:
        if not str(self.topic or "").strip():
            raise ValueError("topic is required")
        if not str(self.author_name or "").strip():
            raise ValueError("author_name is required")
        if not str(self.language or "").strip():
            raise ValueError("language is required")
        if not MIN_PAGE_COUNT <= int(self.page_count) <= MAX_PAGE_COUNT:
            raise ValueError(f"page_count must be between {MIN_PAGE_COUNT} and {MAX_PAGE_COUNT}")
        if not MIN_REFERENCE_COUNT <= int(self.reference_count) <= MAX_REFERENCE_COUNT:
            raise ValueError(
                f"reference_count must be between {MIN_REFERENCE_COUNT} and {MAX_REFERENCE_COUNT}"
            )


@dataclass(frozen=True)
class Section:
    title: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content}


@dataclass(frozen=True)
class Chapter:
    title: str
    sections: Tuple[Section, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "sections": [s.to_dict() for s in self.sections]}


@dataclass(frozen=True)
class BookStructure:
    """A generated book. Built whole from one AI response, never partially."""

    title: str
    subtitle: str
    author: str
    abstract: str
    language: str
    chapters: Tuple[Chapter, ...]
    references: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: Any, default_language: str = "") -> "BookStructure":
        """
        Validate a decoded AI response and build the book from it.

        Raises ``ValueError`` on the first structural problem. ``abstract`` may
        be omitted and ``language`` falls back to ``default_language``.
        """
        if not isinstance(payload, dict):
            raise ValueError("book payload must be an object")

        title = _required_str(payload, "title")
        subtitle = _required_str(payload, "subtitle")
        author = _required_str(payload, "author")
        abstract = _optional_str(payload, "abstract")
        language = _optional_str(payload, "language").strip() or str(default_language or "").strip()
        if not language:
            raise ValueError("language is required")

        raw_chapters = payload.get("chapters")
        if not isinstance(raw_chapters, list) or not raw_chapters:
            raise ValueError("chapters must be a non-empty array")
        chapters = tuple(_chapter_from_payload(item, index) for index, item in enumerate(raw_chapters, start=1))

        raw_references = payload.get("references")
        if not isinstance(raw_references, list):
            raise ValueError("references must be an array")
        references = tuple(str(ref) for ref in raw_references if ref is not None)

        return cls(
            title=title,
            subtitle=subtitle,
            author=author,
            abstract=abstract,
            language=language,
            chapters=chapters,
            references=references,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "author": self.author,
            "abstract": self.abstract,
            "language": self.language,
            "chapters": [c.to_dict() for c in self.chapters],
            "references": list(self.references),
        }


def _chapter_from_payload(item: Any, index: int) -> Chapter:
    if not isinstance(item, dict):
        raise ValueError(f"chapter {index} must be an object")
    title = _required_str(item, "title", f"chapter {index} title")
    raw_sections = item.get("sections")
    if not isinstance(raw_sections, list) or not raw_sections:
        raise ValueError(f"chapter {index} sections must be a non-empty array")
    sections = []
    for s_index, raw in enumerate(raw_sections, start=1):
        label = f"chapter {index} section {s_index}"
        if not isinstance(raw, dict):
            raise ValueError(f"{label} must be an object")
        content = raw.get("content")
        if not isinstance(content, str):
            raise ValueError(f"{label} content must be a string")
        sections.append(Section(title=_required_str(raw, "title", f"{label} title"), content=content))
    return Chapter(title=title, sections=tuple(sections))


def _required_str(data: Dict[str, Any], key: str, label: str = "") -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label or key} is required")
    return value


def _optional_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


# ---------------------------------------------------------------------------
# Document layout shapes produced by services.layout and consumed by
# services.docx_packer.
# ---------------------------------------------------------------------------


class DocumentBlock(TypedDict, total=False):
    type: str  # paragraph | heading | toc | page_break | bullet
    part: str  # cover | toc | abstract | chapters | references
    text: str
    level: int
    style: str
    alignment: str  # left | right | center | justify
    rtl: bool
    font: str
    size: float
    bold: bool
    italic: bool
    all_caps: bool
    color: str
    space_before: float
    space_after: float
    line_spacing: float
    page_break_before: bool
    border_top: str
    border_bottom: str
    heading_range: str


class FooterLayout(TypedDict):
    parts: List[str]  # literal text, or a field name wrapped in braces ("{PAGE}")
    alignment: str
    font: str
    size: float
    rtl: bool
    border_top: str


class StyleDefinition(TypedDict, total=False):
    font: str
    size: float
    bold: bool
    italic: bool
    color: str
    alignment: str
    rtl: bool
    space_before: float
    space_after: float


class DocumentLayout(TypedDict):
    rtl: bool
    fonts: Dict[str, str]
    margins_cm: float
    base_size: float
    line_spacing: float
    styles: Dict[str, StyleDefinition]
    blocks: List[DocumentBlock]
    footer: FooterLayout
