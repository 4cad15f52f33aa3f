from __future__ import annotations

import re
from typing import Dict, List, Optional

from django.utils import timezone

from .sanitizer import sanitize
from .schemas import BookStructure, DocumentBlock, DocumentLayout, FooterLayout, StyleDefinition

RTL_LANGUAGE = "Arabic"
PRODUCT_BANNER = "ANTONI'S BOOK CRAFT"

LATIN_TITLE_FONT = "Cambria"
LATIN_BODY_FONT = "Times New Roman"
RTL_FONT = "Traditional Arabic"
BANNER_FONT = "Inter"

PRIMARY_COLOR = "064E3B"
ACCENT_COLOR = "D97706"
MUTED_COLOR = "999999"
SUBTITLE_COLOR = "555555"
RULE_COLOR = "CCCCCC"

MARGIN_CM = 2.54
BODY_SIZE = 12.0
LINE_SPACING = 1.5

TITLE_STYLE = "CustomTitle"
SUBTITLE_STYLE = "CustomSubtitle"

_LINE_SPLIT_RE = re.compile(r"[\r\n]+")


def is_rtl_language(language: str) -> bool:
    return language == RTL_LANGUAGE


def build_layout(book: BookStructure, *, year: Optional[int] = None) -> DocumentLayout:
    """
    Map a book onto the ordered block sequence the packer renders.

    Pure apart from the default year. Chapter and section order is kept as
    given; every chapter title becomes a level-1 heading and every section
    title a level-2 heading so the TOC field can find them.
    """
    rtl = is_rtl_language(book.language)
    title_font = RTL_FONT if rtl else LATIN_TITLE_FONT
    body_font = RTL_FONT if rtl else LATIN_BODY_FONT
    heading_alignment = "right" if rtl else "left"

    blocks: List[DocumentBlock] = []
    blocks.extend(_tagged(_cover_blocks(book, rtl, body_font, year), "cover"))
    blocks.extend(_tagged(_toc_blocks(rtl, title_font), "toc"))

    abstract: List[DocumentBlock] = [_heading("Abstract", 1, rtl, title_font, heading_alignment)]
    abstract.extend(text_to_paragraphs(book.abstract, rtl, body_font))
    abstract.append(_page_break(rtl))
    blocks.extend(_tagged(abstract, "abstract"))

    body: List[DocumentBlock] = []
    for chapter in book.chapters:
        heading = _heading(sanitize(chapter.title), 1, rtl, title_font, heading_alignment)
        heading["page_break_before"] = True
        heading["space_before"] = 20.0
        heading["space_after"] = 10.0
        body.append(heading)
        for section in chapter.sections:
            sub = _heading(sanitize(section.title), 2, rtl, title_font, heading_alignment)
            sub["space_before"] = 15.0
            sub["space_after"] = 7.5
            body.append(sub)
            body.extend(text_to_paragraphs(section.content, rtl, body_font))
    blocks.extend(_tagged(body, "chapters"))

    references: List[DocumentBlock] = [
        _page_break(rtl),
        _heading("References", 1, rtl, title_font, heading_alignment),
    ]
    for reference in book.references:
        references.append(
            {
                "type": "bullet",
                "text": sanitize(reference),
                "font": body_font,
                "rtl": rtl,
                "alignment": heading_alignment,
            }
        )
    blocks.extend(_tagged(references, "references"))

    return {
        "rtl": rtl,
        "fonts": {"title": title_font, "body": body_font, "banner": BANNER_FONT},
        "margins_cm": MARGIN_CM,
        "base_size": BODY_SIZE,
        "line_spacing": LINE_SPACING,
        "styles": _paragraph_styles(rtl, title_font),
        "blocks": blocks,
        "footer": _footer(body_font),
    }


def text_to_paragraphs(text: Optional[str], rtl: bool, font: str) -> List[DocumentBlock]:
    """One paragraph per line of sanitized text; whitespace-only lines become empty paragraphs."""
    paragraphs: List[DocumentBlock] = []
    for line in _LINE_SPLIT_RE.split(sanitize(text)):
        paragraphs.append(
            {
                "type": "paragraph",
                "text": line.strip(),
                "font": font,
                "size": BODY_SIZE,
                "rtl": rtl,
                "alignment": "right" if rtl else "justify",
                "line_spacing": LINE_SPACING,
                "space_after": 10.0,
            }
        )
    return paragraphs


def heading_sequence(layout: DocumentLayout) -> List[str]:
    """Heading texts of the chapters and references parts, in document order."""
    return [
        str(block.get("text", ""))
        for block in layout["blocks"]
        if block.get("type") == "heading" and block.get("part") in {"chapters", "references"}
    ]


def _tagged(blocks: List[DocumentBlock], part: str) -> List[DocumentBlock]:
    for block in blocks:
        block["part"] = part
    return blocks


def _cover_blocks(book: BookStructure, rtl: bool, body_font: str, year: Optional[int]) -> List[DocumentBlock]:
    year_value = year if year is not None else timezone.now().year
    return [
        {
            "type": "paragraph",
            "text": PRODUCT_BANNER,
            "alignment": "center",
            "rtl": False,
            "font": BANNER_FONT,
            "size": 10.0,
            "color": MUTED_COLOR,
            "all_caps": True,
            "space_before": 100.0,
            "space_after": 100.0,
            "border_bottom": ACCENT_COLOR,
        },
        _spacer(rtl, 100.0),
        {"type": "paragraph", "text": sanitize(book.title), "style": TITLE_STYLE, "rtl": rtl, "alignment": "center"},
        {"type": "paragraph", "text": sanitize(book.subtitle), "style": SUBTITLE_STYLE, "rtl": rtl, "alignment": "center"},
        _spacer(rtl, 100.0),
        {"type": "paragraph", "text": "Written by", "alignment": "center", "rtl": rtl, "font": body_font, "size": 12.0},
        {
            "type": "paragraph",
            "text": sanitize(book.author),
            "alignment": "center",
            "rtl": rtl,
            "font": body_font,
            "size": 16.0,
            "bold": True,
            "space_after": 200.0,
        },
        {"type": "paragraph", "text": str(year_value), "alignment": "center", "rtl": False, "font": body_font, "size": 12.0},
        _page_break(rtl),
    ]


def _toc_blocks(rtl: bool, title_font: str) -> List[DocumentBlock]:
    heading = _heading("Daftar Isi" if rtl else "Table of Contents", 1, rtl, title_font, "right" if rtl else "center")
    return [
        heading,
        {"type": "toc", "heading_range": "1-5", "rtl": rtl, "alignment": "right" if rtl else "left"},
        _page_break(rtl),
    ]


def _heading(text: str, level: int, rtl: bool, font: str, alignment: str) -> DocumentBlock:
    return {
        "type": "heading",
        "text": text,
        "level": level,
        "rtl": rtl,
        "alignment": alignment,
        "font": font,
        "bold": True,
        "size": 24.0 if level == 1 else 18.0,
        "color": PRIMARY_COLOR if level == 1 else ACCENT_COLOR,
    }


def _spacer(rtl: bool, space_after: float) -> DocumentBlock:
    return {"type": "paragraph", "text": "", "rtl": rtl, "alignment": "center", "space_after": space_after}


def _page_break(rtl: bool) -> DocumentBlock:
    return {"type": "page_break", "rtl": rtl, "alignment": "right" if rtl else "left"}


def _paragraph_styles(rtl: bool, title_font: str) -> Dict[str, StyleDefinition]:
    title: StyleDefinition = {
        "font": title_font,
        "size": 32.0,
        "bold": True,
        "color": PRIMARY_COLOR,
        "alignment": "center",
        "rtl": rtl,
        "space_before": 12.0,
        "space_after": 12.0,
    }
    subtitle: StyleDefinition = {
        "font": title_font,
        "size": 14.0,
        "italic": True,
        "color": SUBTITLE_COLOR,
        "alignment": "center",
        "rtl": rtl,
        "space_after": 24.0,
    }
    return {TITLE_STYLE: title, SUBTITLE_STYLE: subtitle}


def _footer(body_font: str) -> FooterLayout:
    return {
        "parts": ["Page ", "{PAGE}", " of ", "{NUMPAGES}"],
        "alignment": "center",
        "font": body_font,
        "size": 10.0,
        "rtl": False,
        "border_top": RULE_COLOR,
    }
