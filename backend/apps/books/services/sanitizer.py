from __future__ import annotations

import re
from typing import Optional

# C0 controls other than \t, \n, \r, plus DEL. These are invalid in WordprocessingML.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_ZERO_WIDTH_RE = re.compile("[\u200B-\u200D\uFEFF]")
# Lone surrogates and the U+FFFE/U+FFFF noncharacters; XML cannot carry them either.
_XML_INVALID_RE = re.compile("[\ud800-\udfff\ufffe\uffff]")

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_RE = re.compile(r"\*(.*?)\*")
_HEADING_RE = re.compile(r"#{1,6}[ \t]")
_LINK_RE = re.compile(r"\[(.*?)\]\(.*?\)")
_BACKTICK_RE = re.compile(r"`")


def sanitize(text: Optional[str]) -> str:
    """
    Make AI-generated text safe to embed in a Word document.

    Strips invalid control and zero-width characters and light Markdown
    markup (emphasis, heading markers, links, backticks), then trims.
    The rules run until the text stops changing, so the result is a fixed
    point: ``sanitize(sanitize(s)) == sanitize(s)``.
    """
    if not text:
        return ""
    current = str(text)
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def _clean_once(text: str) -> str:
    text = _CONTROL_RE.sub("", text)
    text = _ZERO_WIDTH_RE.sub("", text)
    text = _XML_INVALID_RE.sub("", text)
    text = _BOLD_RE.sub(r"\1", text)
    text = _ITALIC_RE.sub(r"\1", text)
    text = _HEADING_RE.sub("", text)
    text = _LINK_RE.sub(r"\1", text)
    text = _BACKTICK_RE.sub("", text)
    return text.strip()
