from __future__ import annotations

import math
from typing import Any, Dict

from .schemas import GenerationParameters

MIN_CHAPTERS = 3
PAGES_PER_CHAPTER = 4
LONG_BOOK_PAGE_THRESHOLD = 30

REQUIRED_BOOK_FIELDS = ["title", "subtitle", "author", "chapters", "references", "language"]

_JSON_RULE = (
    "OUTPUT RULE: Return a single valid JSON object matching the provided schema. "
    "No markdown fences, no prose before or after, no trailing commas, no comments."
)


def chapter_count_for(page_count: int) -> int:
    """Roughly four pages per chapter, never fewer than three chapters."""
    return max(MIN_CHAPTERS, math.ceil(int(page_count) / PAGES_PER_CHAPTER))


def words_per_section_for(page_count: int) -> str:
    return "800-1000" if int(page_count) > LONG_BOOK_PAGE_THRESHOLD else "500-700"


def build_response_schema(params: GenerationParameters) -> Dict[str, Any]:
    """JSON schema the AI response must satisfy. Counts are instructions, not constraints."""
    language = params.language
    chapters = chapter_count_for(params.page_count)
    words = words_per_section_for(params.page_count)

    section_schema = {
        "type": "object",
        "properties": {
            "title": {
                "type": "string",
                "description": f"Section title (e.g., Definition, Dalil, Scholarly Views) in {language}",
            },
            "content": {
                "type": "string",
                "description": (
                    f"The content of the section in {language}. Target length: {words} words. "
                    "MUST include in-text citations for every claim (e.g., (Al-Nawawi, Al-Majmu, 2/45))."
                ),
            },
        },
        "required": ["title", "content"],
    }
    chapter_schema = {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": f"Chapter title in {language}"},
            "sections": {"type": "array", "minItems": 1, "items": section_schema},
        },
        "required": ["title", "sections"],
    }
    return {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": f"The academic title of the Fiqh book in {language}"},
            "subtitle": {"type": "string", "description": f"A descriptive subtitle in {language}"},
            "author": {"type": "string", "description": "Name of the author"},
            "abstract": {
                "type": "string",
                "description": f"A detailed executive summary or abstract of the book (approx 300 words) in {language}",
            },
            "language": {
                "type": "string",
                "description": "The language code or name used for the content (e.g. 'Indonesia', 'Arabic', 'English')",
            },
            "chapters": {
                "type": "array",
                "minItems": 1,
                "description": (
                    f"List of chapters in the book. You MUST generate approx {chapters} chapters "
                    "to match the requested book length."
                ),
                "items": chapter_schema,
            },
            "references": {
                "type": "array",
                "items": {"type": "string"},
                "description": (
                    f"A comprehensive bibliography listing exactly {params.reference_count} "
                    "credible classical and contemporary sources."
                ),
            },
        },
        "required": list(REQUIRED_BOOK_FIELDS),
    }


def build_system_instruction(params: GenerationParameters) -> str:
    return _join(
        "ROLE: You are 'Antoni's Book Craft', a world-class AI editor for Islamic Jurisprudence (Fiqh). "
        "Your goal is to author HIGH-QUALITY academic Fiqh books that are ready for publication.",
        _section(
            "Standards",
            "\n".join([
                f"1. Language: You MUST write the entire book in {params.language}.",
                f"2. Volume: The user has requested a book of approximately {params.page_count} pages. "
                "Adjust your detail level to meet this.",
                "3. Structure: Follow strict academic structure "
                "(Definition -> Basis/Dalil -> Rulings -> Application/Fatwa -> Conclusion).",
                "4. Credibility: Cite valid sources (Qur'an with Surah/Verse, Hadith with narrator, Classical Kitabs).",
                "5. Citations: Use in-text citations within the content. "
                "Example: \"Imam Al-Nawawi stated that... (Al-Majmu', 1/123)\".",
                f"6. References: Generate a bibliography list of {params.reference_count} distinct items.",
            ]),
        ),
        _JSON_RULE,
    )


def build_user_prompt(params: GenerationParameters) -> str:
    chapters = chapter_count_for(params.page_count)
    return _join(
        f"Create a comprehensive, publication-ready Fiqh book manuscript on the topic: \"{params.topic}\".",
        (
            f"Author Name: {params.author_name}\n"
            f"Focus Madzhab: {params.madzhab}\n"
            f"Target Audience: {params.target_audience}\n"
            f"Output Language: {params.language}"
        ),
        _section(
            "Critical Quantity Requirements",
            "\n".join([
                f"1. Target Length: The user explicitly requested a {params.page_count}-page book.",
                f"   - If the count is high (>40), generate many chapters ({chapters}+) with very deep, extensive detailed text.",
                "   - If the count is low (<10), be concise but professional.",
                f"2. References: Provide exactly {params.reference_count} unique references in the bibliography.",
            ]),
        ),
        _section(
            "Content Requirements",
            "\n".join([
                "1. Detail: Each section must be detailed, explaining the 'Why' and 'How'.",
                "2. Evidence: Include exhaustive Dalil (Quranic verses, Hadith text/translation, Usul Fiqh maxims).",
                "3. In-Notes: Every Fiqh ruling must have a source citation in brackets immediately following the statement.",
                "4. Chapters: Include \"Contemporary Issues\" and \"Comparative Perspectives\" where applicable.",
            ]),
        ),
    )


def _section(heading: str, body: str) -> str:
    body = body.strip()
    return f"### {heading}\n{body}" if body else ""


def _join(*parts: str) -> str:
    return "\n\n".join(p for p in parts if p and p.strip())
