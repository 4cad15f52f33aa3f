from __future__ import annotations

import io
import logging
from typing import Any, Dict, Optional

from docx import Document
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt, RGBColor

from .schemas import DocumentBlock, DocumentLayout, FooterLayout, StyleDefinition

logger = logging.getLogger(__name__)

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TOC_PLACEHOLDER = "Right-click and choose Update Field to build the table of contents."

_ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}

# Elements that must follow w:bidi / w:pBdr inside w:pPr (ECMA-376 CT_PPrBase order).
_PPR_AFTER_BIDI = (
    "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind", "w:contextualSpacing",
    "w:mirrorIndents", "w:suppressOverlap", "w:jc", "w:textDirection", "w:textAlignment",
    "w:textboxTightWrap", "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr",
    "w:pPrChange",
)
_PPR_AFTER_PBDR = (
    "w:shd", "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN", "w:bidi",
) + _PPR_AFTER_BIDI
# Elements that must follow w:szCs inside w:rPr.
_RPR_AFTER_SZCS = (
    "w:highlight", "w:u", "w:effect", "w:bdr", "w:shd", "w:fitText", "w:vertAlign",
    "w:rtl", "w:cs", "w:em", "w:lang", "w:eastAsianLayout", "w:specVanish", "w:oMath",
)


def pack_docx(layout: DocumentLayout) -> bytes:
    """Render a document layout to .docx bytes. Errors propagate to the caller."""
    document = Document()
    _apply_document_defaults(document, layout)
    _add_paragraph_styles(document, layout.get("styles", {}))

    for section in document.sections:
        margin = Cm(layout["margins_cm"])
        section.top_margin = margin
        section.bottom_margin = margin
        section.left_margin = margin
        section.right_margin = margin

    for block in layout["blocks"]:
        _render_block(document, block)

    _add_footer(document, layout["footer"])
    _request_field_update(document)

    out = io.BytesIO()
    document.save(out)
    out.seek(0)
    data = out.read()
    logger.debug("Packed docx blocks=%d bytes=%d", len(layout["blocks"]), len(data))
    return data


def _render_block(document: Any, block: DocumentBlock) -> None:
    kind = block.get("type")
    if kind == "heading":
        paragraph = document.add_heading(level=int(block.get("level", 1)))
        _add_run(paragraph, block.get("text", ""), block)
    elif kind == "paragraph":
        paragraph = document.add_paragraph(style=block.get("style"))
        _add_run(paragraph, block.get("text", ""), block)
    elif kind == "bullet":
        paragraph = document.add_paragraph(style="List Bullet")
        _add_run(paragraph, block.get("text", ""), block)
    elif kind == "page_break":
        paragraph = document.add_paragraph()
        paragraph.add_run().add_break(WD_BREAK.PAGE)
    elif kind == "toc":
        paragraph = document.add_paragraph()
        instruction = f'TOC \\o "{block.get("heading_range", "1-5")}" \\h \\z \\u'
        _add_field(paragraph, instruction, TOC_PLACEHOLDER, block)
    else:
        raise ValueError(f"Unknown document block type: {kind!r}")
    _format_paragraph(paragraph, block)


def _add_run(paragraph: Any, text: str, block: Dict[str, Any]) -> Any:
    run = paragraph.add_run(text)
    _format_run(run, block)
    return run


def _format_paragraph(paragraph: Any, block: Dict[str, Any]) -> None:
    fmt = paragraph.paragraph_format
    alignment = block.get("alignment")
    if alignment in _ALIGNMENTS:
        paragraph.alignment = _ALIGNMENTS[alignment]
    if block.get("space_before") is not None:
        fmt.space_before = Pt(block["space_before"])
    if block.get("space_after") is not None:
        fmt.space_after = Pt(block["space_after"])
    if block.get("line_spacing") is not None:
        fmt.line_spacing = block["line_spacing"]
    if block.get("page_break_before"):
        fmt.page_break_before = True
    pPr = paragraph._p.get_or_add_pPr()
    if block.get("border_bottom"):
        _set_border(pPr, "bottom", block["border_bottom"])
    if block.get("border_top"):
        _set_border(pPr, "top", block["border_top"])
    if block.get("rtl"):
        _set_bidi(pPr)


def _format_run(run: Any, block: Dict[str, Any]) -> None:
    font = run.font
    if block.get("font"):
        font.name = block["font"]
    if block.get("size"):
        font.size = Pt(block["size"])
    if block.get("bold"):
        font.bold = True
        if block.get("rtl"):
            font.cs_bold = True
    if block.get("italic"):
        font.italic = True
        if block.get("rtl"):
            font.cs_italic = True
    if block.get("all_caps"):
        font.all_caps = True
    if block.get("color"):
        font.color.rgb = RGBColor.from_string(block["color"])
    font.rtl = bool(block.get("rtl"))
    if block.get("rtl"):
        _set_complex_script(run._r.get_or_add_rPr(), block.get("font"), block.get("size"))


def _apply_document_defaults(document: Any, layout: DocumentLayout) -> None:
    normal = document.styles["Normal"]
    body_font = layout["fonts"]["body"]
    normal.font.name = body_font
    normal.font.size = Pt(layout["base_size"])
    normal.paragraph_format.line_spacing = layout["line_spacing"]
    _set_complex_script(normal.element.get_or_add_rPr(), body_font, layout["base_size"])


def _add_paragraph_styles(document: Any, styles: Dict[str, StyleDefinition]) -> None:
    normal = document.styles["Normal"]
    for name, definition in styles.items():
        style = document.styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)
        style.base_style = normal
        style.next_paragraph_style = normal
        style.quick_style = True
        font = style.font
        if definition.get("font"):
            font.name = definition["font"]
        if definition.get("size"):
            font.size = Pt(definition["size"])
        font.bold = bool(definition.get("bold"))
        font.italic = bool(definition.get("italic"))
        if definition.get("color"):
            font.color.rgb = RGBColor.from_string(definition["color"])
        fmt = style.paragraph_format
        if definition.get("alignment") in _ALIGNMENTS:
            fmt.alignment = _ALIGNMENTS[definition["alignment"]]
        if definition.get("space_before") is not None:
            fmt.space_before = Pt(definition["space_before"])
        if definition.get("space_after") is not None:
            fmt.space_after = Pt(definition["space_after"])
        if definition.get("rtl"):
            font.rtl = True
            font.cs_bold = bool(definition.get("bold"))
            font.cs_italic = bool(definition.get("italic"))
            _set_complex_script(style.element.get_or_add_rPr(), definition.get("font"), definition.get("size"))
            _set_bidi(style.element.get_or_add_pPr())


def _add_footer(document: Any, footer: FooterLayout) -> None:
    for section in document.sections:
        paragraph = section.footer.paragraphs[0] if section.footer.paragraphs else section.footer.add_paragraph()
        paragraph.clear()
        run_format = {"font": footer["font"], "size": footer["size"], "rtl": footer["rtl"]}
        for part in footer["parts"]:
            if part.startswith("{") and part.endswith("}"):
                _add_field(paragraph, part[1:-1], "1", run_format)
            else:
                _add_run(paragraph, part, run_format)
        _format_paragraph(
            paragraph,
            {"alignment": footer["alignment"], "border_top": footer["border_top"], "rtl": footer["rtl"]},
        )


def _add_field(paragraph: Any, instruction: str, placeholder: str, run_format: Dict[str, Any]) -> None:
    """Append a complex field (begin / instrText / separate / cached result / end)."""
    begin = paragraph.add_run()
    _format_run(begin, run_format)
    begin._r.append(_fld_char("begin", dirty=True))

    instr_run = paragraph.add_run()
    _format_run(instr_run, run_format)
    instr = OxmlElement("w:instrText")
    instr.set(qn("xml:space"), "preserve")
    instr.text = f" {instruction} "
    instr_run._r.append(instr)

    separate = paragraph.add_run()
    _format_run(separate, run_format)
    separate._r.append(_fld_char("separate"))

    _add_run(paragraph, placeholder, run_format)

    end = paragraph.add_run()
    _format_run(end, run_format)
    end._r.append(_fld_char("end"))


def _fld_char(kind: str, dirty: bool = False) -> Any:
    fld = OxmlElement("w:fldChar")
    fld.set(qn("w:fldCharType"), kind)
    if dirty:
        fld.set(qn("w:dirty"), "true")
    return fld


def _set_bidi(pPr: Any) -> None:
    if pPr.find(qn("w:bidi")) is not None:
        return
    bidi = OxmlElement("w:bidi")
    pPr.insert_element_before(bidi, *_PPR_AFTER_BIDI)


def _set_border(pPr: Any, edge: str, color: str) -> None:
    pBdr = pPr.find(qn("w:pBdr"))
    if pBdr is None:
        pBdr = OxmlElement("w:pBdr")
        pPr.insert_element_before(pBdr, *_PPR_AFTER_PBDR)
    line = OxmlElement(f"w:{edge}")
    line.set(qn("w:val"), "single")
    line.set(qn("w:sz"), "6")
    line.set(qn("w:space"), "1")
    line.set(qn("w:color"), color)
    if edge == "top":
        pBdr.insert(0, line)
    else:
        pBdr.append(line)


def _set_complex_script(rPr: Any, font: Optional[str], size: Optional[float]) -> None:
    """Apply the font and size to the complex-script slots used for RTL text."""
    if font:
        rFonts = rPr.get_or_add_rFonts()
        rFonts.set(qn("w:cs"), font)
    if size:
        szCs = rPr.find(qn("w:szCs"))
        if szCs is None:
            szCs = OxmlElement("w:szCs")
            rPr.insert_element_before(szCs, *_RPR_AFTER_SZCS)
        szCs.set(qn("w:val"), str(int(round(float(size) * 2))))


def _request_field_update(document: Any) -> None:
    """Ask Word to refresh TOC and page fields when the file is opened."""
    settings = document.settings.element
    if settings.find(qn("w:updateFields")) is not None:
        return
    update = OxmlElement("w:updateFields")
    update.set(qn("w:val"), "true")
    settings.append(update)
