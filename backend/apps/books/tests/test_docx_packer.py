from __future__ import annotations

import io

from django.test import SimpleTestCase
from docx import Document
from docx.oxml.ns import qn

from apps.books.services.docx_packer import TOC_PLACEHOLDER, pack_docx
from apps.books.services.layout import PRODUCT_BANNER, build_layout

from .factories import make_book


def _reopen(book):
    return Document(io.BytesIO(pack_docx(build_layout(book, year=2025))))


def _headings(document):
    return [
        (p.style.name, p.text)
        for p in document.paragraphs
        if p.style.name.startswith("Heading")
    ]


class PackDocxTests(SimpleTestCase):
    def test_output_reopens_with_headings_in_order(self):
        document = _reopen(make_book())

        self.assertEqual(
            _headings(document),
            [
                ("Heading 1", "Table of Contents"),
                ("Heading 1", "Abstract"),
                ("Heading 1", "A"),
                ("Heading 2", "S1"),
                ("Heading 2", "S2"),
                ("Heading 1", "B"),
                ("Heading 2", "S3"),
                ("Heading 1", "References"),
            ],
        )

    def test_cover_uses_custom_styles_and_references_use_bullets(self):
        document = _reopen(make_book())
        by_style = {}
        for paragraph in document.paragraphs:
            by_style.setdefault(paragraph.style.name, []).append(paragraph.text)

        self.assertEqual(by_style["CustomTitle"], ["Zakat on Digital Assets"])
        self.assertEqual(by_style["CustomSubtitle"], ["A Comparative Study"])
        self.assertEqual(by_style["List Bullet"], ["Al-Nawawi, Al-Majmu'", "Ibn Qudamah, Al-Mughni"])

    def test_toc_and_update_fields(self):
        document = _reopen(make_book())
        body_xml = document.element.xml

        self.assertIn('TOC \\o "1-5" \\h \\z \\u', body_xml)
        self.assertIn(TOC_PLACEHOLDER, body_xml)
        self.assertIsNotNone(document.settings.element.find(qn("w:updateFields")))

    def test_footer_has_page_fields(self):
        document = _reopen(make_book())
        footer_xml = document.sections[0].footer._element.xml

        self.assertIn(" PAGE ", footer_xml)
        self.assertIn(" NUMPAGES ", footer_xml)
        self.assertNotIn("<w:bidi", footer_xml)

    def test_margins(self):
        section = _reopen(make_book()).sections[0]
        for margin in (section.top_margin, section.bottom_margin, section.left_margin, section.right_margin):
            self.assertAlmostEqual(margin.cm, 2.54, places=2)

    def test_bidi_markup_only_for_rtl(self):
        ltr = _reopen(make_book(language="English"))
        rtl = _reopen(make_book(language="Arabic"))

        ltr_heading = next(p for p in ltr.paragraphs if p.text == "A")
        rtl_heading = next(p for p in rtl.paragraphs if p.text == "A")
        self.assertIsNone(ltr_heading._p.pPr.find(qn("w:bidi")))
        self.assertIsNotNone(rtl_heading._p.pPr.find(qn("w:bidi")))

        run = rtl_heading.runs[0]
        self.assertTrue(run.font.rtl)
        self.assertEqual(run._r.rPr.rFonts.get(qn("w:cs")), "Traditional Arabic")
        banner = next(p for p in rtl.paragraphs if p.text == PRODUCT_BANNER)
        self.assertIsNone(banner._p.pPr.find(qn("w:bidi")))

    def test_rtl_bold_and_italic_apply_to_complex_script(self):
        rtl = _reopen(make_book(language="Arabic"))
        ltr = _reopen(make_book(language="English"))

        rtl_heading = next(p for p in rtl.paragraphs if p.text == "A")
        author = next(p for p in rtl.paragraphs if p.text == "A. Example")
        self.assertTrue(rtl_heading.runs[0].font.cs_bold)
        self.assertTrue(author.runs[0].font.cs_bold)
        self.assertTrue(rtl.styles["CustomSubtitle"].font.cs_italic)
        self.assertTrue(rtl.styles["CustomTitle"].font.cs_bold)

        ltr_heading = next(p for p in ltr.paragraphs if p.text == "A")
        self.assertIsNone(ltr_heading.runs[0].font.cs_bold)

    def test_unknown_block_type_raises(self):
        layout = build_layout(make_book(), year=2025)
        layout["blocks"].append({"type": "image", "part": "chapters"})
        with self.assertRaises(ValueError):
            pack_docx(layout)
