from django.test import SimpleTestCase

from apps.books.services.sanitizer import sanitize


class SanitizeTests(SimpleTestCase):
    def test_unwraps_markdown(self):
        self.assertEqual(
            sanitize("**bold** and *em* and # Heading and [text](url)"),
            "bold and em and Heading and text",
        )

    def test_absent_or_empty_input(self):
        self.assertEqual(sanitize(None), "")
        self.assertEqual(sanitize(""), "")
        self.assertEqual(sanitize("   \n "), "")

    def test_removes_control_and_zero_width_characters(self):
        text = "Za\u200bkat\x00 al-\x0bMal\ufeff\x7f"
        self.assertEqual(sanitize(text), "Zakat al-Mal")

    def test_keeps_tabs_and_newlines_inside_text(self):
        self.assertEqual(sanitize("  one\ttwo\r\nthree  "), "one\ttwo\r\nthree")

    def test_heading_markers_removed_from_every_line(self):
        self.assertEqual(sanitize("## Intro\n###### Deep\n#hashtag"), "Intro\nDeep\n#hashtag")

    def test_backticks_removed_without_touching_code(self):
        self.assertEqual(sanitize("use `zakat()` here\n```\nx = 1\n```"), "use zakat() here\n\nx = 1")

    def test_removes_characters_xml_cannot_carry(self):
        self.assertEqual(sanitize("bad\ufffe char\uffff \ud800x"), "bad char x")

    def test_idempotent(self):
        samples = [
            "**bold** and *em* and # Heading and [text](url)",
            "***nested*** `code` [a](b)",
            "*# Heading*",
            "[[label](inner)](outer)",
            "\u200b  ** spaced **  \u200d",
            "plain text",
            "# ",
        ]
        for sample in samples:
            with self.subTest(sample=sample):
                once = sanitize(sample)
                self.assertEqual(sanitize(once), once)
