from django.test import SimpleTestCase

from apps.books.services.contract import (
    REQUIRED_BOOK_FIELDS,
    build_response_schema,
    build_system_instruction,
    build_user_prompt,
    chapter_count_for,
    words_per_section_for,
)

from .factories import make_params


class ChapterCountTests(SimpleTestCase):
    def test_roughly_four_pages_per_chapter(self):
        self.assertEqual(chapter_count_for(20), 5)
        self.assertEqual(chapter_count_for(21), 6)
        self.assertEqual(chapter_count_for(100), 25)

    def test_never_fewer_than_three_chapters(self):
        for pages in (1, 4, 8, 12):
            with self.subTest(pages=pages):
                self.assertEqual(chapter_count_for(pages), 3)

    def test_words_per_section_tiers(self):
        self.assertEqual(words_per_section_for(30), "500-700")
        self.assertEqual(words_per_section_for(31), "800-1000")


class ResponseSchemaTests(SimpleTestCase):
    def test_schema_requires_book_fields_and_non_empty_arrays(self):
        schema = build_response_schema(make_params())

        self.assertEqual(schema["required"], REQUIRED_BOOK_FIELDS)
        chapters = schema["properties"]["chapters"]
        self.assertEqual(chapters["minItems"], 1)
        self.assertEqual(chapters["items"]["required"], ["title", "sections"])
        self.assertEqual(chapters["items"]["properties"]["sections"]["minItems"], 1)
        self.assertEqual(schema["properties"]["references"]["items"], {"type": "string"})

    def test_descriptions_carry_counts_and_language(self):
        schema = build_response_schema(make_params(page_count=8, reference_count=5, language="German"))

        self.assertIn("approx 3 chapters", schema["properties"]["chapters"]["description"])
        self.assertIn("exactly 5", schema["properties"]["references"]["description"])
        self.assertIn("in German", schema["properties"]["title"]["description"])
        section = schema["properties"]["chapters"]["items"]["properties"]["sections"]["items"]
        self.assertIn("500-700 words", section["properties"]["content"]["description"])


class PromptTests(SimpleTestCase):
    def test_system_instruction_sets_language_volume_and_references(self):
        prompt = build_system_instruction(make_params(page_count=40, reference_count=12, language="Arabic"))

        self.assertIn("write the entire book in Arabic", prompt)
        self.assertIn("approximately 40 pages", prompt)
        self.assertIn("bibliography list of 12 distinct items", prompt)
        self.assertIn("single valid JSON object", prompt)

    def test_user_prompt_lists_parameters(self):
        params = make_params(madzhab="Hanafi", target_audience="Children")
        prompt = build_user_prompt(params)

        self.assertIn('topic: "Zakat on Digital Assets"', prompt)
        self.assertIn("Author Name: A. Example", prompt)
        self.assertIn("Focus Madzhab: Hanafi", prompt)
        self.assertIn("Target Audience: Children", prompt)
        self.assertIn("exactly 5 unique references", prompt)

    def test_multimedia_flag_is_not_sent(self):
        with_media = build_user_prompt(make_params(include_multimedia=True))
        without_media = build_user_prompt(make_params(include_multimedia=False))
        self.assertEqual(with_media, without_media)
