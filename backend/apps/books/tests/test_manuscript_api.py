from __future__ import annotations

from functools import partial
from unittest.mock import MagicMock, patch

from django.test import override_settings
from rest_framework.test import APISimpleTestCase

from apps.books.services.errors import GenerationFailure
from apps.books.services.pipeline import BookWorkflowService
from apps.books.views import ManuscriptViewSet

from .factories import make_book

BASE_URL = "/api/books/manuscript/"

VALID_PARAMS = {
    "topic": "Zakat on Digital Assets",
    "author_name": "A. Example",
    "page_count": 8,
    "reference_count": 5,
    "language": "English",
}


@override_settings(OPENAI_API_KEY="test-key")
class ManuscriptApiTests(APISimpleTestCase):
    def setUp(self):
        self.generator = MagicMock(return_value=make_book())
        patcher = patch.object(
            ManuscriptViewSet,
            "workflow_class",
            partial(BookWorkflowService, generator=self.generator),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def _generate(self, **overrides):
        return self.client.post(f"{BASE_URL}generate/", {**VALID_PARAMS, **overrides}, format="json")

    def test_health(self):
        response = self.client.get("/api/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_initial_snapshot_is_idle(self):
        response = self.client.get(BASE_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"], "idle")
        self.assertIsNone(response.json()["book"])

    def test_options_lists_choices_and_defaults(self):
        response = self.client.get(f"{BASE_URL}options/")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertIn({"value": "Arabic", "label": "Arabic (العربية)"}, body["language"])
        self.assertEqual(len(body["madzhab"]), 5)
        self.assertEqual(len(body["target_audience"]), 4)
        self.assertEqual(
            body["defaults"],
            {
                "madzhab": "Shafi'i",
                "target_audience": "General Public",
                "include_multimedia": True,
                "page_count": 20,
                "reference_count": 15,
                "language": "Indonesia",
            },
        )

    def test_generate_returns_book_and_keeps_it_in_session(self):
        response = self._generate()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"], "viewing")
        self.assertEqual([c["title"] for c in response.json()["book"]["chapters"]], ["A", "B"])
        params = self.generator.call_args.args[0]
        self.assertEqual((params.page_count, params.reference_count, params.madzhab), (8, 5, "Shafi'i"))

        snapshot = self.client.get(BASE_URL).json()
        self.assertEqual(snapshot["state"], "viewing")
        self.assertEqual(snapshot["book"]["title"], "Zakat on Digital Assets")

    def test_invalid_parameters_are_rejected(self):
        for overrides in ({"page_count": 0}, {"reference_count": 51}, {"language": "Klingon"}, {"topic": ""}):
            with self.subTest(overrides=overrides):
                response = self._generate(**overrides)
                self.assertEqual(response.status_code, 400)
        self.generator.assert_not_called()

    def test_generation_failure_shows_error_then_retry(self):
        self.generator.side_effect = GenerationFailure()

        response = self._generate()

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["error"]["code"], "generation_failed")
        snapshot = self.client.get(BASE_URL).json()
        self.assertEqual(snapshot["state"], "error")
        self.assertEqual(
            snapshot["error"],
            "Failed to generate content. Please ensure the API Key is valid and try again.",
        )

        response = self.client.post(f"{BASE_URL}retry/")
        self.assertEqual(response.json()["state"], "idle")

    def test_generate_while_generating_conflicts(self):
        session = self.client.session
        session["manuscript"] = {"state": "generating", "error": "", "book": None, "parameters": None}
        session.save()

        response = self._generate()

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "generation_in_progress")
        self.generator.assert_not_called()

    def test_export_downloads_docx(self):
        self._generate()

        response = self.client.get(f"{BASE_URL}export/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response["Content-Type"],
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )
        self.assertIn('filename="Zakat_on_Digital_Assets_AntoniBookCraft.docx"', response["Content-Disposition"])
        self.assertTrue(b"".join(response.streaming_content).startswith(b"PK"))

    def test_export_without_book_conflicts(self):
        response = self.client.get(f"{BASE_URL}export/")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "no_book")

    def test_export_failure_keeps_book(self):
        self._generate()

        with patch("apps.books.services.export.pack_docx", side_effect=RuntimeError("boom")):
            with self.assertLogs("apps.books.services.export", level="ERROR"):
                response = self.client.get(f"{BASE_URL}export/")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["message"], "Could not generate Word document.")
        self.assertEqual(self.client.get(BASE_URL).json()["state"], "viewing")
        self.assertEqual(self.client.get(f"{BASE_URL}export/").status_code, 200)

    def test_text_returns_markdown(self):
        self._generate()

        response = self.client.get(f"{BASE_URL}text/")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response["Content-Type"].startswith("text/plain"))
        self.assertTrue(response.content.decode("utf-8").startswith("# Zakat on Digital Assets\n"))

    def test_reset_discards_book(self):
        self._generate()

        response = self.client.post(f"{BASE_URL}reset/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"], "idle")
        self.assertIsNone(response.json()["book"])
        self.assertEqual(self.client.get(f"{BASE_URL}export/").status_code, 409)

    def test_generate_after_reset_returns_new_book(self):
        self.generator.side_effect = [make_book(title="First"), make_book(title="Second")]
        self.assertEqual(self._generate().json()["book"]["title"], "First")
        self.client.post(f"{BASE_URL}reset/")

        response = self._generate()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"], "viewing")
        self.assertEqual(response.json()["book"]["title"], "Second")
        self.assertEqual(self.generator.call_count, 2)
        self.assertEqual(self.client.get(BASE_URL).json()["book"]["title"], "Second")


class ConfigurationGuardTests(APISimpleTestCase):
    @override_settings(OPENAI_API_KEY="")
    def test_missing_key_blocks_api_but_not_health(self):
        response = self.client.get(BASE_URL)

        self.assertEqual(response.status_code, 503)
        body = response.json()
        self.assertEqual(body["error"]["code"], "configuration_error")
        self.assertEqual(body["error"]["title"], "Configuration Error")
        self.assertEqual(self.client.get("/api/health/").status_code, 200)

    @override_settings(OPENAI_API_KEY="")
    def test_generate_is_blocked_before_any_request(self):
        with patch("apps.books.services.llm.OpenAI") as mock_openai:
            response = self.client.post(f"{BASE_URL}generate/", VALID_PARAMS, format="json")

        self.assertEqual(response.status_code, 503)
        mock_openai.assert_not_called()
