import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from services.llm_factory import LLMFactory, LLMProvider
from services.llm_service import CompletionClient, LLMGenerationError, LLMJSONParseError, parse_json_text


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestCompletionClient(unittest.TestCase):

    def setUp(self):
        self.api = MagicMock()
        self.client = CompletionClient(self.api, "default-model")

    def test_complete_sends_system_and_user_messages(self):
        self.api.chat.completions.create.return_value = _response("hello")

        text = self.client.complete("question", system_prompt="be brief", temperature=0.2, max_tokens=10)

        self.assertEqual(text, "hello")
        self.api.chat.completions.create.assert_called_once_with(
            model="default-model",
            messages=[{"role": "system", "content": "be brief"}, {"role": "user", "content": "question"}],
            temperature=0.2,
            max_tokens=10,
        )

    def test_model_override_and_no_optional_params(self):
        self.api.chat.completions.create.return_value = _response("ok")

        self.client.complete("q", model="gpt-5-mini")

        params = self.api.chat.completions.create.call_args.kwargs
        self.assertEqual(params["model"], "gpt-5-mini")
        self.assertNotIn("temperature", params)
        self.assertNotIn("max_tokens", params)
        self.assertEqual(params["messages"], [{"role": "user", "content": "q"}])

    def test_api_failure_raises_generation_error(self):
        self.api.chat.completions.create.side_effect = RuntimeError("boom")

        with self.assertRaises(LLMGenerationError):
            self.client.complete("q")

    def test_empty_content_raises_unless_allowed(self):
        self.api.chat.completions.create.return_value = _response("")

        with self.assertRaises(LLMGenerationError):
            self.client.complete("q")
        self.assertEqual(self.client.complete("q", allow_empty=True), "")


class TestParseJsonText(unittest.TestCase):

    def test_plain_json(self):
        self.assertEqual(parse_json_text('[{"a": 1}]'), [{"a": 1}])

    def test_fenced_json(self):
        self.assertEqual(parse_json_text('```json\n{"a": 1}\n```'), {"a": 1})
        self.assertEqual(parse_json_text('```\n[1, 2]\n```'), [1, 2])

    def test_invalid_json(self):
        for text in ("", None, "nope", '{"a": 1'):
            with self.assertRaises(LLMJSONParseError):
                parse_json_text(text)


class TestLLMFactory(unittest.TestCase):

    @patch.dict("os.environ", {"LLM_PROVIDER": "banana"})
    def test_unknown_provider_is_rejected(self):
        with self.assertRaises(ValueError):
            LLMFactory.provider_from_env()

    @patch.dict("os.environ", {"LLM_PROVIDER": " Azure "})
    def test_provider_is_normalized(self):
        self.assertEqual(LLMFactory.provider_from_env(), LLMProvider.AZURE)

    @patch.dict("os.environ", {}, clear=True)
    def test_openai_requires_key(self):
        with self.assertRaises(ValueError):
            LLMFactory.get_client(LLMProvider.OPENAI)

    @patch.dict("os.environ", {"AZURE_OPENAI_API_KEY": "k", "AZURE_OPENAI_ENDPOINT": "https://x.example", "LLM_TIMEOUT": "15"}, clear=True)
    def test_azure_settings_come_from_environment(self):
        settings = LLMFactory.client_settings(LLMProvider.AZURE)

        self.assertEqual(settings["azure_endpoint"], "https://x.example")
        self.assertEqual(settings["api_version"], "2024-06-01")
        self.assertEqual(settings["timeout"], 15.0)

    @patch.dict("os.environ", {"LOCAL_LLM_URL": "http://cache-test:1/v1"})
    @patch("services.llm_factory.OpenAI")
    def test_clients_are_cached_per_configuration(self, mock_openai):
        first = LLMFactory.get_client(LLMProvider.LOCAL)
        second = LLMFactory.get_client(LLMProvider.LOCAL)

        self.assertIs(first, second)
        mock_openai.assert_called_once()
        self.assertEqual(mock_openai.call_args.kwargs["base_url"], "http://cache-test:1/v1")


if __name__ == "__main__":
    unittest.main()
