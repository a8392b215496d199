from types import SimpleNamespace

import openai
import pytest

from embedsub.exceptions import ConfigurationError, TranslationServiceError
from embedsub.models import CompletionRequest, TokenUsage
from embedsub.translation_service import OpenAIChatService

REQUEST = CompletionRequest(
    model="gpt-4o-mini",
    system_prompt="Translate to Spanish",
    user_content="Hello",
    max_output_tokens=100,
    temperature=0.3,
)


class _Completions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _response(content, usage=None):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def test_complete_sends_chat_request_and_reads_usage():
    usage = SimpleNamespace(prompt_tokens=7, completion_tokens=3, total_tokens=10)
    completions = _Completions(_response("Hola", usage))

    response = OpenAIChatService(client=_client(completions)).complete(REQUEST)

    assert response.text == "Hola"
    assert response.usage == TokenUsage(7, 3, 10)
    assert completions.kwargs == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "Translate to Spanish"},
            {"role": "user", "content": "Hello"},
        ],
        "max_tokens": 100,
        "temperature": 0.3,
    }


def test_missing_content_and_usage_default_to_empty():
    response = OpenAIChatService(client=_client(_Completions(_response(None)))).complete(REQUEST)
    assert response.text == ""
    assert response.usage == TokenUsage()


def test_openai_errors_become_service_errors():
    service = OpenAIChatService(client=_client(_Completions(error=openai.OpenAIError("rate limited"))))
    with pytest.raises(TranslationServiceError):
        service.complete(REQUEST)


def test_no_choices_is_a_service_error():
    response = SimpleNamespace(choices=[], usage=None)
    with pytest.raises(TranslationServiceError):
        OpenAIChatService(client=_client(_Completions(response))).complete(REQUEST)


def test_from_config_requires_api_key(monkeypatch):
    monkeypatch.delenv("EMBEDSUB_TEST_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        OpenAIChatService.from_config({"openai_api_key_env": "EMBEDSUB_TEST_KEY"})
