from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from dealership import ai_client
from dealership.ai_client import (
    TROUBLE_THINKING,
    AIClientUnavailable,
    complete_for_persona,
    generate_image_url,
    generate_reply,
)
from dealership.conftest import completion
from dealership.personas import PERSONAS, PersonaId

BEN_FALLBACK = PERSONAS[PersonaId.BEN].fallback_response


def test_reply_is_first_choice_verbatim(openai_client):
    openai_client.chat.completions.create.return_value = completion("  First answer. ", "Second answer")
    assert generate_reply("ben", "Hi there") == "  First answer. "


def test_request_parameters(openai_client):
    openai_client.chat.completions.create.return_value = completion("ok")

    generate_reply(PersonaId.BRENT, "How's the RV lot?")

    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.8
    assert kwargs["max_tokens"] == 300
    assert kwargs["messages"] == [
        {"role": "system", "content": PERSONAS[PersonaId.BRENT].system_prompt},
        {"role": "user", "content": "How's the RV lot?"},
    ]


@pytest.mark.parametrize("resp", [
    SimpleNamespace(choices=[]),
    SimpleNamespace(choices=None),
    completion(""),
    completion(None),
])
def test_no_usable_candidate(openai_client, resp):
    openai_client.chat.completions.create.return_value = resp
    result = complete_for_persona("ben", "hello")
    assert result.text == TROUBLE_THINKING
    assert result.fallback is True


@pytest.mark.parametrize("speaker", ["ben", "brent"])
def test_failure_always_uses_ben_fallback(openai_client, speaker):
    openai_client.chat.completions.create.side_effect = Exception("AI boom")
    assert generate_reply(speaker, "hello") == BEN_FALLBACK


def test_malformed_response_counts_as_failure(openai_client):
    openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(message=None)])
    assert generate_reply("brent", "hello") == BEN_FALLBACK


def test_missing_client_falls_back(no_openai):
    result = complete_for_persona("brent", "hello")
    assert result.text == BEN_FALLBACK
    assert result.fallback is True


def test_get_client_without_key_returns_none():
    with patch.object(ai_client, "_client", None), patch.object(ai_client.Config, "OPENAI_API_KEY", ""):
        assert ai_client.get_client() is None


def test_get_client_built_once_without_retries():
    fake_cls = MagicMock()
    with patch.object(ai_client, "_client", None), \
            patch.object(ai_client.Config, "OPENAI_API_KEY", "sk-test"), \
            patch("dealership.ai_client.openai.OpenAI", fake_cls):
        first = ai_client.get_client()
        second = ai_client.get_client()

    assert first is second
    fake_cls.assert_called_once()
    assert fake_cls.call_args.kwargs["api_key"] == "sk-test"
    assert fake_cls.call_args.kwargs["max_retries"] == 0


def test_image_url(openai_client):
    openai_client.images.generate.return_value = SimpleNamespace(data=[SimpleNamespace(url="https://img/1.png")])

    assert generate_image_url("a prompt", "1024x1024", "standard", "vivid") == "https://img/1.png"
    kwargs = openai_client.images.generate.call_args.kwargs
    assert kwargs["model"] == "dall-e-3"
    assert kwargs["n"] == 1
    assert kwargs["size"] == "1024x1024"
    assert kwargs["style"] == "vivid"


def test_image_without_url(openai_client):
    openai_client.images.generate.return_value = SimpleNamespace(data=[])
    assert generate_image_url("p", "1024x1024", "standard", "natural") is None


def test_image_needs_client(no_openai):
    with pytest.raises(AIClientUnavailable):
        generate_image_url("p", "1024x1024", "standard", "natural")
