"""
Tests for the generation client wrapper
"""
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from carebot.agents.generation import GenerationClient, GenerationResult


def test_generate_returns_text(generator, fake_openai):
    fake_openai.completions.replies.append("Your plan is active.")

    result = generator.generate("prompt text")

    assert result == GenerationResult.success("Your plan is active.")
    assert result.ok
    call = fake_openai.completions.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"] == [{"role": "user", "content": "prompt text"}]


def test_api_error_becomes_failed_result(generator, fake_openai):
    fake_openai.completions.error = OpenAIError("connection reset")

    result = generator.generate("prompt text")

    assert not result.ok
    assert result.text is None
    assert "connection reset" in result.error


@pytest.mark.parametrize("raw_response", [
    SimpleNamespace(choices=[]),
    SimpleNamespace(),
    SimpleNamespace(choices=[SimpleNamespace(message=None)]),
    SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))]),
    SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="   "))]),
    SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content={"reply": "x"}))]),
])
def test_malformed_payload_becomes_failed_result(generator, fake_openai, raw_response):
    fake_openai.completions.raw_response = raw_response

    result = generator.generate("prompt text")

    assert not result.ok
    assert result.error


def test_missing_api_key_is_rejected(monkeypatch):
    monkeypatch.setattr("carebot.agents.generation.OPENAI_API_KEY", None)

    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        GenerationClient()


def test_close_releases_client(generator, fake_openai):
    generator.close()

    assert fake_openai.closed is True
