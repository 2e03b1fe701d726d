"""
GenerationClient - the narrow interface to the text-generation service.

The chat-completions payload is not trusted: the client checks that a
non-empty text actually came back and turns every failure (network,
authentication, malformed payload) into a failed GenerationResult
instead of raising. Callers only ever see text or an error message.
"""

from dataclasses import dataclass
from typing import Optional

from openai import OpenAI, OpenAIError

from carebot.config import (
    GENERATION_MAX_TOKENS,
    GENERATION_TEMPERATURE,
    OPENAI_API_KEY,
    OPENAI_MODEL,
)
from carebot.utils.logging import get_logger

logger = get_logger("generation")


@dataclass(frozen=True)
class GenerationResult:
    """Either the generated text or the reason there is none."""
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, text: str) -> "GenerationResult":
        return cls(text=text)

    @classmethod
    def failure(cls, error: str) -> "GenerationResult":
        return cls(error=error)


class GenerationClient:
    """
    Sends one prompt to the chat-completions API and returns plain text.

    Construct it once at process start and pass it to whoever needs it.
    An already-built OpenAI-compatible client can be injected (tests do
    this); otherwise one is created from the API key.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = OPENAI_MODEL,
        temperature: float = GENERATION_TEMPERATURE,
        max_tokens: int = GENERATION_MAX_TOKENS,
        client=None,
    ):
        if client is None:
            api_key = api_key or OPENAI_API_KEY
            if not api_key:
                raise ValueError("OPENAI_API_KEY is not set.")
            client = OpenAI(api_key=api_key)

        self.openai = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, prompt: str) -> GenerationResult:
        """
        Run the prompt through the model.

        Args:
            prompt: The assembled instruction string

        Returns:
            GenerationResult with text, or with an error description
        """
        try:
            response = self.openai.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens
            )
        except OpenAIError as e:
            logger.error(f"Generation request failed: {e}")
            return GenerationResult.failure(f"{type(e).__name__}: {e}")

        return self._extract_text(response)

    def _extract_text(self, response) -> GenerationResult:
        """Pull choices[0].message.content out of a response, checking each step."""
        choices = getattr(response, "choices", None)
        if not choices:
            return GenerationResult.failure("Generation response has no choices")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            return GenerationResult.failure("Generation response has no text content")

        return GenerationResult.success(content)

    def close(self) -> None:
        """Release the underlying HTTP client, if it has one."""
        close = getattr(self.openai, "close", None)
        if callable(close):
            close()
