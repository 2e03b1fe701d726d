"""Prompt assembly and text generation for the care assistant."""
from .generation import GenerationClient, GenerationResult
from .prompt import build_prompt

__all__ = ["GenerationClient", "GenerationResult", "build_prompt"]
