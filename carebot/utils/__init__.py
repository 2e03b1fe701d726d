"""Utility modules for reply guardrails and logging."""
from .guardrails import ReplyGuardrails, ParsedReply
from .logging import setup_logging, get_logger

__all__ = ["ReplyGuardrails", "ParsedReply", "setup_logging", "get_logger"]
