"""
Guardrails module for the Telecom Customer Care Assistant.

This module implements the checks applied to every generated reply:
1. The reply is parsed from the structured JSON answer the prompt asks for
2. A reply that breaks the answer contract falls back to its raw text
3. Escalation is detected from the structured flag OR the sentinel phrase
4. Whitespace is compacted so lists render without blank lines around them

CONCEPT: Guardrails are deterministic (rule-based) checks, not AI-based.
The generated text is never trusted to have the shape we asked for.
"""

import json
import re
from dataclasses import dataclass
from typing import Dict, Optional

from carebot.config import ESCALATION_SENTINEL


@dataclass
class ValidationResult:
    """Result of a guardrail validation check."""
    is_valid: bool
    reason: str
    details: Dict = None


@dataclass
class ParsedReply:
    """A generated reply after the guardrails have been applied."""
    reply: str
    escalate: bool
    structured: bool = False


class ReplyGuardrails:
    """
    Parses and cleans replies coming back from the generation service.

    Usage:
        guardrails = ReplyGuardrails()
        parsed = guardrails.parse_reply(raw_text)
        print(parsed.reply, parsed.escalate)
    """

    # A markdown list item: "- x", "* x", "• x" or "1. x"
    LIST_ITEM_PATTERN = re.compile(r'^\s*(?:[-*•]|\d+\.)\s')

    # Three or more newlines (with optional spaces) collapse to one blank line
    BLANK_RUN_PATTERN = re.compile(r'\n[ \t]*(?:\n[ \t]*){2,}')

    def __init__(self, sentinel: str = ESCALATION_SENTINEL):
        """
        Initialize the guardrails.

        Args:
            sentinel: Phrase whose presence in a reply means "offer a call"
        """
        self.sentinel = sentinel

    # =========================================================================
    # STRUCTURE
    # =========================================================================

    def validate_reply_structure(self, response_data) -> ValidationResult:
        """
        Validate that a decoded answer has the shape the prompt asked for.

        Required fields:
        - reply: non-empty string
        - escalate: boolean (optional, defaults to false)
        """
        if not isinstance(response_data, dict):
            return ValidationResult(
                is_valid=False,
                reason="Answer must be a JSON object",
                details={"type": type(response_data).__name__}
            )

        reply = response_data.get("reply")
        if not isinstance(reply, str) or not reply.strip():
            return ValidationResult(
                is_valid=False,
                reason="Missing or empty 'reply' field",
                details={"missing_fields": ["reply"]}
            )

        escalate = response_data.get("escalate", False)
        if not isinstance(escalate, bool):
            return ValidationResult(
                is_valid=False,
                reason="'escalate' must be a boolean",
                details={"escalate_type": type(escalate).__name__}
            )

        return ValidationResult(is_valid=True, reason="Answer structure is valid.")

    def parse_reply(self, response_text: str) -> ParsedReply:
        """
        Turn raw generated text into a ParsedReply.

        The structured answer wins when it is valid. Otherwise the raw
        text becomes the reply. In both cases the sentinel phrase also
        switches escalation on.
        """
        data = self._decode_json(response_text)
        validation = self.validate_reply_structure(data)

        if validation.is_valid:
            reply = self.compact_whitespace(data["reply"])
            escalate = bool(data.get("escalate", False)) or self.mentions_sentinel(reply)
            return ParsedReply(reply=reply, escalate=escalate, structured=True)

        reply = self.compact_whitespace(response_text)
        return ParsedReply(
            reply=reply,
            escalate=self.mentions_sentinel(reply),
            structured=False
        )

    def _decode_json(self, response_text: str) -> Optional[object]:
        """Parse JSON from generated text, handling markdown code blocks."""
        text = response_text.strip()
        if text.startswith("```json"):
            text = text[7:]
        elif text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        try:
            return json.loads(text.strip())
        except (json.JSONDecodeError, ValueError):
            return None

    # =========================================================================
    # ESCALATION
    # =========================================================================

    def mentions_sentinel(self, text: str) -> bool:
        """Check whether the text asks the customer to call support."""
        return self.sentinel.lower() in text.lower()

    # =========================================================================
    # WHITESPACE
    # =========================================================================

    def compact_whitespace(self, text: str) -> str:
        """
        Post-process a reply into compact markdown.

        - trailing spaces are stripped from every line
        - blank lines directly before, after or between list items go away
        - runs of blank lines collapse to a single one
        """
        text = text.replace("\r\n", "\n")
        text = self.BLANK_RUN_PATTERN.sub("\n\n", text)

        lines = [line.rstrip() for line in text.split("\n")]
        kept = []
        for i, line in enumerate(lines):
            if line.strip() == "":
                prev_line = kept[-1] if kept else ""
                next_line = self._next_non_blank(lines, i)
                if self.LIST_ITEM_PATTERN.match(prev_line) or self.LIST_ITEM_PATTERN.match(next_line):
                    continue
            kept.append(line)

        return "\n".join(kept).strip()

    @staticmethod
    def _next_non_blank(lines, index: int) -> str:
        for line in lines[index + 1:]:
            if line.strip():
                return line
        return ""
