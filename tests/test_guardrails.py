"""
Tests for reply guardrails
"""
import json

from carebot.config import ESCALATION_PHRASE
from carebot.utils.guardrails import ReplyGuardrails

guardrails = ReplyGuardrails()


def test_structured_reply():
    raw = json.dumps({"reply": "Your plan is active.", "escalate": False})

    parsed = guardrails.parse_reply(raw)

    assert parsed.structured is True
    assert parsed.reply == "Your plan is active."
    assert parsed.escalate is False


def test_structured_reply_in_code_fence():
    raw = "```json\n" + json.dumps({"reply": "Call us please.", "escalate": True}) + "\n```"

    parsed = guardrails.parse_reply(raw)

    assert parsed.structured is True
    assert parsed.escalate is True


def test_plain_text_falls_back_to_sentinel_detection():
    raw = f"Your last bill is under review (INC1234, Pending). {ESCALATION_PHRASE}"

    parsed = guardrails.parse_reply(raw)

    assert parsed.structured is False
    assert parsed.reply == raw
    assert parsed.escalate is True


def test_sentinel_overrides_false_flag():
    raw = json.dumps({"reply": f"Sorry about that. {ESCALATION_PHRASE}", "escalate": False})

    assert guardrails.parse_reply(raw).escalate is True


def test_wrong_shape_falls_back_to_raw_text():
    for raw in ('{"answer": "hi"}', '{"reply": "", "escalate": false}',
                '{"reply": "hi", "escalate": "yes"}', '["hi"]'):
        parsed = guardrails.parse_reply(raw)
        assert parsed.structured is False
        assert parsed.reply == raw


def test_validate_reply_structure():
    assert guardrails.validate_reply_structure({"reply": "ok"}).is_valid
    assert not guardrails.validate_reply_structure(None).is_valid
    assert not guardrails.validate_reply_structure({"reply": 3}).is_valid


def test_compact_whitespace_removes_blank_lines_around_lists():
    raw = (
        "Here is your invoice:  \n"
        "\n"
        "- Period: 2025-03-15 to 2025-04-14\n"
        "\n"
        "- Plan fee: **€35.00**\n"
        "- Adjustment: **€22.50**\n"
        "\n"
        "\n"
        "\n"
        "The adjustment is under review."
    )

    assert guardrails.compact_whitespace(raw) == (
        "Here is your invoice:\n"
        "- Period: 2025-03-15 to 2025-04-14\n"
        "- Plan fee: **€35.00**\n"
        "- Adjustment: **€22.50**\n"
        "The adjustment is under review."
    )


def test_compact_whitespace_keeps_paragraph_breaks():
    raw = "\n\nFirst paragraph.\n\n\n\nSecond paragraph.\n\n"

    assert guardrails.compact_whitespace(raw) == "First paragraph.\n\nSecond paragraph."
