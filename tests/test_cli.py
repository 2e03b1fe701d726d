"""
Tests for the support console against the API
"""
import json

import httpx
import pytest

from carebot.cli import SupportConsole
from carebot.config import APOLOGY_MESSAGE, ESCALATION_PHRASE, HELP_REQUEST


def test_fetch_and_select_customer(client, seeded):
    console = SupportConsole(client)

    customers = console.fetch_customers()
    record = console.select_customer(customers[0].id)

    assert [c.name for c in customers] == ["John Doe", "Jane Smith"]
    assert record.name == "John Doe"
    assert record.orders[0].product_name == "Unlimited 5G"


def test_select_unknown_customer(client, seeded):
    console = SupportConsole(client)

    assert console.select_customer("no-such-customer") is None
    assert console.customer is None


def test_send_shows_escalation(client, seeded, fake_openai):
    fake_openai.completions.replies.append(json.dumps({
        "reply": f"Your last bill is being reviewed. {ESCALATION_PHRASE}",
        "escalate": True,
    }))
    console = SupportConsole(client)
    console.select_customer(seeded["John Doe"])

    reply = console.send("Why is my bill so high?")

    assert reply.is_bot
    assert reply.escalate is True
    assert reply.actions() == ["Call Now"]
    assert [m.text for m in console.transcript.messages[1:]] == [
        "Why is my bill so high?",
        f"Your last bill is being reviewed. {ESCALATION_PHRASE}",
    ]


def test_send_failure_shows_apology(client, seeded, fake_openai):
    fake_openai.completions.raw_response = object()
    console = SupportConsole(client)
    console.select_customer(seeded["Jane Smith"])

    reply = console.send("Hello?")

    assert reply.text == APOLOGY_MESSAGE
    assert reply.escalate is False


def test_blank_message_is_ignored(client, seeded):
    console = SupportConsole(client)
    console.select_customer(seeded["Jane Smith"])

    assert console.send("   ") is None
    assert len(console.transcript) == 1


def test_switching_customer_resets_transcript(client, seeded):
    console = SupportConsole(client)
    console.select_customer(seeded["John Doe"])
    console.send("Check my plan status")

    console.select_customer(seeded["Jane Smith"])

    assert len(console.transcript) == 1


@pytest.mark.parametrize("body", [[], None, {"text": "missing reply"}, "plain string"])
def test_unexpected_chat_payload_shows_apology(client, seeded, body):
    console = SupportConsole(client)
    console.select_customer(seeded["Jane Smith"])
    console.client = httpx.Client(
        base_url="http://testserver",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)),
    )

    reply = console.send("Check my plan status")

    assert reply.text == APOLOGY_MESSAGE


def test_unreachable_api_shows_apology(client, seeded):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    console = SupportConsole(client)
    console.select_customer(seeded["Jane Smith"])
    console.client = httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(refuse))

    assert console.send("Hello?").text == APOLOGY_MESSAGE


def test_ask_for_help_sends_invoice_explanation_request(client, seeded, fake_openai):
    console = SupportConsole(client)
    console.select_customer(seeded["John Doe"])

    reply = console.ask_for_help()

    assert reply.is_bot
    assert console.transcript.messages[-2].text == HELP_REQUEST
    assert HELP_REQUEST in fake_openai.completions.last_prompt
