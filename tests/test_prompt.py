"""
Tests for prompt assembly
"""
import json

from carebot.agents.prompt import build_prompt, format_customer_data
from carebot.config import ESCALATION_PHRASE
from carebot.store.models import CustomerRecord


def test_prompt_embeds_customer_data_and_message(repo, seeded):
    john = repo.get_customer(seeded["John Doe"])

    prompt = build_prompt(john, "Why is my bill so high?", company_name="Odido")

    assert "customer care bot for Odido" in prompt
    assert "- Name: John Doe" in prompt
    assert "- Phone Number: 0612345678" in prompt
    assert 'User query: "Why is my bill so high?"' in prompt
    assert "Overcharged on last bill" in prompt
    assert '"status": "Pending"' in prompt
    for invoice in john.invoices:
        assert invoice.order_id in prompt


def test_prompt_carries_rules(repo, seeded):
    john = repo.get_customer(seeded["John Doe"])

    prompt = build_prompt(john, "Check my plan status")

    assert ESCALATION_PHRASE in prompt
    assert "unresolved billing disputes" in prompt
    assert "Never put a blank line before, after or inside a list" in prompt
    assert "**€35.00**" in prompt
    assert "Plan fee" in prompt
    assert '{"reply": "<your markdown answer>", "escalate": <true or false>}' in prompt


def test_empty_collections_are_still_included():
    customer = CustomerRecord(id="x", name="New Customer", phone_number="0600000000")

    block = format_customer_data(customer)

    assert "- Orders: []" in block
    assert "- Incidents: []" in block
    assert "- Invoices: []" in block
    assert "Email" not in block


def test_message_is_quoted_safely():
    customer = CustomerRecord(id="x", name="Jane Smith", phone_number="0698765432")
    message = 'He said "cancel" and left\nthe shop'

    prompt = build_prompt(customer, message)

    assert f"User query: {json.dumps(message)}" in prompt
