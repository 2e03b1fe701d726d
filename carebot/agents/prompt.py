"""
Prompt assembly for the customer care assistant.

CONCEPT: Data-Grounded Prompt
=============================
The assistant has no tools and no retrieval step. Everything it knows
about the customer is written straight into the prompt:

1. PERSONA: who the assistant is and what it helps with
2. DATA: the customer record, serialized inline as JSON
3. RULES: formatting, invoice breakdowns, escalation phrasing
4. CONTRACT: answer as {"reply": ..., "escalate": ...}

The prompt is static text around the data; the generation service does
the reasoning.
"""

import json
from typing import List

from carebot.config import COMPANY_NAME, ESCALATION_PHRASE
from carebot.store.models import CustomerRecord


FORMATTING_RULES = """### Formatting rules:
- Write compact markdown. Never put a blank line before, after or inside a list.
- Use "-" for bullet lists and "1." for numbered steps.
- Put every monetary figure in bold, with the euro sign, e.g. **€35.00**.
- Keep the answer short: at most a few sentences plus one list when needed."""

INVOICE_RULES = """### Invoice breakdowns:
When the customer asks about a bill, charge or invoice, list the relevant invoice like this:
- Period: <start> to <end>
- Plan fee: **€<price>**
- Adjustment: **€<adjustment>** (say "none" when there is no adjustment)
- Total: **€<price + adjustment>**
Then explain the difference in one sentence, referring to related incidents by ID and status."""

ESCALATION_RULES = f"""### Escalation rules:
- If the issue is complex or cannot be fixed via chat (unresolved billing disputes, hardware or SIM delivery delays, urgent network outages), end the reply with exactly: "{ESCALATION_PHRASE}"
- An incident with status Open or Pending about the customer's question counts as unresolved.
- Do not escalate simple questions such as checking a plan status.
- Whenever you use that sentence, set "escalate" to true; otherwise set it to false."""

RESPONSE_CONTRACT = """### Response format:
Respond with ONLY a JSON object, no code fences:
{"reply": "<your markdown answer>", "escalate": <true or false>}"""

EXAMPLES = f"""### Examples:
- Query: "Why is my bill so high?"
  - Reply: "I see you were overcharged on your last bill (Incident INC002, status: Pending). This is still being reviewed. {ESCALATION_PHRASE}"
- Query: "Check my plan status"
  - Reply: "Your Unlimited 5G plan (Order ORD001) is active since 2025-01-15. Everything looks good!"
- Query: "My internet is slow"
  - Reply: "I notice you reported slow internet speed on 2025-03-27 (Incident INC004, status: Open). Try restarting your router. If that doesn't help, I recommend speaking to an agent. {ESCALATION_PHRASE}"
- Query: "Where's my SIM card?"
  - Reply: "Your SIM card delivery (Incident INC003, status: Open) is delayed. This requires follow-up with our team. {ESCALATION_PHRASE}\""""


def _serialize(items: List) -> str:
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def format_customer_data(customer: CustomerRecord) -> str:
    """Render the customer record as the data block of the prompt."""
    lines = [
        f"- Name: {customer.name}",
        f"- Phone Number: {customer.phone_number}",
    ]
    if customer.email:
        lines.append(f"- Email: {customer.email}")
    lines.extend([
        f"- Orders: {_serialize(customer.orders)}",
        f"- Incidents: {_serialize(customer.incidents)}",
        f"- Invoices: {_serialize(customer.invoices)}",
    ])
    return "\n".join(lines)


def build_prompt(
    customer: CustomerRecord,
    message: str,
    company_name: str = COMPANY_NAME
) -> str:
    """
    Build the full instruction string for one chat turn.

    Args:
        customer: The selected customer's record
        message: The latest message typed in the chat
        company_name: Telecom company the assistant speaks for

    Returns:
        The prompt, ready for the generation service
    """
    persona = (
        f"You are a customer care bot for {company_name}, a telecom company. "
        "Your role is to assist users with queries about their telecom services "
        "(e.g., plans, billing, network issues) based on their data, provide clear "
        "solutions, and escalate unresolved or complex issues to a human agent."
    )

    guidelines = """### Guidelines:
1. **Contextual Understanding**: Interpret the user's intent and answer with specific details from their orders, incidents or invoices (IDs, statuses, dates).
2. **Actionable Responses**: Offer practical steps or information.
3. **Tone**: Be professional, friendly and concise. Explain technical terms if you use them.
4. **Fallback**: If the query is unclear or unrelated to the data, ask for clarification."""

    sections = [
        persona,
        "Below is the user's data:",
        format_customer_data(customer),
        f"User query: {json.dumps(message, ensure_ascii=False)}",
        guidelines,
        FORMATTING_RULES,
        INVOICE_RULES,
        ESCALATION_RULES,
        EXAMPLES,
        RESPONSE_CONTRACT,
        "Respond based on the user's query and data, following the rules and examples above.",
    ]
    return "\n\n".join(sections)
