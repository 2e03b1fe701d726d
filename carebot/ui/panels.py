"""
Presentational helpers for the support console.

These functions decide WHAT the agent sees (active plan, badges, the chat
transcript and its actions) and render it as plain text. They never touch
the store or the network.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from carebot.config import DESCRIPTION_PREVIEW_CHARS, ESCALATION_SENTINEL, GREETING_MESSAGE
from carebot.store.models import CustomerRecord, Order, OrderStatus

INVOICE_PATTERN = re.compile(r'(?:€|EUR|invoice|bill|plan fee|adjustment|amount)', re.IGNORECASE)

# Labels shown next to each status in the console
STATUS_BADGES = {
    "active": "[Active]",
    "pending": "[Pending]",
    "open": "[Open]",
    "resolved": "[Resolved]",
    "expired": "[Expired]",
}


def active_plan(orders: List[Order]) -> Optional[Order]:
    """The order shown in the "Active Plan" panel: the first Active one."""
    for order in orders:
        if order.status == OrderStatus.ACTIVE.value:
            return order
    return None


def status_badge(status: str) -> str:
    return STATUS_BADGES.get(status.lower(), f"[{status}]")


def truncate_description(text: str, limit: int = DESCRIPTION_PREVIEW_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def service_period(order: Order) -> str:
    if order.out_service_date:
        return f"{order.in_service_date or order.date} to {order.out_service_date}"
    return f"{order.in_service_date or order.date}"


def has_invoice_content(text: str) -> bool:
    """Whether a reply talks about bills or amounts."""
    return bool(INVOICE_PATTERN.search(text))


def needs_escalation(text: str, escalate: bool = False) -> bool:
    """Whether to offer the "Call Now" action under a reply."""
    return escalate or ESCALATION_SENTINEL in text


# =============================================================================
# CUSTOMER PANEL
# =============================================================================

def render_customer_panel(customer: CustomerRecord) -> str:
    """Render name, active plan, orders, support history and invoices."""
    lines = [
        f"{customer.name}",
        f"  Phone: {customer.phone_number}",
    ]
    if customer.email:
        lines.append(f"  Email: {customer.email}")

    lines.append("")
    lines.append("ACTIVE PLAN")
    plan = active_plan(customer.orders)
    if plan:
        lines.append(f"  {plan.product_name} {status_badge(plan.status)}")
        lines.append(f"  From {service_period(plan)}")
    else:
        lines.append("  No active plan")

    lines.append("")
    lines.append("ORDERS")
    if customer.orders:
        for order in customer.orders:
            lines.append(
                f"  {order.product_name} {status_badge(order.status)} "
                f"- {order.order_id} - {service_period(order)}"
            )
    else:
        lines.append("  No orders found")

    lines.append("")
    lines.append("SUPPORT HISTORY")
    if customer.incidents:
        for incident in customer.incidents:
            lines.append(
                f"  {truncate_description(incident.description)} {status_badge(incident.status)} "
                f"- {incident.incident_id} - {incident.date}"
            )
    else:
        lines.append("  No support incidents found")

    lines.append("")
    lines.append("INVOICES")
    if customer.invoices:
        for invoice in customer.invoices:
            adjustment = f", adjustment €{invoice.adjustment}" if invoice.adjustment else ""
            lines.append(
                f"  {invoice.period_start_date} to {invoice.period_end_date}: "
                f"€{invoice.price}{adjustment} ({invoice.order_id})"
            )
    else:
        lines.append("  No invoices found")

    return "\n".join(lines)


# =============================================================================
# CHAT TRANSCRIPT
# =============================================================================

def _clock() -> str:
    return datetime.now().strftime("%H:%M")


@dataclass
class ChatMessage:
    text: str
    is_bot: bool
    timestamp: str = field(default_factory=_clock)
    escalate: bool = False

    @property
    def speaker(self) -> str:
        return "Support Bot" if self.is_bot else "You"

    def actions(self) -> List[str]:
        """Buttons the console offers under this message."""
        if not self.is_bot:
            return []
        if needs_escalation(self.text, self.escalate):
            return ["Call Now"]
        if has_invoice_content(self.text):
            return ["Need Help Understanding?", "Call Support"]
        return []


class ChatTranscript:
    """The messages of the current conversation, starting with a greeting."""

    def __init__(self):
        self.messages: List[ChatMessage] = []
        self.reset()

    def reset(self) -> None:
        self.messages = [ChatMessage(text=GREETING_MESSAGE, is_bot=True)]

    def add_user(self, text: str) -> ChatMessage:
        message = ChatMessage(text=text, is_bot=False)
        self.messages.append(message)
        return message

    def add_bot(self, text: str, escalate: bool = False) -> ChatMessage:
        message = ChatMessage(text=text, is_bot=True, escalate=escalate)
        self.messages.append(message)
        return message

    def __len__(self) -> int:
        return len(self.messages)
