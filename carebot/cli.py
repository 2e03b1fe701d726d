"""
Support console for the Telecom Customer Care Assistant.

This is the agent-facing UI. It talks to the HTTP API only.

Usage:
    carebot-console                       # pick a customer, then chat
    carebot-console --customer <id>       # skip the selector
    carebot-console --demo                # run the demo questions
    carebot-console --api-url http://host:8000

The console will:
1. List customers and let you pick one
2. Show the customer panel (active plan, orders, support history, invoices)
3. Send each chat message to POST /api/chat and show the reply
"""

import argparse
import logging
import sys
from typing import List, Optional

import httpx

from carebot.config import API_BASE_URL, APOLOGY_MESSAGE, HELP_REQUEST
from carebot.store.models import CustomerRecord, CustomerSummary
from carebot.ui.panels import ChatMessage, ChatTranscript, render_customer_panel
from carebot.utils.logging import (
    Colors,
    get_logger,
    print_decision,
    print_step,
    print_trace_header,
    setup_logging,
)

logger = get_logger("cli")


# Demo questions that showcase the assistant
DEMO_QUERIES = [
    "Check my plan status",
    "Why is my bill so high?",
    "Can you break down my last invoice?",
]

HELP_TEXT = (
    "Commands: 'details' shows the customer panel, 'reset' restarts the chat, "
    "'help' asks for a simpler invoice explanation, 'call' calls support, "
    "'switch' picks another customer, 'exit' quits."
)


def print_banner():
    """Print the application banner."""
    banner = """
+===============================================================+
|                                                               |
|   CUSTOMER CARE PORTAL                                        |
|   Manage customer interactions and support tickets            |
|                                                               |
+===============================================================+
"""
    print(f"{Colors.BOLD}{Colors.INFO}{banner}{Colors.RESET}")


class SupportConsole:
    """
    Console client for the customer care API.

    The HTTP client is injected so tests can pass a TestClient.
    """

    def __init__(self, client: httpx.Client):
        self.client = client
        self.transcript = ChatTranscript()
        self.customer: Optional[CustomerRecord] = None

    # -------------------------------------------------------------------------
    # API CALLS
    # -------------------------------------------------------------------------

    def fetch_customers(self) -> List[CustomerSummary]:
        response = self.client.get("/api/users")
        response.raise_for_status()
        return [
            CustomerSummary(id=c["id"], name=c["name"], phone_number=c["phoneNumber"])
            for c in response.json()
        ]

    def select_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        """
        Load a customer's details and start a fresh conversation.

        Returns None if the customer could not be loaded.
        """
        self.transcript.reset()
        try:
            response = self.client.get(f"/api/users/{customer_id}")
        except httpx.HTTPError as e:
            logger.error(f"Error fetching user details: {e}")
            self.customer = None
            return None

        if response.status_code != 200:
            logger.error(f"Failed to fetch user details ({response.status_code})")
            self.customer = None
            return None

        self.customer = CustomerRecord.from_dict(response.json())
        return self.customer

    def send(self, text: str) -> Optional[ChatMessage]:
        """
        Send one message for the selected customer.

        Any failure becomes the fixed apology message; error details
        only go to the log.
        """
        if not text.strip() or self.customer is None:
            return None

        self.transcript.add_user(text)
        try:
            response = self.client.post(
                "/api/chat",
                json={"message": text, "userId": self.customer.id},
            )
            if response.status_code != 200:
                raise ValueError(f"API answered {response.status_code}")
            data = response.json()
            if not isinstance(data, dict) or not isinstance(data.get("reply"), str):
                raise ValueError(f"Unexpected chat payload: {data!r}")
            return self.transcript.add_bot(data["reply"], escalate=bool(data.get("escalate")))
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.warning(f"Chat request failed: {e}")
            return self.transcript.add_bot(APOLOGY_MESSAGE)

    def ask_for_help(self) -> Optional[ChatMessage]:
        """Send the canned request to have an invoice explained more simply."""
        return self.send(HELP_REQUEST)

    def reset(self) -> None:
        self.transcript.reset()

    # -------------------------------------------------------------------------
    # RENDERING
    # -------------------------------------------------------------------------

    def show_customer(self) -> None:
        if self.customer is None:
            print(f"{Colors.ERROR}Failed to load user details{Colors.RESET}")
            return
        print_trace_header("Customer Care Agent")
        print(render_customer_panel(self.customer))

    def show_message(self, message: ChatMessage) -> None:
        print_step(message.speaker, message.text, details=message.timestamp)
        for action in message.actions():
            print_decision(action, approved=action != "Call Now")

    def call_support(self) -> None:
        print(f"\n{Colors.INFO}Calling Customer Support... (This is a mock action){Colors.RESET}")


# =============================================================================
# MODES
# =============================================================================

def choose_customer(console: SupportConsole) -> Optional[str]:
    """Customer selector: list customers and read a choice."""
    customers = console.fetch_customers()
    if not customers:
        print("No customers found. Run 'python -m carebot.store.seed' first.")
        return None

    print(f"\n{Colors.BOLD}Select Customer{Colors.RESET}")
    for i, customer in enumerate(customers, 1):
        print(f"  {i}. {customer.name} ({customer.phone_number})")

    while True:
        choice = input(f"{Colors.INFO}Customer number: {Colors.RESET}").strip()
        if choice.lower() in ("exit", "quit", "q"):
            return None
        if choice.isdigit() and 1 <= int(choice) <= len(customers):
            return customers[int(choice) - 1].id
        print("Please enter one of the numbers above.")


def run_demo_mode(console: SupportConsole):
    """Run all demo questions for the selected customer."""
    print(f"\n{Colors.BOLD}DEMO MODE - Running {len(DEMO_QUERIES)} Demo Queries{Colors.RESET}")
    console.show_message(console.transcript.messages[0])

    for i, query in enumerate(DEMO_QUERIES, 1):
        print(f"\n{Colors.BOLD}{'─' * 60}{Colors.RESET}")
        print(f"{Colors.BOLD}Demo Query {i}/{len(DEMO_QUERIES)}:{Colors.RESET}")
        reply = console.send(query)
        if reply:
            console.show_message(console.transcript.messages[-2])
            console.show_message(reply)


def run_interactive_mode(console: SupportConsole):
    """Chat with the assistant until the agent quits."""
    print(f"\n{Colors.BOLD}INTERACTIVE MODE{Colors.RESET}")
    print(HELP_TEXT + "\n")
    console.show_message(console.transcript.messages[0])

    while True:
        try:
            text = input(f"\n{Colors.INFO}You: {Colors.RESET}").strip()

            if not text:
                continue

            command = text.lower()
            if command in ("exit", "quit", "q"):
                print(f"\n{Colors.SUCCESS}Goodbye!{Colors.RESET}\n")
                break
            if command == "reset":
                console.reset()
                console.show_message(console.transcript.messages[0])
                continue
            if command == "help":
                reply = console.ask_for_help()
                if reply:
                    console.show_message(console.transcript.messages[-2])
                    console.show_message(reply)
                continue
            if command == "call":
                console.call_support()
                continue
            if command == "details":
                console.show_customer()
                continue
            if command == "switch":
                customer_id = choose_customer(console)
                if customer_id and console.select_customer(customer_id):
                    console.show_customer()
                    console.show_message(console.transcript.messages[0])
                continue

            reply = console.send(text)
            if reply:
                console.show_message(reply)

        except KeyboardInterrupt:
            print(f"\n\n{Colors.SUCCESS}Session ended. Goodbye!{Colors.RESET}\n")
            break
        except EOFError:
            break


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Customer Care Portal - support console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    carebot-console
    carebot-console --customer 5b0f0f1e-...
    carebot-console --demo
        """
    )

    parser.add_argument(
        "--api-url",
        default=API_BASE_URL,
        help="Base URL of the customer care API"
    )

    parser.add_argument(
        "--customer",
        help="External id of the customer to open (skips the selector)"
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run the demo questions for the selected customer"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(level=log_level)

    print_banner()

    with httpx.Client(base_url=args.api_url) as client:
        console = SupportConsole(client)

        try:
            customer_id = args.customer or choose_customer(console)
        except httpx.HTTPError as e:
            print(f"{Colors.ERROR}[ERROR] Cannot reach the API at {args.api_url}:{Colors.RESET}")
            print(f"   {e}")
            print(f"\n   Start it with {Colors.BOLD}carebot-server{Colors.RESET}.")
            sys.exit(1)

        if not customer_id:
            return

        console.select_customer(customer_id)
        console.show_customer()
        if console.customer is None:
            sys.exit(1)

        if args.demo:
            run_demo_mode(console)
        else:
            run_interactive_mode(console)


if __name__ == "__main__":
    main()
