"""
LangGraph workflow for one customer care chat turn.

CONCEPT: One request, one pass
==============================
Every chat message runs through the graph once. Nothing is remembered
between runs; the customer's data is read fresh each time.

Our Workflow:
                    ┌─────────────┐
                    │    START    │
                    └──────┬──────┘
                           │
                    ┌──────▼──────┐
                    │   Lookup    │ ← Reads the customer record
                    └──────┬──────┘
                           │
              ┌────────────┴────────────┐
              │ found                   │ missing
       ┌──────▼──────┐                  │
       │  Assemble   │ ← Builds prompt  │
       └──────┬──────┘                  │
       ┌──────▼──────┐                  │
       │  Generate   │ ← Model call     │
       └──────┬──────┘                  │
       ┌──────▼──────┐                  │
       │   Format    │ ← Guardrails     │
       └──────┬──────┘                  │
              └────────────┬────────────┘
                    ┌──────▼──────┐
                    │     END     │
                    └─────────────┘
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from carebot.agents.generation import GenerationClient, GenerationResult
from carebot.agents.prompt import build_prompt
from carebot.config import COMPANY_NAME, ChatStatus
from carebot.store.models import CustomerRecord
from carebot.store.repository import CustomerRepository
from carebot.utils.guardrails import ReplyGuardrails
from carebot.utils.logging import get_logger

logger = get_logger("graph")


# =============================================================================
# STATE DEFINITION
# =============================================================================

class ChatState(TypedDict):
    """
    State that flows through the graph.

    Fields:
    - message: The user's latest chat message
    - customer_id: External identifier of the selected customer
    - customer: The customer record (None until looked up / if missing)
    - prompt: The assembled instruction string
    - generation: Result of the model call
    - reply: Final reply text after guardrails
    - escalate: Whether the UI should offer a call to support
    - status: ok / not_found / failed
    - error: Failure description, never shown to the customer
    - trace: List of steps for debugging
    """
    message: str
    customer_id: str
    customer: Optional[CustomerRecord]
    prompt: str
    generation: Optional[GenerationResult]
    reply: str
    escalate: bool
    status: str
    error: str
    trace: list[str]


@dataclass
class ChatOutcome:
    """What the conversation endpoint needs to answer a request."""
    status: str
    reply: str = ""
    escalate: bool = False
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ChatStatus.OK


# =============================================================================
# WORKFLOW
# =============================================================================

class ChatWorkflow:
    """
    Compiled chat graph bound to its service handles.

    The repository and generation client are passed in; the workflow keeps
    no other state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        repository: CustomerRepository,
        generator: GenerationClient,
        guardrails: Optional[ReplyGuardrails] = None,
        company_name: str = COMPANY_NAME,
    ):
        self.repository = repository
        self.generator = generator
        self.guardrails = guardrails or ReplyGuardrails()
        self.company_name = company_name
        self.graph = self._build()

    # -------------------------------------------------------------------------
    # NODES
    # -------------------------------------------------------------------------

    def lookup_node(self, state: ChatState) -> ChatState:
        """Lookup Node: fetch the customer record or mark it missing."""
        customer = self.repository.get_customer(state["customer_id"])

        state["customer"] = customer
        if customer is None:
            state["status"] = ChatStatus.NOT_FOUND
            state["trace"].append(f"Lookup: customer {state['customer_id']} not found")
        else:
            state["trace"].append(
                f"Lookup: {customer.name} ({len(customer.orders)} orders, "
                f"{len(customer.incidents)} incidents, {len(customer.invoices)} invoices)"
            )
        return state

    def assemble_node(self, state: ChatState) -> ChatState:
        """Assemble Node: build the prompt from the record and the message."""
        state["prompt"] = build_prompt(
            state["customer"],
            state["message"],
            company_name=self.company_name
        )
        state["trace"].append(f"Assemble: prompt of {len(state['prompt'])} chars")
        return state

    def generate_node(self, state: ChatState) -> ChatState:
        """Generate Node: single synchronous call to the generation service."""
        result = self.generator.generate(state["prompt"])

        state["generation"] = result
        if result.ok:
            state["trace"].append("Generate: reply received")
        else:
            state["status"] = ChatStatus.FAILED
            state["error"] = result.error
            state["trace"].append(f"Generate: failed - {result.error}")
        return state

    def format_node(self, state: ChatState) -> ChatState:
        """Format Node: parse, compact and check the reply for escalation."""
        parsed = self.guardrails.parse_reply(state["generation"].text)

        state["reply"] = parsed.reply
        state["escalate"] = parsed.escalate
        state["status"] = ChatStatus.OK
        state["trace"].append(
            f"Format: structured={parsed.structured}, escalate={parsed.escalate}"
        )
        return state

    # -------------------------------------------------------------------------
    # ROUTING
    # -------------------------------------------------------------------------

    @staticmethod
    def route_after_lookup(state: ChatState) -> str:
        return "found" if state.get("customer") is not None else "missing"

    @staticmethod
    def route_after_generate(state: ChatState) -> str:
        return "failed" if state.get("status") == ChatStatus.FAILED else "format"

    # -------------------------------------------------------------------------
    # BUILD THE GRAPH
    # -------------------------------------------------------------------------

    def _build(self):
        workflow = StateGraph(ChatState)

        workflow.add_node("lookup", self.lookup_node)
        workflow.add_node("assemble", self.assemble_node)
        workflow.add_node("generate", self.generate_node)
        workflow.add_node("format", self.format_node)

        workflow.set_entry_point("lookup")

        workflow.add_conditional_edges(
            "lookup",
            self.route_after_lookup,
            {
                "found": "assemble",
                "missing": END
            }
        )
        workflow.add_edge("assemble", "generate")
        workflow.add_conditional_edges(
            "generate",
            self.route_after_generate,
            {
                "format": "format",
                "failed": END
            }
        )
        workflow.add_edge("format", END)

        return workflow.compile()

    def run(self, message: str, customer_id: str) -> ChatOutcome:
        """
        Answer one chat message for one customer.

        Store errors propagate to the caller; a failed model call comes
        back as a ChatOutcome with status "failed".
        """
        initial_state: ChatState = {
            "message": message,
            "customer_id": customer_id,
            "customer": None,
            "prompt": "",
            "generation": None,
            "reply": "",
            "escalate": False,
            "status": "",
            "error": "",
            "trace": [],
        }

        final_state: Dict[str, Any] = self.graph.invoke(initial_state)

        for i, step in enumerate(final_state.get("trace", []), 1):
            logger.debug(f"  {i}. {step}")

        return ChatOutcome(
            status=final_state.get("status") or ChatStatus.FAILED,
            reply=final_state.get("reply", ""),
            escalate=final_state.get("escalate", False),
            error=final_state.get("error", ""),
        )
