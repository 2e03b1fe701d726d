"""
HTTP routes: customer lookups for the console and the chat endpoint.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from carebot.config import ChatStatus
from carebot.graph import ChatWorkflow
from carebot.store.repository import CustomerRepository
from carebot.utils.logging import get_logger

logger = get_logger("api")
router = APIRouter()

NOT_FOUND_BODY = {"error": "User not found"}
FAILURE_BODY = {"error": "Something went wrong"}


class ChatRequest(BaseModel):
    """Chat message sent by the console"""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="User message")
    user_id: str = Field(..., alias="userId", description="External customer identifier")


class ChatResponse(BaseModel):
    """Chat reply"""
    reply: str
    escalate: bool = Field(
        default=False,
        description="True when the reply asks the customer to call support"
    )


def get_repository(request: Request) -> CustomerRepository:
    return request.app.state.repository


def get_workflow(request: Request) -> ChatWorkflow:
    return request.app.state.workflow


@router.get("/health", tags=["health"])
def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "carebot"
    }


@router.get("/api/users", tags=["users"])
def list_users(repository: CustomerRepository = Depends(get_repository)):
    """All customers, for the customer selector"""
    try:
        customers = repository.list_customers()
    except Exception:
        logger.exception("Listing customers failed")
        return JSONResponse(status_code=500, content=FAILURE_BODY)
    return [c.to_dict() for c in customers]


@router.get("/api/users/{customer_id}", tags=["users"])
def get_user(customer_id: str, repository: CustomerRepository = Depends(get_repository)):
    """Full customer record with orders, incidents and invoices"""
    try:
        customer = repository.get_customer(customer_id)
    except Exception:
        logger.exception(f"Fetching customer {customer_id} failed")
        return JSONResponse(status_code=500, content=FAILURE_BODY)

    if customer is None:
        return JSONResponse(status_code=404, content=NOT_FOUND_BODY)
    return customer.to_dict()


@router.post("/api/chat", tags=["chat"], response_model=ChatResponse)
def chat(payload: ChatRequest, workflow: ChatWorkflow = Depends(get_workflow)):
    """
    Answer one chat message using the customer's data

    Returns:
        200 {reply, escalate} | 404 unknown customer | 500 on any failure
    """
    try:
        outcome = workflow.run(payload.message, payload.user_id)
    except Exception:
        logger.exception(f"Chat request for customer {payload.user_id} failed")
        return JSONResponse(status_code=500, content=FAILURE_BODY)

    if outcome.status == ChatStatus.NOT_FOUND:
        return JSONResponse(status_code=404, content=NOT_FOUND_BODY)

    if not outcome.ok:
        logger.error(f"Chat request for customer {payload.user_id} failed: {outcome.error}")
        return JSONResponse(status_code=500, content=FAILURE_BODY)

    return ChatResponse(reply=outcome.reply, escalate=outcome.escalate)
