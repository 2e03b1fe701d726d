"""
Configuration module for the Telecom Customer Care Assistant.

This module handles:
- Environment variable loading from .env file
- API key management (OpenAI)
- Store location, server address and the fixed UI/prompt phrases
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Data directory holding the SQLite store
DATA_DIR = PROJECT_ROOT / "data"

DB_PATH = Path(os.getenv("CAREBOT_DB_PATH", str(DATA_DIR / "carebot.db")))

# =============================================================================
# API KEYS (loaded from environment)
# =============================================================================

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# Lower temperature keeps answers close to the customer data
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.3"))
GENERATION_MAX_TOKENS = int(os.getenv("GENERATION_MAX_TOKENS", "800"))

# =============================================================================
# SERVER / CONSOLE CONFIGURATION
# =============================================================================

SERVER_HOST = os.getenv("CAREBOT_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("CAREBOT_PORT", "8000"))

# Base URL the console uses to reach the HTTP API
API_BASE_URL = os.getenv("CAREBOT_API_URL", f"http://{SERVER_HOST}:{SERVER_PORT}")

# =============================================================================
# ASSISTANT PERSONA & FIXED PHRASES
# =============================================================================

COMPANY_NAME = os.getenv("CAREBOT_COMPANY_NAME", "Odido")

# The sentence the assistant must use when a human agent is needed.
# The console looks for ESCALATION_SENTINEL to offer the "Call Now" action.
ESCALATION_SENTINEL = "Would you like to call now?"
ESCALATION_PHRASE = (
    "This issue requires assistance from a customer service agent. "
    + ESCALATION_SENTINEL
)

GREETING_MESSAGE = "Hello! How can I assist you today?"

# Sent by the "Need Help Understanding?" action under invoice replies
HELP_REQUEST = "I don't understand my invoice. Can you explain it in simpler terms?"

APOLOGY_MESSAGE = (
    "Sorry, I'm having trouble connecting to the server. Please try again "
    "later or contact our support team directly."
)

# Incident descriptions longer than this are cut in the support history tab
DESCRIPTION_PREVIEW_CHARS = 40


# =============================================================================
# STATUS VALUES
# =============================================================================

class ChatStatus:
    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


# =============================================================================
# VALIDATION
# =============================================================================

def validate_config():
    """Validate that required environment variables are set."""
    errors = []

    if not OPENAI_API_KEY:
        errors.append("OPENAI_API_KEY is not set")

    if errors:
        raise ValueError(
            "Missing required environment variables:\n" +
            "\n".join(f"  - {e}" for e in errors) +
            "\n\nPlease set them in your .env file. See .env.example for reference."
        )
