"""
Logging utility for the Telecom Customer Care Assistant.

Provides structured logging with:
- Color-coded console output
- Component-specific logger names under the "carebot" root
- Trace printing for the console's view of a chat request
"""

import logging
import sys
from typing import Optional


# ANSI color codes for console output
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"

    # Speaker colors
    AGENT = "\033[94m"       # Blue
    CUSTOMER = "\033[92m"    # Green
    SYSTEM = "\033[95m"      # Magenta

    # Status colors
    SUCCESS = "\033[92m"     # Green
    WARNING = "\033[93m"     # Yellow
    ERROR = "\033[91m"       # Red
    INFO = "\033[96m"        # Cyan


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors based on log level."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.INFO,
        logging.INFO: Colors.RESET,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.ERROR + Colors.BOLD,
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        formatted = super().format(record)
        return f"{color}{formatted}{Colors.RESET}"


def setup_logging(level: int = logging.INFO) -> None:
    """
    Set up logging for the application.

    Args:
        level: Logging level (default: INFO)
    """
    root_logger = logging.getLogger("carebot")
    root_logger.setLevel(level)

    # Remove existing handlers so repeated setup doesn't double output
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    formatter = ColoredFormatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    console_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (e.g., "repository", "api")

    Returns:
        Logger instance named "carebot.<name>"
    """
    return logging.getLogger(f"carebot.{name}")


# =============================================================================
# TRACE PRINTING UTILITIES
# =============================================================================

def print_trace_header(title: str) -> None:
    """Print a formatted header for trace output."""
    width = 60
    print("\n" + "=" * width)
    print(f"{Colors.BOLD}{title.center(width)}{Colors.RESET}")
    print("=" * width)


def print_step(speaker: str, text: str, details: Optional[str] = None) -> None:
    """
    Print one line of console output attributed to a speaker.

    Args:
        speaker: "Support Bot", "You" or "System"
        text: What was said or done
        details: Optional indented lines printed underneath
    """
    speaker_colors = {
        "Support Bot": Colors.AGENT,
        "You": Colors.CUSTOMER,
        "System": Colors.SYSTEM,
    }
    color = speaker_colors.get(speaker, Colors.RESET)

    print(f"\n{color}> [{speaker}]{Colors.RESET} {text}")
    if details:
        for line in details.split("\n"):
            print(f"  {line}")


def print_decision(decision: str, approved: bool = True) -> None:
    """Print an outcome line (e.g. an action the agent can take)."""
    if approved:
        icon = "[OK]"
        color = Colors.SUCCESS
    else:
        icon = "[!]"
        color = Colors.WARNING

    print(f"{color}{icon} {decision}{Colors.RESET}")
