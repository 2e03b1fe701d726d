"""Presentational helpers for the support console."""
from .panels import ChatMessage, ChatTranscript, active_plan, render_customer_panel

__all__ = ["ChatMessage", "ChatTranscript", "active_plan", "render_customer_panel"]
