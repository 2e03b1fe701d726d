"""
Store module for customer data.

This module provides:
- Database: SQLite handle with an explicit open/close lifecycle
- CustomerRepository: lookups, inserts and status updates
"""

from .database import Database, StoreError
from .models import CustomerRecord, CustomerSummary, IncidentStatus, OrderStatus
from .repository import CustomerNotFoundError, CustomerRepository, OrderNotFoundError

__all__ = [
    "Database",
    "StoreError",
    "CustomerRecord",
    "CustomerSummary",
    "IncidentStatus",
    "OrderStatus",
    "CustomerNotFoundError",
    "CustomerRepository",
    "OrderNotFoundError",
]
