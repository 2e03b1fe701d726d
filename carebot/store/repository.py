"""
CustomerRepository - typed data access for the customer care store.

Every operation is a single lookup, insert or update against the tables in
carebot.store.database. There is no caching and no transaction spanning
more than one entity. Rows are reshaped into the dataclasses from
carebot.store.models with dates normalized to calendar dates.
"""

import random
import sqlite3
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

from carebot.store.database import Database, StoreError
from carebot.store.models import (
    CustomerRecord,
    CustomerSummary,
    Incident,
    IncidentStatus,
    Invoice,
    Order,
    OrderStatus,
    coerce_status,
    parse_timestamp,
    to_calendar_date,
)
from carebot.utils.logging import get_logger

logger = get_logger("repository")

DateLike = Union[str, date, datetime, None]

# Attempts at drawing an unused ORD####/INC#### identifier
MAX_ID_ATTEMPTS = 50


class CustomerNotFoundError(LookupError):
    """The external customer identifier does not exist."""


class OrderNotFoundError(LookupError):
    """The order does not exist or belongs to another customer."""


def _to_iso(value: DateLike) -> Optional[str]:
    """Validate a date input and return it in the stored ISO form."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, str):
        parse_timestamp(value)
        return value.strip()
    raise ValueError(f"Invalid date: {value!r}, expected ISO 8601")


def _to_money(value) -> str:
    """Normalize a monetary amount to a two-decimal string."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid monetary amount: {value!r}") from None
    return str(amount.quantize(Decimal("0.01")))


class CustomerRepository:
    """
    Data access for customers and their orders, incidents and invoices.

    Usage:
        repo = CustomerRepository(database)
        customer_id = repo.create_customer("John Doe", "0612345678")
        repo.add_order(customer_id, "Unlimited 5G", OrderStatus.ACTIVE)
        record = repo.get_customer(customer_id)
    """

    def __init__(self, database: Database):
        self.database = database

    # =========================================================================
    # READS
    # =========================================================================

    def list_customers(self) -> List[CustomerSummary]:
        """Get id, name and phone number of every customer."""
        with self.database.connect() as conn:
            rows = conn.execute(
                "SELECT external_id, name, phone_number FROM users ORDER BY id"
            ).fetchall()
        return [
            CustomerSummary(id=r["external_id"], name=r["name"], phone_number=r["phone_number"])
            for r in rows
        ]

    def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        """
        Get a customer with all of their orders, incidents and invoices.

        Args:
            customer_id: The customer's external identifier

        Returns:
            CustomerRecord if found, None otherwise
        """
        with self.database.connect() as conn:
            user = conn.execute(
                "SELECT * FROM users WHERE external_id = ?",
                (customer_id,)
            ).fetchone()

            if user is None:
                return None

            order_rows = conn.execute(
                "SELECT order_id, product_name, plan, status, date, "
                "in_service_date, out_service_date "
                "FROM orders WHERE user_id = ? ORDER BY id",
                (user["id"],)
            ).fetchall()

            incident_rows = conn.execute(
                "SELECT incident_id, description, status, date "
                "FROM incidents WHERE user_id = ? ORDER BY id",
                (user["id"],)
            ).fetchall()

            invoice_rows = conn.execute(
                "SELECT inv.id, o.order_id AS order_ref, inv.period_start_date, "
                "inv.period_end_date, inv.price, inv.adjustment "
                "FROM invoices inv JOIN orders o ON o.id = inv.order_id "
                "WHERE inv.user_id = ? ORDER BY inv.period_start_date, inv.id",
                (user["id"],)
            ).fetchall()

        return CustomerRecord(
            id=user["external_id"],
            name=user["name"],
            phone_number=user["phone_number"],
            email=user["email"],
            orders=[
                Order(
                    order_id=r["order_id"],
                    product_name=r["product_name"],
                    plan=r["plan"],
                    status=r["status"],
                    date=to_calendar_date(r["date"]),
                    in_service_date=to_calendar_date(r["in_service_date"]),
                    out_service_date=to_calendar_date(r["out_service_date"]),
                )
                for r in order_rows
            ],
            incidents=[
                Incident(
                    incident_id=r["incident_id"],
                    description=r["description"],
                    status=r["status"],
                    date=to_calendar_date(r["date"]),
                )
                for r in incident_rows
            ],
            invoices=[
                Invoice(
                    invoice_id=r["id"],
                    order_id=r["order_ref"],
                    period_start_date=to_calendar_date(r["period_start_date"]),
                    period_end_date=to_calendar_date(r["period_end_date"]),
                    price=r["price"],
                    adjustment=r["adjustment"],
                )
                for r in invoice_rows
            ],
        )

    # =========================================================================
    # INSERTS
    # =========================================================================

    def create_customer(
        self,
        name: str,
        phone_number: str,
        email: Optional[str] = None
    ) -> str:
        """Insert a customer and return their new external identifier."""
        external_id = str(uuid.uuid4())
        now = datetime.now().isoformat()

        with self.database.connect() as conn:
            conn.execute(
                "INSERT INTO users (external_id, name, email, phone_number, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (external_id, name, email, phone_number, now)
            )

        logger.info(f"Created customer {name} ({external_id})")
        return external_id

    def add_order(
        self,
        customer_id: str,
        plan: str,
        status: Union[OrderStatus, str],
        product_name: Optional[str] = None,
        ordered_at: DateLike = None,
        in_service_date: DateLike = None,
        out_service_date: DateLike = None,
    ) -> str:
        """
        Add an order for a customer.

        Raises:
            CustomerNotFoundError: the customer does not exist (nothing is written)
            ValueError: the status is not an OrderStatus value or a date is not ISO 8601
        """
        status = coerce_status(OrderStatus, status)
        ordered_at = _to_iso(ordered_at or datetime.now())
        in_service_date = _to_iso(in_service_date)
        out_service_date = _to_iso(out_service_date)

        with self.database.connect() as conn:
            user_pk = self._require_customer(conn, customer_id)
            order_id = self._draw_identifier(conn, "orders", "order_id", "ORD")
            conn.execute(
                "INSERT INTO orders (order_id, user_id, product_name, plan, status, date, "
                "in_service_date, out_service_date, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    order_id,
                    user_pk,
                    product_name or plan,
                    plan,
                    status.value,
                    ordered_at,
                    in_service_date,
                    out_service_date,
                    datetime.now().isoformat(),
                )
            )

        logger.info(f"Added order {order_id} ({plan}, {status.value}) for {customer_id}")
        return order_id

    def add_incident(
        self,
        customer_id: str,
        description: str,
        status: Union[IncidentStatus, str],
        reported_at: DateLike = None,
    ) -> str:
        """
        Add a support incident for a customer.

        Raises:
            CustomerNotFoundError: the customer does not exist (nothing is written)
            ValueError: the status is not an IncidentStatus value or the date is not ISO 8601
        """
        status = coerce_status(IncidentStatus, status)
        reported_at = _to_iso(reported_at or datetime.now())

        with self.database.connect() as conn:
            user_pk = self._require_customer(conn, customer_id)
            incident_id = self._draw_identifier(conn, "incidents", "incident_id", "INC")
            conn.execute(
                "INSERT INTO incidents (incident_id, user_id, date, description, status, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    incident_id,
                    user_pk,
                    reported_at,
                    description,
                    status.value,
                    datetime.now().isoformat(),
                )
            )

        logger.info(f"Added incident {incident_id} ({status.value}) for {customer_id}")
        return incident_id

    def add_invoice(
        self,
        customer_id: str,
        order_id: str,
        period_start: DateLike,
        period_end: DateLike,
        price,
        adjustment=None,
    ) -> int:
        """
        Add an invoice for one of a customer's orders.

        Args:
            customer_id: The customer's external identifier
            order_id: Business identifier of the billed order (e.g. "ORD1234")
            period_start / period_end: Billing period
            price: Amount for the period, e.g. "35.00"
            adjustment: Optional credit (negative) or surcharge (positive)

        Returns:
            The new invoice's row id
        """
        price = _to_money(price)
        adjustment = _to_money(adjustment) if adjustment is not None else None
        period_start = _to_iso(period_start)
        period_end = _to_iso(period_end)

        with self.database.connect() as conn:
            user_pk = self._require_customer(conn, customer_id)
            order = conn.execute(
                "SELECT id FROM orders WHERE order_id = ? AND user_id = ?",
                (order_id, user_pk)
            ).fetchone()
            if order is None:
                raise OrderNotFoundError(
                    f"Order {order_id} not found for customer {customer_id}"
                )

            cursor = conn.execute(
                "INSERT INTO invoices (user_id, order_id, period_start_date, period_end_date, "
                "price, adjustment) VALUES (?, ?, ?, ?, ?, ?)",
                (user_pk, order["id"], period_start, period_end, price, adjustment)
            )
            invoice_id = cursor.lastrowid

        logger.info(f"Added invoice {invoice_id} for order {order_id}")
        return invoice_id

    # =========================================================================
    # UPDATES
    # =========================================================================

    def update_order_status(self, order_id: str, status: Union[OrderStatus, str]) -> bool:
        """Set an order's status. Returns False if the order id is unknown."""
        status = coerce_status(OrderStatus, status)
        with self.database.connect() as conn:
            cursor = conn.execute(
                "UPDATE orders SET status = ? WHERE order_id = ?",
                (status.value, order_id)
            )
        updated = cursor.rowcount > 0
        if not updated:
            logger.warning(f"Order {order_id} not found; status unchanged")
        return updated

    def update_incident_status(
        self,
        incident_id: str,
        status: Union[IncidentStatus, str]
    ) -> bool:
        """Set an incident's status. Returns False if the incident id is unknown."""
        status = coerce_status(IncidentStatus, status)
        with self.database.connect() as conn:
            cursor = conn.execute(
                "UPDATE incidents SET status = ? WHERE incident_id = ?",
                (status.value, incident_id)
            )
        updated = cursor.rowcount > 0
        if not updated:
            logger.warning(f"Incident {incident_id} not found; status unchanged")
        return updated

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _require_customer(conn: sqlite3.Connection, customer_id: str) -> int:
        row = conn.execute(
            "SELECT id FROM users WHERE external_id = ?",
            (customer_id,)
        ).fetchone()
        if row is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")
        return row["id"]

    @staticmethod
    def _draw_identifier(conn: sqlite3.Connection, table: str, column: str, prefix: str) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = f"{prefix}{random.randint(1000, 9999)}"
            taken = conn.execute(
                f"SELECT 1 FROM {table} WHERE {column} = ?",
                (candidate,)
            ).fetchone()
            if taken is None:
                return candidate
        raise StoreError(f"Could not draw an unused {prefix} identifier")
