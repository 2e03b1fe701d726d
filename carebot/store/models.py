"""
Domain records for the customer care store.

Rows come out of SQLite as ISO timestamp strings; these dataclasses carry
them as calendar dates ("YYYY-MM-DD"), which is what the console and the
prompt show. to_dict() produces the camelCase shape the HTTP API returns.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class OrderStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    PENDING = "Pending"


class IncidentStatus(str, Enum):
    OPEN = "Open"
    PENDING = "Pending"
    RESOLVED = "Resolved"


def coerce_status(enum_cls, value) -> Enum:
    """Return the enum member for a status, or raise ValueError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(
            f"Invalid {enum_cls.__name__} {value!r}; expected one of: {allowed}"
        ) from None


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO 8601 date or timestamp, accepting a trailing "Z"."""
    text = text.strip()
    # fromisoformat() before 3.11 rejects the "Z" suffix
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date: {text!r}, expected ISO 8601") from None


def to_calendar_date(value: Union[str, date, datetime, None]) -> Optional[str]:
    """
    Normalize a stored timestamp to a "YYYY-MM-DD" string.

    Offset-aware timestamps are converted to UTC first. Naive ones keep
    their own date, whatever the time of day.
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        value = parse_timestamp(value)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()

    return value.isoformat()


@dataclass
class Order:
    order_id: str
    product_name: str
    plan: str
    status: str
    date: Optional[str]
    in_service_date: Optional[str] = None
    out_service_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "productName": self.product_name,
            "plan": self.plan,
            "status": self.status,
            "date": self.date,
            "inServiceDate": self.in_service_date,
            "outServiceDate": self.out_service_date,
        }


@dataclass
class Incident:
    incident_id: str
    description: str
    status: str
    date: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "incidentId": self.incident_id,
            "date": self.date,
            "description": self.description,
            "status": self.status,
        }


@dataclass
class Invoice:
    invoice_id: int
    order_id: str
    period_start_date: Optional[str]
    period_end_date: Optional[str]
    price: str
    adjustment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "orderId": self.order_id,
            "periodStartDate": self.period_start_date,
            "periodEndDate": self.period_end_date,
            "price": self.price,
            "adjustment": self.adjustment,
        }


@dataclass
class CustomerSummary:
    """The subset of a customer shown in the customer selector."""
    id: str
    name: str
    phone_number: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "phoneNumber": self.phone_number}


@dataclass
class CustomerRecord:
    """A customer plus everything attached to them."""
    id: str
    name: str
    phone_number: str
    email: Optional[str] = None
    orders: List[Order] = field(default_factory=list)
    incidents: List[Incident] = field(default_factory=list)
    invoices: List[Invoice] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phoneNumber": self.phone_number,
            "email": self.email,
            "orders": [o.to_dict() for o in self.orders],
            "incidents": [i.to_dict() for i in self.incidents],
            "invoices": [inv.to_dict() for inv in self.invoices],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomerRecord":
        """Rebuild a record from the API's JSON shape (used by the console)."""
        return cls(
            id=data["id"],
            name=data["name"],
            phone_number=data["phoneNumber"],
            email=data.get("email"),
            orders=[
                Order(
                    order_id=o["orderId"],
                    product_name=o.get("productName") or o.get("plan", ""),
                    plan=o.get("plan", ""),
                    status=o["status"],
                    date=o.get("date"),
                    in_service_date=o.get("inServiceDate"),
                    out_service_date=o.get("outServiceDate"),
                )
                for o in data.get("orders", [])
            ],
            incidents=[
                Incident(
                    incident_id=i["incidentId"],
                    description=i["description"],
                    status=i["status"],
                    date=i.get("date"),
                )
                for i in data.get("incidents", [])
            ],
            invoices=[
                Invoice(
                    invoice_id=inv.get("invoiceId", 0),
                    order_id=inv["orderId"],
                    period_start_date=inv.get("periodStartDate"),
                    period_end_date=inv.get("periodEndDate"),
                    price=inv["price"],
                    adjustment=inv.get("adjustment"),
                )
                for inv in data.get("invoices", [])
            ],
        )
