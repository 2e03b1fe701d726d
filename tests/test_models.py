"""
Tests for record shaping and date normalization
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from carebot.store.models import (
    CustomerRecord,
    IncidentStatus,
    OrderStatus,
    coerce_status,
    to_calendar_date,
)


@pytest.mark.parametrize("value", [
    "2025-01-15T00:00:00",
    "2025-01-15T09:41:12.123456",
    "2025-01-15T23:59:59",
    "2025-01-15",
    datetime(2025, 1, 15, 18, 5),
    date(2025, 1, 15),
])
def test_calendar_date_ignores_time_of_day(value):
    assert to_calendar_date(value) == "2025-01-15"


def test_aware_timestamps_use_utc_date():
    just_after_midnight_amsterdam = datetime(2025, 1, 15, 0, 30, tzinfo=timezone(timedelta(hours=1)))

    assert to_calendar_date(just_after_midnight_amsterdam) == "2025-01-14"
    assert to_calendar_date("2025-01-15T10:00:00Z") == "2025-01-15"


def test_missing_dates_stay_missing():
    assert to_calendar_date(None) is None
    assert to_calendar_date("") is None


def test_coerce_status():
    assert coerce_status(OrderStatus, "Active") is OrderStatus.ACTIVE
    assert coerce_status(IncidentStatus, IncidentStatus.RESOLVED) is IncidentStatus.RESOLVED
    with pytest.raises(ValueError, match="Open, Pending, Resolved"):
        coerce_status(IncidentStatus, "open")


def test_record_round_trips_through_api_shape():
    payload = {
        "id": "abc",
        "name": "Jane Smith",
        "phoneNumber": "0698765432",
        "email": None,
        "orders": [{
            "orderId": "ORD1234", "productName": "Family Plan 10GB", "plan": "Family Plan 10GB",
            "status": "Active", "date": "2024-11-02", "inServiceDate": "2024-11-05",
            "outServiceDate": None,
        }],
        "incidents": [{
            "incidentId": "INC1234", "date": "2025-03-27",
            "description": "Slow internet speed at home", "status": "Open",
        }],
        "invoices": [{
            "invoiceId": 1, "orderId": "ORD1234", "periodStartDate": "2025-02-05",
            "periodEndDate": "2025-03-04", "price": "45.00", "adjustment": None,
        }],
    }

    assert CustomerRecord.from_dict(payload).to_dict() == payload
