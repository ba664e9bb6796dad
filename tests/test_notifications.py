"""Per-role feed builders over the backend's domain endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
import requests

from sf_dashboard.notifications import NotificationService, build_feed
from sf_dashboard.roles import Role

from conftest import make_response

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(api):
    return NotificationService(api, clock=lambda: NOW)


def _iso(dt):
    return dt.isoformat()


def test_build_feed_sorts_newest_first_and_dedupes():
    feed = build_feed([
        {"id": "a", "message": "old", "timestamp": "2025-01-01T00:00:00Z"},
        {"id": "b", "message": "new", "timestamp": "2025-03-01T00:00:00Z"},
        {"id": "a", "message": "dup", "timestamp": "2025-05-01T00:00:00Z"},
        {"id": "c", "message": "undated"},
        {"id": None, "message": "no id"},
    ])
    assert [n.id for n in feed] == ["b", "a", "c"]
    assert feed[1].message == "old"
    assert all(n.read is False for n in feed)


def test_district_feed(service, http):
    http.on("GET", "/respondDistrict/districtRequest/d-1", make_response(200, [
        {"id": "r1", "requestStatus": "PENDING", "school": {"name": "Nonko"},
         "requestItemDetails": [{}, {}], "created": "2025-05-30T08:00:00Z"},
        {"id": "r2", "requestStatus": "APPROVED", "school": {"name": "Kinyinya"}},
    ]))
    http.on("GET", "/districtDelivery/deliveriesByDistrict/d-1", make_response(200, [
        {"id": "o1", "deliveryStatus": "IN_TRANSIT", "supplier": {"companyName": "Agri Ltd"},
         "updated": "2025-05-31T08:00:00Z"},
        {"id": "o2", "deliveryStatus": "APPROVED"},
    ]))

    feed = service.fetch(Role.DISTRICT, "d-1")

    assert [(n.id, n.message) for n in feed] == [
        ("o1", "Agri Ltd changed order status to in transit"),
        ("r1", "Nonko requested 2 item(s)"),
    ]
    assert {n.link for n in feed} == {"/district-approvals"}


def test_school_feed_tolerates_missing_tracking(service, http):
    http.on("GET", "/requestRequestItem/schoolRequest/sch-1", make_response(200, [
        {"id": "r1", "requestStatus": "APPROVED", "updated": "2025-05-30T08:00:00Z"},
        {"id": "r2", "requestStatus": "PENDING"},
    ]))

    feed = service.fetch(Role.SCHOOL, "sch-1")

    assert [n.message for n in feed] == ["Your request status changed to approved"]
    assert feed[0].link == "/request-food-list"


def test_supplier_feed_assignments_and_payments(service, http):
    http.on("GET", "/supplierOrder/all/u-1", make_response(200, [
        {"id": "abcdef123456", "deliveryStatus": "SCHEDULED", "orderPayState": "PAYED",
         "requestItem": {"district": {"district": "Gasabo"}},
         "created": "2025-05-01T00:00:00Z", "updated": "2025-05-20T00:00:00Z"},
        {"id": "o2", "deliveryStatus": "DELIVERED"},
    ]))

    feed = service.fetch(Role.SUPPLIER, "u-1")

    assert [(n.id, n.type) for n in feed] == [("payment-abcdef123456", "payment"), ("abcdef123456", "order_assigned")]
    assert feed[0].message == "Payment received for order #abcdef12"
    assert feed[1].message == "New order assigned from Gasabo"


def test_government_feed_is_empty(service, http):
    assert service.fetch(Role.GOVERNMENT) == []
    assert http.calls == []


def test_admin_feed_only_recent_accounts(service, http):
    http.on("GET", "/users/all", make_response(200, [
        {"id": "u1", "names": "New Person", "created": _iso(NOW - timedelta(days=2))},
        {"id": "u2", "names": "Old Person", "created": _iso(NOW - timedelta(days=30))},
        {"id": "u3", "names": "No Date"},
    ]))

    feed = service.fetch(Role.ADMIN)

    assert [n.message for n in feed] == ["New account created: New Person"]


def test_stock_feed_low_stock_and_expiry(service, http):
    http.on("GET", "/inventory/all/sch-1", make_response(200, [
        {"id": "i1", "quantity": 10, "item": {"name": "Beans", "perStudent": 1}, "school": {"student": 100},
         "expiryDate": _iso(NOW + timedelta(days=5, hours=1))},
        {"id": "i2", "quantity": 90, "item": {"name": "Rice", "perStudent": 1}, "school": {"student": 100},
         "expiryDate": _iso(NOW + timedelta(days=90))},
        {"id": "i3", "quantity": 5, "item": {"name": "Maize", "perStudent": 1}, "school": {"student": 0}},
    ]))
    http.on("GET", "/receiving/all/sch-1", make_response(200, [
        {"id": "o1", "deliveryStatus": "DELIVERED", "supplier": {"names": "Jean"}},
    ]))

    feed = service.fetch(Role.STOCK, "sch-1")
    messages = {n.id: n.message for n in feed}

    assert messages == {
        "low-stock-i1": "Low stock alert: Beans (10% remaining)",
        "expiry-i1": "Beans expires in 6 day(s)",
        "o1": "Jean changed order status to delivered",
    }


def test_server_errors_propagate(service, http):
    http.on("GET", "/users/all", make_response(500, {"message": "boom"}))
    with pytest.raises(requests.HTTPError):
        service.fetch(Role.ADMIN)


def test_non_list_payload_is_empty(service, http):
    http.on("GET", "/users/all", make_response(200, {"unexpected": True}))
    assert service.fetch(Role.ADMIN) == []


def test_failing_source_does_not_hide_the_other(service, http):
    http.on("GET", "/respondDistrict/districtRequest/d-1", make_response(500, {"message": "boom"}))
    http.on("GET", "/districtDelivery/deliveriesByDistrict/d-1", make_response(200, [
        {"id": "o1", "deliveryStatus": "IN_TRANSIT"},
    ]))

    feed = service.fetch(Role.DISTRICT, "d-1")

    assert [(n.id, n.message) for n in feed] == [("o1", "A supplier changed order status to in transit")]


def test_stock_feed_survives_receiving_outage(service, http):
    http.on("GET", "/inventory/all/sch-1", make_response(200, [
        {"id": "i1", "quantity": 1, "item": {"name": "Beans", "perStudent": 1}, "school": {"student": 100}},
    ]))
    http.on("GET", "/receiving/all/sch-1", requests.ConnectionError("reset"))

    feed = service.fetch(Role.STOCK, "sch-1")

    assert [n.id for n in feed] == ["low-stock-i1"]


def test_error_propagates_when_every_source_fails(service, http):
    http.on("GET", "/requestRequestItem/schoolRequest/sch-1", make_response(503, {"message": "down"}))
    http.on("GET", "/track/current/sch-1", requests.Timeout("slow"))

    with pytest.raises(requests.Timeout):
        service.fetch(Role.SCHOOL, "sch-1")
