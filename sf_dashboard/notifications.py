"""
Role-scoped notification feeds, derived from the backend's domain endpoints.

    district   pending school requests + supplier delivery status changes
    school     request status changes + delivery status changes
    supplier   newly assigned orders + payments received
    government nothing yet (no backend source)
    admin      accounts created in the last 7 days
    stock      low stock, near expiry, receiving status changes

Each builder returns a de-duplicated list, newest first. Every source
endpoint is fetched on its own: a failing source is logged and contributes
nothing, and the error reaches the caller (the poller) only when every
source of the role failed. 404 on the delivery tracking endpoints only
means "nothing scheduled yet".
"""

import logging
import math
from datetime import datetime, timedelta, timezone

import requests
from pydantic import ValidationError

from sf_dashboard.models import Notification
from sf_dashboard.roles import Role

logger = logging.getLogger("notifications")
logger.setLevel(logging.INFO)

RECENT_ACCOUNT_DAYS = 7
EXPIRY_WINDOW_DAYS = 30
LOW_STOCK_PERCENT = 20


# ────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────

def _status_text(status: str) -> str:
    """IN_TRANSIT → in transit (first underscore only)."""
    return status.lower().replace("_", " ", 1)


def _supplier_name(order: dict, default: str) -> str:
    supplier = order.get("supplier") or {}
    return supplier.get("companyName") or supplier.get("names") or default


def _parse_time(value) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _aware(dt: datetime) -> datetime:
    """Treat naive backend timestamps as local time."""
    return dt if dt.tzinfo is not None else dt.astimezone()


def _sort_key(n: Notification) -> float:
    return n.timestamp.timestamp() if n.timestamp is not None else 0.0


def build_feed(entries: list[dict]) -> list[Notification]:
    """Validate raw entries, drop duplicates by id (first wins), newest first."""
    seen: set[str] = set()
    feed: list[Notification] = []
    for entry in entries:
        entry = {**entry, "timestamp": _parse_time(entry.get("timestamp"))}
        try:
            n = Notification.model_validate(entry)
        except ValidationError as exc:
            logger.warning("Notification skipped: %s", exc)
            continue
        if n.id in seen:
            continue
        seen.add(n.id)
        feed.append(n)
    return sorted(feed, key=_sort_key, reverse=True)


# ════════════════════════════════════════════
# Service
# ════════════════════════════════════════════

class NotificationService:
    """Fetches and shapes notification feeds through an ApiClient."""

    def __init__(self, api, clock=None):
        self._api = api
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def fetch(self, role: Role, scope_id: str | None = None) -> list[Notification]:
        if role == Role.DISTRICT:
            return self.district(scope_id)
        if role == Role.SCHOOL:
            return self.school(scope_id)
        if role == Role.SUPPLIER:
            return self.supplier(scope_id)
        if role == Role.GOVERNMENT:
            return self.government()
        if role == Role.ADMIN:
            return self.admin()
        if role == Role.STOCK:
            return self.stock(scope_id)
        return []

    def _list(self, path: str, missing_ok: bool = False) -> list:
        try:
            data = self._api.get_json(path)
        except requests.exceptions.HTTPError as exc:
            if missing_ok and exc.response is not None and exc.response.status_code == 404:
                return []
            raise
        return data if isinstance(data, list) else []

    def _sources(self, *specs: tuple[str, bool]) -> list[list]:
        """Fetch each (path, missing_ok) source independently.

        A failed source yields []; the last error is re-raised only when all
        sources failed.
        """
        results, failures = [], []
        for path, missing_ok in specs:
            try:
                results.append(self._list(path, missing_ok=missing_ok))
            except requests.exceptions.RequestException as exc:
                logger.warning("Notification source %s failed: %s", path, exc)
                failures.append(exc)
                results.append([])
        if failures and len(failures) == len(specs):
            raise failures[-1]
        return results

    # ── district ──

    def district(self, district_id: str) -> list[Notification]:
        request_rows, orders = self._sources(
            (f"/respondDistrict/districtRequest/{district_id}", False),
            (f"/districtDelivery/deliveriesByDistrict/{district_id}", False),
        )
        entries = []
        for request in request_rows:
            if request.get("requestStatus") == "PENDING":
                school_name = (request.get("school") or {}).get("name") or "A school"
                items = len(request.get("requestItemDetails") or [])
                entries.append({
                    "id": request.get("id"),
                    "message": f"{school_name} requested {items} item(s)",
                    "type": "school_request",
                    "timestamp": request.get("created"),
                    "link": "/district-approvals",
                })

        for order in orders:
            status = order.get("deliveryStatus")
            if status and status != "APPROVED":
                entries.append({
                    "id": order.get("id"),
                    "message": f"{_supplier_name(order, 'A supplier')} changed order status to {_status_text(status)}",
                    "type": "order_status_change",
                    "timestamp": order.get("updated"),
                    "link": "/district-approvals",
                })
        return build_feed(entries)

    # ── school ──

    def school(self, school_id: str) -> list[Notification]:
        request_rows, orders = self._sources(
            (f"/requestRequestItem/schoolRequest/{school_id}", False),
            (f"/track/current/{school_id}", True),
        )
        entries = []
        for request in request_rows:
            status = request.get("requestStatus")
            if status and status != "PENDING":
                entries.append({
                    "id": request.get("id"),
                    "message": f"Your request status changed to {_status_text(status)}",
                    "type": "request_status_change",
                    "timestamp": request.get("updated"),
                    "link": "/request-food-list",
                })

        for order in orders:
            status = order.get("deliveryStatus")
            if status and status != "SCHEDULED":
                entries.append({
                    "id": order.get("id"),
                    "message": f"{_supplier_name(order, 'Supplier')} changed delivery status to {_status_text(status)}",
                    "type": "order_status_change",
                    "timestamp": order.get("updated"),
                    "link": "/track-delivery",
                })
        return build_feed(entries)

    # ── supplier ──

    def supplier(self, supplier_id: str) -> list[Notification]:
        entries = []
        (orders,) = self._sources((f"/supplierOrder/all/{supplier_id}", False))
        for order in orders:
            if order.get("deliveryStatus") in ("APPROVED", "SCHEDULED"):
                district = ((order.get("requestItem") or {}).get("district") or {}).get("district")
                entries.append({
                    "id": order.get("id"),
                    "message": f"New order assigned from {district or 'A district'}",
                    "type": "order_assigned",
                    "timestamp": order.get("created"),
                    "link": "/supplier-orders",
                })
            if order.get("orderPayState") == "PAYED":
                order_id = str(order.get("id") or "")
                entries.append({
                    "id": f"payment-{order_id}",
                    "message": f"Payment received for order #{order_id[:8] or 'N/A'}",
                    "type": "payment",
                    "timestamp": order.get("updated"),
                    "link": "/supplier-orders",
                })
        return build_feed(entries)

    # ── government ──

    def government(self) -> list[Notification]:
        return []

    # ── admin ──

    def admin(self) -> list[Notification]:
        cutoff = self._clock() - timedelta(days=RECENT_ACCOUNT_DAYS)
        entries = []
        (users,) = self._sources(("/users/all", False))
        for user in users:
            created = _parse_time(user.get("created"))
            if created is None or _aware(created) < cutoff:
                continue
            name = user.get("names") or user.get("name") or "New user"
            entries.append({
                "id": user.get("id"),
                "message": f"New account created: {name}",
                "type": "account_created",
                "timestamp": user.get("created"),
                "link": "/admin-users",
            })
        return build_feed(entries)

    # ── stock keeper ──

    def stock(self, school_id: str) -> list[Notification]:
        now = self._clock()
        horizon = now + timedelta(days=EXPIRY_WINDOW_DAYS)
        inventory, orders = self._sources(
            (f"/inventory/all/{school_id}", False),
            (f"/receiving/all/{school_id}", True),
        )
        entries = []

        for row in inventory:
            item = row.get("item") or {}
            item_name = item.get("name") or "Item"

            quantity = row.get("quantity")
            per_student = item.get("perStudent")
            if quantity and per_student:
                needed = per_student * ((row.get("school") or {}).get("student") or 0)
                if needed > 0:
                    percentage = quantity / needed * 100
                    if percentage < LOW_STOCK_PERCENT:
                        entries.append({
                            "id": f"low-stock-{row.get('id')}",
                            "message": f"Low stock alert: {item_name} ({percentage:.0f}% remaining)",
                            "type": "low_stock",
                            "timestamp": row.get("updated"),
                            "link": "/stock-inventory",
                        })

            expiry = _parse_time(row.get("expiryDate"))
            if expiry is not None and now < _aware(expiry) <= horizon:
                days = math.ceil((_aware(expiry) - now).total_seconds() / 86400)
                entries.append({
                    "id": f"expiry-{row.get('id')}",
                    "message": f"{item_name} expires in {days} day(s)",
                    "type": "near_expiry",
                    "timestamp": row.get("expiryDate"),
                    "link": "/stock-inventory",
                })

        for order in orders:
            status = order.get("deliveryStatus")
            if status and status != "SCHEDULED":
                entries.append({
                    "id": order.get("id"),
                    "message": f"{_supplier_name(order, 'Supplier')} changed order status to {_status_text(status)}",
                    "type": "order_status_change",
                    "timestamp": order.get("updated"),
                    "link": "/stock-receiving",
                })
        return build_feed(entries)
