"""Shared fixtures: a scripted executor, outbound fakes and a wired TestClient."""


from collections.abc import Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.core import security
from app.core.security import Principal, get_token_verifier
from app.db.executor import get_executor
from app.main import app
from app.services.storage import PresignedUrl, StoredObject

ALL_PERMISSIONS = frozenset(
    {
        security.VEHICLE_ACCESS, security.VEHICLE_CREATE, security.VEHICLE_EDIT,
        security.VEHICLE_DELETE, security.SHIPPING_ACCESS, security.SHIPPING_EDIT,
        security.SALES_ACCESS, security.SALES_EDIT, security.FINANCIAL_ACCESS,
        security.FINANCIAL_EDIT, security.PURCHASE_ACCESS, security.PURCHASE_EDIT,
    }
)


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

class FakeExecutor:
    """Executor that answers from scripted rules instead of a database.

    ``on(fragment, rows=..., rowcount=...)`` registers a rule; the first rule
    whose fragment occurs in the SQL answers. Rules registered with
    ``once=True`` are consumed after one use. Every call is recorded in
    ``calls`` and transaction outcomes in ``events``. Setting ``fail_on`` makes
    any statement containing that fragment raise ``fail_with`` (or RuntimeError).
    """

    def __init__(self) -> None:
        self.rules: list[dict[str, Any]] = []
        self.calls: list[tuple[str, tuple]] = []
        self.events: list[str] = []
        self.fail_on: str | None = None
        self.fail_with: Exception | None = None

    def on(self, fragment: str, rows: Iterable[dict] | None = None, rowcount: int = 1, once: bool = False):
        self.rules.append(
            {"fragment": fragment, "rows": list(rows or []), "rowcount": rowcount, "once": once}
        )
        return self

    def _match(self, sql: str, args: tuple) -> dict[str, Any] | None:
        self.calls.append((sql, args))
        if self.fail_on and self.fail_on in sql:
            raise self.fail_with or RuntimeError(f"scripted failure on {self.fail_on}")
        for rule in self.rules:
            if rule["fragment"] in sql:
                if rule["once"]:
                    self.rules.remove(rule)
                return rule
        return None

    async def exec(self, sql: str, *args: Any) -> int:
        rule = self._match(sql, args)
        return rule["rowcount"] if rule else 1

    async def query_row(self, sql: str, *args: Any) -> dict | None:
        rule = self._match(sql, args)
        if rule and rule["rows"]:
            return dict(rule["rows"][0])
        return None

    async def query(self, sql: str, *args: Any) -> list[dict]:
        rule = self._match(sql, args)
        return [dict(r) for r in rule["rows"]] if rule else []

    @asynccontextmanager
    async def transaction(self):
        self.events.append("begin")
        try:
            yield self
        except BaseException:
            self.events.append("rollback")
            raise
        self.events.append("commit")

    def statements(self, fragment: str) -> list[tuple[str, tuple]]:
        return [(sql, args) for sql, args in self.calls if fragment in sql]


# ---------------------------------------------------------------------------
# Outbound fakes
# ---------------------------------------------------------------------------

class FakeNotifier:
    def __init__(self) -> None:
        self.published: list[Any] = []

    def publish(self, request, authorization: str = "") -> None:
        self.published.append(request)

    def types(self) -> list[str]:
        return [r.notification_type for r in self.published]


class FakeMailer:
    def __init__(self) -> None:
        self.shipping: list[Any] = []
        self.purchase: list[Any] = []

    def publish_shipping_status(self, email, authorization: str = "") -> None:
        self.shipping.append(email)

    def publish_purchase_status(self, email, authorization: str = "") -> None:
        self.purchase.append(email)


class FakeStorage:
    """In-memory object store; names listed in ``fail`` raise on upload."""

    def __init__(self, fail: Iterable[str] = ()) -> None:
        self.objects: dict[str, bytes] = {}
        self.fail = set(fail)
        self._counter = 0

    @property
    def enabled(self) -> bool:
        return True

    async def upload(self, prefix: str, original_name: str, body: bytes, content_type: str) -> StoredObject:
        from app.core.exceptions import ExternalServiceError

        if original_name in self.fail:
            raise ExternalServiceError(f"Failed to upload {original_name}")
        self._counter += 1
        key = f"{prefix}/obj{self._counter}_{original_name}"
        self.objects[key] = body
        return StoredObject(key=key, size=len(body), content_type=content_type)

    async def presign(self, key: str, ttl_minutes: int | None = None) -> PresignedUrl:
        return PresignedUrl(
            key=key,
            url=f"https://cdn.test/{key}?sig=1",
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=15),
        )

    async def exists(self, key: str) -> bool:
        return key in self.objects

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)


class FakeVerifier:
    def __init__(self, permissions: frozenset[str] = ALL_PERMISSIONS) -> None:
        self.permissions = permissions

    async def authenticate(self, authorization: str | None) -> Principal:
        if not authorization:
            from app.core.exceptions import UnauthorizedError

            raise UnauthorizedError("Missing authorization header")
        return Principal(user_id="user-1", permissions=self.permissions, authorization=authorization)


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

def vehicle_row(vehicle_id: int = 1, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": vehicle_id,
        "code": 1000 + vehicle_id,
        "make": "Toyota",
        "make_id": None,
        "model": "Prius",
        "year_of_manufacture": 2018,
        "color": "White",
        "mileage_km": 42000,
        "chassis_id": f"ZVW30-{vehicle_id:05d}",
        "condition_status": "UNREGISTERED",
        "currency": "JPY",
        "is_featured": False,
    }
    row.update(overrides)
    return row


def customer_row(customer_id: int = 7, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": customer_id,
        "customer_name": "Nimal Perera",
        "contact_number": "0771234567",
        "email": "nimal@example.com",
        "customer_type": "INDIVIDUAL",
        "is_active": True,
    }
    row.update(overrides)
    return row


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def store() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def actor() -> Principal:
    return Principal(user_id="user-1", permissions=ALL_PERMISSIONS, authorization="Bearer t")


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def client(db, notifier, mailer, store, verifier, monkeypatch):
    """TestClient with the executor, token verifier and outbound services replaced."""
    for module in ("app.services.vehicle", "app.services.party"):
        monkeypatch.setattr(f"{module}.notification_service", notifier)
    monkeypatch.setattr("app.services.vehicle.email_service", mailer)
    for module in ("app.services.vehicle", "app.services.share", "app.services.catalog"):
        monkeypatch.setattr(f"{module}.storage", store)

    app.dependency_overrides[get_executor] = lambda: db
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


AUTH = {"Authorization": "Bearer test-token"}
