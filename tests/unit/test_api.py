"""HTTP-level tests: auth, envelope and error mapping (DB dependency overridden)."""

from collections.abc import AsyncIterator, Iterator
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from src.cw_admin.api import router as admin_api
from src.cw_common.database import get_db_session
from src.cw_common.errors import InsufficientBalanceError
from src.cw_gateway.api import router as internal_api
from src.cw_gateway.auth.jwt_handler import create_access_token
from src.cw_gateway.user.schemas import RegisterUserResponse, UplineEdge
from src.cw_wallet.api import router as wallet_api
from src.cw_wallet.application.schemas import WalletResponse
from src.cw_wallet.domain.models import Wallet
from src.main import app


@pytest.fixture(autouse=True)
def fake_db() -> Iterator[AsyncMock]:
    db = AsyncMock()

    async def _override() -> AsyncIterator[AsyncMock]:
        yield db

    app.dependency_overrides[get_db_session] = _override
    yield db
    app.dependency_overrides.pop(get_db_session, None)


def _auth(user_id: int = 1, role: str = "user") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_missing_token_is_401(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/wallet/balance")
    assert resp.status_code == 401


async def test_balance_envelope(client: AsyncClient) -> None:
    wallet = Wallet(1, Decimal("500"), Decimal("0"), Decimal("0"), "USD", datetime.now(UTC))
    with patch.object(
        wallet_api._service, "get_wallet",
        AsyncMock(return_value=WalletResponse.from_wallet(wallet)),
    ):
        resp = await client.get("/api/v1/wallet/balance", headers=_auth())

    assert resp.status_code == 200
    body = resp.json()
    assert body["code"] == 0
    assert body["data"]["available_balance"] == "500"
    assert body["data"]["available_balance_display"] == "$500.00"
    assert body["request_id"] == resp.headers["X-Request-ID"]


async def test_app_error_maps_to_envelope(client: AsyncClient) -> None:
    err = InsufficientBalanceError("available", Decimal("60"), Decimal("40"))
    with patch.object(wallet_api._service, "withdraw", AsyncMock(side_effect=err)):
        resp = await client.post(
            "/api/v1/wallet/withdraw", json={"amount": "60"}, headers=_auth()
        )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == 2001
    assert body["data"] is None
    assert body["request_id"] == resp.headers["X-Request-ID"]


async def test_non_positive_amount_rejected_by_schema(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/wallet/withdraw", json={"amount": "0"}, headers=_auth())
    assert resp.status_code == 422


async def test_admin_endpoint_forbidden_for_user(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/admin/invariants", headers=_auth())
    assert resp.status_code == 403
    assert resp.json()["code"] == 1006


async def test_admin_invariants(client: AsyncClient) -> None:
    with patch.object(
        admin_api._service, "verify_all_invariants",
        AsyncMock(return_value={"ok": True, "violations": []}),
    ):
        resp = await client.get("/api/v1/admin/invariants", headers=_auth(9, "admin"))

    assert resp.status_code == 200
    assert resp.json()["data"] == {"ok": True, "violations": []}


async def test_internal_register(client: AsyncClient) -> None:
    result = RegisterUserResponse(
        user_id=5, currency="USD", referrer_id=4,
        upline=[UplineEdge(referrer_id=4, level=1), UplineEdge(referrer_id=3, level=2)],
    )
    with patch.object(
        internal_api._onboarding, "register", AsyncMock(return_value=result)
    ) as register:
        resp = await client.post(
            "/api/v1/internal/users",
            json={"user_id": 5, "referrer_id": 4},
            headers=_auth(0, "admin"),
        )

    assert resp.status_code == 201
    assert resp.json()["message"] == "User registered successfully"
    assert len(resp.json()["data"]["upline"]) == 2
    assert register.await_args.args[1:] == (5, 4, "USD")


async def test_yield_tiers_public_shape(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/yield/tiers", headers=_auth())
    assert resp.status_code == 200
    assert [t["tier"] for t in resp.json()["data"]] == ["anchor", "vector", "kinetic", "horizon"]
