"""HTTP-level tests: routing, envelope, status codes and error mapping.

Router services are patched with AsyncMocks and the DB dependency is
overridden, so no PostgreSQL or Redis is needed.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.us_card.application.schemas import CardResponse
from src.us_common.database import get_db_session
from src.us_common.errors import (
    CardLimitExceededError,
    DuplicateEmailError,
    InvalidArgumentError,
    PaymentCardNotFoundError,
    UserNotFoundError,
)
from src.us_common.pagination import Page, PageRequest
from src.us_user.application.schemas import UserResponse

_NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _user(user_id: int = 1) -> UserResponse:
    return UserResponse(
        id=user_id, name="Ada", surname="Lovelace", birth_date=date(1990, 12, 10),
        email="ada@example.com", active=True, created_at=_NOW, updated_at=_NOW,
    )


def _card(card_id: int = 1) -> CardResponse:
    return CardResponse(
        id=card_id, user_id=1, number="1000000000001", holder="ADA LOVELACE",
        expiration_date=date(2030, 1, 31), active=True, created_at=_NOW, updated_at=_NOW,
    )


async def _fake_session():
    yield MagicMock()


@pytest.fixture(autouse=True)
def _override_db():
    app.dependency_overrides[get_db_session] = _fake_session
    yield
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture
def user_svc():
    with patch("src.us_user.api.router._service") as svc:
        yield svc


@pytest.fixture
def card_svc():
    with patch("src.us_card.api.router._service") as svc:
        yield svc


class TestUsersApi:
    async def test_create_returns_201_envelope(self, client: AsyncClient, user_svc) -> None:
        user_svc.create_user = AsyncMock(return_value=_user())

        resp = await client.post("/api/users", json={
            "name": "Ada", "surname": "Lovelace", "email": "ada@example.com",
            "birth_date": "1990-12-10",
        })

        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["email"] == "ada@example.com"
        assert body["data"]["birth_date"] == "1990-12-10"
        assert body["request_id"].startswith("req_")

    async def test_validation_error_is_400_with_field_map(
        self, client: AsyncClient, user_svc
    ) -> None:
        resp = await client.post("/api/users", json={
            "name": "", "surname": "Lovelace", "email": "not-an-email",
        })

        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == 9002
        assert set(body["data"]) >= {"name", "email"}

    async def test_duplicate_email_is_409(self, client: AsyncClient, user_svc) -> None:
        user_svc.create_user = AsyncMock(side_effect=DuplicateEmailError("ada@example.com"))

        resp = await client.post("/api/users", json={
            "name": "Ada", "surname": "Lovelace", "email": "ada@example.com",
        })

        assert resp.status_code == 409
        assert resp.json()["code"] == 1002

    async def test_get_unknown_is_404(self, client: AsyncClient, user_svc) -> None:
        user_svc.get_user = AsyncMock(side_effect=UserNotFoundError(42))

        resp = await client.get("/api/users/42")

        assert resp.status_code == 404
        assert resp.json()["code"] == 1001
        assert resp.json()["data"] is None

    async def test_non_positive_id_rejected(self, client: AsyncClient, user_svc) -> None:
        resp = await client.get("/api/users/0")
        assert resp.status_code == 400

    async def test_list_passes_filters_and_page(self, client: AsyncClient, user_svc) -> None:
        user_svc.list_users = AsyncMock(
            return_value=Page[UserResponse].build([_user()], PageRequest(page=1, size=5), 6)
        )

        resp = await client.get("/api/users?name=ad&active=true&page=1&size=5")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["total_elements"] == 6
        assert data["total_pages"] == 2
        _, filters, page = user_svc.list_users.call_args[0]
        assert filters.name == "ad"
        assert filters.active is True
        assert page == PageRequest(page=1, size=5)

    async def test_page_size_over_limit(self, client: AsyncClient, user_svc) -> None:
        resp = await client.get("/api/users?size=101")
        assert resp.status_code == 400

    async def test_static_paths_not_captured_as_id(self, client: AsyncClient, user_svc) -> None:
        user_svc.list_active_users = AsyncMock(
            return_value=Page[UserResponse].build([], PageRequest(), 0)
        )

        resp = await client.get("/api/users/active")

        assert resp.status_code == 200
        user_svc.list_active_users.assert_awaited_once()

    async def test_born_before(self, client: AsyncClient, user_svc) -> None:
        user_svc.list_active_users_born_before = AsyncMock(
            return_value=Page[UserResponse].build([], PageRequest(), 0)
        )

        resp = await client.get("/api/users/born-before?birth_date=2000-01-01")

        assert resp.status_code == 200
        assert user_svc.list_active_users_born_before.call_args[0][1] == date(2000, 1, 1)

    async def test_with_cards(self, client: AsyncClient, user_svc) -> None:
        from src.us_user.application.schemas import UserWithCardsResponse

        user_svc.get_user_with_cards = AsyncMock(return_value=UserWithCardsResponse(
            **_user().model_dump(), payment_cards=[_card()]
        ))

        resp = await client.get("/api/users/1/with-cards")

        assert resp.status_code == 200
        assert resp.json()["data"]["payment_cards"][0]["number"] == "1000000000001"

    async def test_activate(self, client: AsyncClient, user_svc) -> None:
        user_svc.activate_user = AsyncMock(return_value=None)

        resp = await client.patch("/api/users/3/activate")

        assert resp.status_code == 200
        assert resp.json()["data"] == {"id": 3, "active": True}

    async def test_delete_returns_204(self, client: AsyncClient, user_svc) -> None:
        user_svc.delete_user = AsyncMock(return_value=None)

        resp = await client.delete("/api/users/3")

        assert resp.status_code == 204
        assert resp.content == b""


class TestCardsApi:
    async def test_create_returns_201(self, client: AsyncClient, card_svc) -> None:
        card_svc.create_card = AsyncMock(return_value=_card())

        resp = await client.post("/api/payment-cards/user/1", json={
            "number": "1000000000001", "holder": "ADA LOVELACE", "expiration_date": "2030-01-31",
        })

        assert resp.status_code == 201
        assert resp.json()["data"]["user_id"] == 1

    async def test_limit_exceeded_is_400(self, client: AsyncClient, card_svc) -> None:
        card_svc.create_card = AsyncMock(side_effect=CardLimitExceededError(1, 5))

        resp = await client.post("/api/payment-cards/user/1", json={
            "number": "1000000000006", "holder": "ADA LOVELACE", "expiration_date": "2030-01-31",
        })

        assert resp.status_code == 400
        assert resp.json()["code"] == 2003

    async def test_bad_number_is_validation_error(self, client: AsyncClient, card_svc) -> None:
        resp = await client.post("/api/payment-cards/user/1", json={
            "number": "12ab", "holder": "ADA", "expiration_date": "2030-01-31",
        })

        assert resp.status_code == 400
        assert "number" in resp.json()["data"]

    async def test_scoped_lookup_not_found(self, client: AsyncClient, card_svc) -> None:
        card_svc.get_card_for_user = AsyncMock(side_effect=PaymentCardNotFoundError(5, user_id=2))

        resp = await client.get("/api/payment-cards/user/2/card/5")

        assert resp.status_code == 404
        assert "for user: 2" in resp.json()["message"]
        card_svc.get_card_for_user.assert_awaited_once()
        assert card_svc.get_card_for_user.call_args[0][1:] == (2, 5)

    async def test_by_number(self, client: AsyncClient, card_svc) -> None:
        card_svc.get_card_by_number = AsyncMock(return_value=_card())

        resp = await client.get("/api/payment-cards/number/1000000000001")

        assert resp.status_code == 200
        assert resp.json()["data"]["number"] == "1000000000001"

    async def test_blank_number_is_400(self, client: AsyncClient, card_svc) -> None:
        card_svc.get_card_by_number = AsyncMock(
            side_effect=InvalidArgumentError("Card number must not be blank")
        )

        resp = await client.get("/api/payment-cards/number/%20")

        assert resp.status_code == 400
        assert resp.json()["code"] == 9001

    async def test_list_for_user_active(self, client: AsyncClient, card_svc) -> None:
        card_svc.list_active_cards_for_user = AsyncMock(
            return_value=Page[CardResponse].build([_card()], PageRequest(), 1)
        )

        resp = await client.get("/api/payment-cards/user/1/active")

        assert resp.status_code == 200
        assert resp.json()["data"]["items"][0]["id"] == 1

    async def test_delete_returns_204(self, client: AsyncClient, card_svc) -> None:
        card_svc.delete_card = AsyncMock(return_value=None)

        resp = await client.delete("/api/payment-cards/1")

        assert resp.status_code == 204


class TestCacheApi:
    async def test_clear_user(self, client: AsyncClient) -> None:
        with patch("src.us_cache.api.router._service") as svc:
            svc.clear_user = AsyncMock(return_value=["k1", "k2", "k3"])

            resp = await client.post("/api/cache/clear/user/4")

        assert resp.status_code == 200
        assert resp.json()["data"] == {"user_id": 4, "evicted_keys": ["k1", "k2", "k3"]}


class TestServiceEndpoints:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_unhandled_error_is_500_envelope(self, user_svc) -> None:
        user_svc.get_user = AsyncMock(side_effect=RuntimeError("boom"))
        # The server error middleware re-raises after responding
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/api/users/1")

        assert resp.status_code == 500
        assert resp.json()["code"] == 9003
