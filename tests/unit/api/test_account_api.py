"""Unit tests for account management endpoints.

The repository dependency is overridden with the in-memory fake; the
account id is asserted through the X-Account-Id header, sent with the
trusted proxy secret.
"""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from keygate.api import dependencies
from keygate.api.dependencies import get_repository
from keygate.config import Settings
from keygate.main import create_app
from keygate.models.plan import PlanType
from keygate.services.api_key import ApiKeyService
from keygate.services.cooldown import Cooldown
from tests.fakes import FakeClock, InMemoryApiKeyRepository, RecordingEmailSender

PROXY_SECRET = "proxy-s3cret"


def _as(account_id: str) -> dict[str, str]:
    return {"X-Account-Id": account_id, "X-Proxy-Secret": PROXY_SECRET}


ACCOUNT = _as("user-1")


@pytest.fixture
def repo() -> InMemoryApiKeyRepository:
    repository = InMemoryApiKeyRepository()
    repository.add_account("user-1", PlanType.FREE, first_name="Ada")
    repository.add_account("user-2", PlanType.PRO)
    return repository


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(monkeypatch) -> Settings:
    configured = Settings(security={"proxy_secret": PROXY_SECRET})
    monkeypatch.setattr(dependencies, "get_settings", lambda: configured)
    return configured


@pytest.fixture
async def client(repo, sender, clock, settings):
    app = create_app(
        resolver=ApiKeyService(repo).resolve,
        email_sender=sender,
        cooldown=Cooldown(interval=timedelta(minutes=2), clock=clock),
    )
    app.dependency_overrides[get_repository] = lambda: repo

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestKeys:
    async def test_create_returns_plaintext_once(self, client):
        response = await client.post("/account/keys", json={"name": "CI"}, headers=ACCOUNT)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "API key created successfully."
        assert body["plain_key"].startswith("wc_")
        assert body["api_key"]["name"] == "CI"

        listed = await client.get("/account/keys", headers=ACCOUNT)
        assert body["plain_key"] not in listed.text
        assert listed.json()["items"][0]["key_preview"] == body["api_key"]["key_preview"]

    async def test_create_over_limit(self, client):
        await client.post("/account/keys", json={"name": "one"}, headers=ACCOUNT)

        response = await client.post("/account/keys", json={"name": "two"}, headers=ACCOUNT)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "You have reached the maximum number of API keys (1) for your plan.",
        }

    @pytest.mark.parametrize("name", ["", "x" * 101])
    async def test_create_validates_name(self, client, name):
        response = await client.post("/account/keys", json={"name": name}, headers=ACCOUNT)
        assert response.status_code == 422

    async def test_revoke_then_list(self, client):
        created = (await client.post("/account/keys", json={"name": "k"}, headers=ACCOUNT)).json()
        key_id = created["api_key"]["id"]

        response = await client.post(f"/account/keys/{key_id}/revoke", headers=ACCOUNT)

        assert response.status_code == 200
        assert response.json()["message"] == "API key revoked successfully."
        [item] = (await client.get("/account/keys", headers=ACCOUNT)).json()["items"]
        assert item["is_active"] is False

        me = await client.get("/v1/me", headers={"Authorization": f"Bearer {created['plain_key']}"})
        assert me.status_code == 401

    async def test_revoke_other_owners_key(self, client):
        created = (await client.post("/account/keys", json={"name": "k"}, headers=ACCOUNT)).json()

        response = await client.post(
            f"/account/keys/{created['api_key']['id']}/revoke",
            headers=_as("user-2"),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "API key not found."

    async def test_delete(self, client):
        created = (await client.post("/account/keys", json={"name": "k"}, headers=ACCOUNT)).json()

        response = await client.delete(f"/account/keys/{created['api_key']['id']}", headers=ACCOUNT)

        assert response.status_code == 200
        assert (await client.get("/account/keys", headers=ACCOUNT)).json()["items"] == []

    async def test_missing_account_header(self, client):
        response = await client.get("/account/keys")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "unauthorized"


class TestProfile:
    async def test_profile(self, client):
        await client.post("/account/keys", json={"name": "k"}, headers=ACCOUNT)

        response = await client.get("/account/profile", headers=ACCOUNT)

        assert response.status_code == 200
        body = response.json()
        assert body["plan"] == "free"
        assert body["api_key_count"] == 1
        assert body["max_api_keys"] == 1
        assert body["monthly_requests"] == 0
        assert body["max_monthly_requests"] == 1000

    async def test_unknown_account(self, client):
        response = await client.get("/account/profile", headers=_as("ghost"))

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "User not found."

    async def test_update_profile(self, client, repo):
        response = await client.put(
            "/account/profile",
            json={"first_name": "Grace", "last_name": "Hopper"},
            headers=ACCOUNT,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Profile updated successfully!"}
        body = (await client.get("/account/profile", headers=ACCOUNT)).json()
        assert (body["first_name"], body["last_name"]) == ("Grace", "Hopper")

    async def test_update_profile_unknown_account(self, client):
        response = await client.put(
            "/account/profile",
            json={"first_name": "Grace"},
            headers=_as("ghost"),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "User not found."

    async def test_update_profile_requires_first_name(self, client):
        response = await client.put("/account/profile", json={"first_name": ""}, headers=ACCOUNT)
        assert response.status_code == 422


class TestEmailConfirmation:
    async def test_resend_then_cooldown(self, client, sender, clock):
        first = await client.post("/account/resend-confirmation", headers=ACCOUNT)
        assert first.status_code == 200
        assert len(sender.sent) == 1

        clock.advance(60)
        second = await client.post("/account/resend-confirmation", headers=ACCOUNT)

        assert second.status_code == 429
        assert second.headers["Retry-After"] == "60"
        assert second.json()["message"] == (
            "Please wait 1 minute(s) before requesting another confirmation email."
        )

    async def test_confirm_link(self, client, sender, repo):
        await client.post("/account/resend-confirmation", headers=ACCOUNT)
        html = sender.sent[0].html_body
        start = html.index("http://test/account/confirm-email?")
        link = html[start:html.index('"', start)].replace("&amp;", "&")

        response = await client.get(link)

        assert response.status_code == 200
        assert response.json()["message"] == "Email confirmed successfully!"
        assert repo.accounts["user-1"].email_confirmed is True

    async def test_confirm_bad_token(self, client):
        response = await client.get(
            "/account/confirm-email",
            params={"userId": "user-1", "token": "forged"},
        )
        assert response.status_code == 400


class TestPlans:
    async def test_list_plans(self, client):
        response = await client.get("/v1/plans")

        assert response.status_code == 200
        items = response.json()["items"]
        assert [p["type"] for p in items] == ["free", "premium", "pro"]
        assert items[1]["price"] == "9.99"
        assert items[2]["has_graphql_access"] is True


class TestAccountAuthentication:
    async def test_bare_account_header_rejected_by_default(self, client, repo, monkeypatch):
        monkeypatch.setattr(dependencies, "get_settings", lambda: Settings())

        response = await client.post(
            "/account/keys",
            json={"name": "stolen"},
            headers={"X-Account-Id": "user-2"},
        )

        assert response.status_code == 401
        assert "plain_key" not in response.text
        assert repo.keys == {}

    async def test_wrong_proxy_secret_rejected(self, client, repo):
        response = await client.post(
            "/account/keys",
            json={"name": "stolen"},
            headers={"X-Account-Id": "user-2", "X-Proxy-Secret": "guess"},
        )

        assert response.status_code == 401
        assert repo.keys == {}

    async def test_missing_proxy_secret_rejected(self, client):
        response = await client.get("/account/profile", headers={"X-Account-Id": "user-1"})
        assert response.status_code == 401

    async def test_development_mode_trusts_header(self, client, monkeypatch):
        dev = Settings(security={"trust_account_header": True})
        monkeypatch.setattr(dependencies, "get_settings", lambda: dev)

        response = await client.get("/account/profile", headers={"X-Account-Id": "user-1"})

        assert response.status_code == 200
        assert response.json()["id"] == "user-1"
