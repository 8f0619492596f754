# tests/v1/test_auth.py

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from app.core.security import token_issuer

SIGN_UP_URL = "/api/v1/users/sign-up"
SIGN_IN_URL = "/api/v1/users/sign-in"
REFRESH_URL = "/api/v1/users/auth/refresh"
REVOKE_URL = "/api/v1/users/auth/revoke"


async def test_sign_up_returns_token_pair(client: AsyncClient):
    response = await client.post(SIGN_UP_URL, json={"email": "bob@example.com", "password": "pass-word"})

    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["refresh_token"]
    assert token_issuer.verify_access_token(data["access_token"])


async def test_sign_up_duplicate_email_conflicts(client: AsyncClient, registered_user):
    response = await client.post(SIGN_UP_URL, json={"email": "alice@example.com", "password": "other"})

    assert response.status_code == 409
    assert response.json()["detail"] == "Email already in use"


async def test_sign_up_rejects_malformed_email(client: AsyncClient):
    response = await client.post(SIGN_UP_URL, json={"email": "not-an-email", "password": "pass-word"})
    assert response.status_code == 422


async def test_sign_up_rejects_empty_password(client: AsyncClient):
    response = await client.post(SIGN_UP_URL, json={"email": "bob@example.com", "password": ""})
    assert response.status_code == 422


async def test_sign_up_with_unknown_referral_code(client: AsyncClient):
    response = await client.post(
        SIGN_UP_URL,
        json={"email": "bob@example.com", "password": "pass-word", "referral_code": "missing"},
    )
    assert response.status_code == 404


async def test_sign_in(client: AsyncClient, registered_user):
    response = await client.post(SIGN_IN_URL, json={"email": "alice@example.com", "password": "s3cret-Password"})

    assert response.status_code == 200
    user, _ = registered_user
    assert token_issuer.verify_access_token(response.json()["access_token"]) == str(user.id)


async def test_sign_in_wrong_password_and_unknown_email_look_the_same(client: AsyncClient, registered_user):
    wrong_password = await client.post(SIGN_IN_URL, json={"email": "alice@example.com", "password": "nope"})
    unknown_email = await client.post(SIGN_IN_URL, json={"email": "ghost@example.com", "password": "nope"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


async def test_refresh_issues_new_pair(client: AsyncClient, registered_user):
    _, tokens = registered_user

    response = await client.post(REFRESH_URL, json={"token": tokens.refresh_token})

    assert response.status_code == 200
    assert response.json()["refresh_token"] != tokens.refresh_token


async def test_refresh_with_unknown_token(client: AsyncClient, registered_user):
    response = await client.post(REFRESH_URL, json={"token": "does-not-exist"})
    assert response.status_code == 404


async def test_revoke_all_sessions(client: AsyncClient, registered_user, auth_headers):
    _, tokens = registered_user

    response = await client.post(REVOKE_URL, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"revoked": 1}
    refreshed = await client.post(REFRESH_URL, json={"token": tokens.refresh_token})
    assert refreshed.status_code == 404


async def test_protected_route_requires_bearer_token(client: AsyncClient):
    response = await client.post(REVOKE_URL)
    # Код ответа HTTPBearer без заголовка зависит от версии FastAPI
    assert response.status_code in (401, 403)


async def test_protected_route_rejects_bad_token(client: AsyncClient):
    response = await client.post(REVOKE_URL, headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}


async def test_store_outage_maps_to_bad_gateway(client: AsyncClient, db_session, mocker):
    mocker.patch.object(db_session, "query", side_effect=OperationalError("SELECT", {}, Exception("db is down")))

    response = await client.post(SIGN_IN_URL, json={"email": "alice@example.com", "password": "s3cret-Password"})

    assert response.status_code == 502
