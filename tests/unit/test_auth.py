from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from starlette.requests import HTTPConnection

from collab_chat.application.exceptions import UnauthorizedError
from collab_chat.config import settings
from collab_chat.infrastructure.auth.handshake import authenticate_handshake, extract_bearer_token
from collab_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from tests.conftest import CREATOR_ID, make_token


@pytest.fixture
def verifier() -> HS256Verifier:
    return HS256Verifier(settings.JWT_SECRET)


def _connection(*, headers: dict[str, str] | None = None, query: str = "") -> HTTPConnection:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return HTTPConnection({
        "type": "websocket",
        "path": "/ws/chat",
        "headers": raw_headers,
        "query_string": query.encode(),
    })


@pytest.mark.asyncio
async def test_verify_sub_claim(verifier):
    principal = await verifier.verify(make_token(CREATOR_ID))

    assert principal.user_id == CREATOR_ID


@pytest.mark.asyncio
@pytest.mark.parametrize("claim", ["id", "_id"])
async def test_verify_fallback_id_claims(verifier, claim):
    principal = await verifier.verify(make_token(CREATOR_ID, claim=claim))

    assert principal.user_id == CREATOR_ID


@pytest.mark.asyncio
async def test_verify_collects_role_claims(verifier):
    principal = await verifier.verify(make_token(CREATOR_ID, role="creator", roles=["beta"]))

    assert principal.roles == ["beta", "creator"]


@pytest.mark.asyncio
async def test_verify_rejects_wrong_secret(verifier):
    token = make_token(CREATOR_ID, secret="another-secret-that-is-long-enough-for-hs256")

    with pytest.raises(UnauthorizedError):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_verify_rejects_expired(verifier):
    token = jwt.encode(
        {"sub": str(CREATOR_ID), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.JWT_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(UnauthorizedError):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_verify_rejects_missing_identity(verifier):
    token = jwt.encode({"name": "nobody"}, settings.JWT_SECRET, algorithm="HS256")

    with pytest.raises(UnauthorizedError):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_verify_rejects_non_uuid_identity(verifier):
    with pytest.raises(UnauthorizedError):
        await verifier.verify(make_token("not-a-uuid"))


@pytest.mark.asyncio
async def test_verify_rejects_garbage(verifier):
    with pytest.raises(UnauthorizedError):
        await verifier.verify("not.a.jwt")


def test_extract_prefers_authorization_header():
    conn = _connection(headers={"Authorization": "Bearer header-token"}, query="token=query-token")

    assert extract_bearer_token(conn) == "header-token"


def test_extract_falls_back_to_query_param():
    conn = _connection(headers={"Authorization": "Basic abc"}, query="token=query-token")

    assert extract_bearer_token(conn) == "query-token"


def test_extract_returns_none_without_token():
    assert extract_bearer_token(_connection()) is None


@pytest.mark.asyncio
async def test_handshake_authenticates(verifier):
    user_id = uuid.uuid4()
    conn = _connection(query=f"token={make_token(user_id)}")

    principal = await authenticate_handshake(conn, verifier)

    assert principal.user_id == user_id


@pytest.mark.asyncio
async def test_handshake_without_token_rejected(verifier):
    with pytest.raises(UnauthorizedError, match="Missing token"):
        await authenticate_handshake(_connection(), verifier)
