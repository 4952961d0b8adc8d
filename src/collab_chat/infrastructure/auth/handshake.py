from __future__ import annotations

from starlette.requests import HTTPConnection

from collab_chat.application.dto.principal import Principal
from collab_chat.application.exceptions import UnauthorizedError
from collab_chat.application.ports.auth import TokenVerifier


def extract_bearer_token(connection: HTTPConnection) -> str | None:
    """Authorization header first, then the ``token`` query parameter for browsers."""
    scheme, _, credentials = connection.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return connection.query_params.get("token") or None


async def authenticate_handshake(
    connection: HTTPConnection,
    verifier: TokenVerifier,
) -> Principal:
    token = extract_bearer_token(connection)
    if not token:
        raise UnauthorizedError("Missing token")
    return await verifier.verify(token)
