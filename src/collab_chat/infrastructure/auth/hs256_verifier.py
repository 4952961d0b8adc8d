from __future__ import annotations

from uuid import UUID

import jwt

from collab_chat.application.dto.principal import Principal
from collab_chat.application.exceptions import UnauthorizedError

# accepted user-id claims, in order
USER_CLAIMS = ("sub", "id", "_id")


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError as exc:
            raise UnauthorizedError("Invalid token") from exc

        raw_id = next((payload[c] for c in USER_CLAIMS if payload.get(c)), None)
        if raw_id is None:
            raise UnauthorizedError("Invalid token payload")
        try:
            user_id = UUID(str(raw_id))
        except ValueError as exc:
            raise UnauthorizedError("Invalid user id in token") from exc

        roles = list(payload.get("roles") or [])
        if payload.get("role"):
            roles.append(str(payload["role"]))
        return Principal(user_id=user_id, roles=roles)
