"""FastAPI dependency injection helpers."""
from __future__ import annotations

import hmac
from typing import Annotated, AsyncIterator

from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from collab_chat.application.dto.pagination import PageParams
from collab_chat.application.dto.principal import Principal
from collab_chat.application.exceptions import UnauthorizedError
from collab_chat.application.ports.auth import TokenVerifier
from collab_chat.config import settings
from collab_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from collab_chat.infrastructure.db.session import AsyncSessionLocal, session_uow
from collab_chat.infrastructure.db.uow import SqlAlchemyUoW
from collab_chat.infrastructure.ws.manager import SessionManager
from collab_chat.services.gateway_service import UoWFactory

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_uow_factory() -> UoWFactory:
    """Socket events open their own unit of work per event."""
    return session_uow


UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


def get_session_manager(connection: HTTPConnection) -> SessionManager:
    return connection.app.state.sessions


SessionsDep = Annotated[SessionManager, Depends(get_session_manager)]


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


VerifierDep = Annotated[TokenVerifier, Depends(get_verifier)]


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: VerifierDep,
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except UnauthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def require_internal_key(
    x_internal_auth: Annotated[str | None, Header()] = None,
) -> None:
    """Shared-key gate for calls from the marketplace's own REST flows."""
    if not x_internal_auth or not hmac.compare_digest(x_internal_auth, settings.INTERNAL_API_KEY):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")


def get_page_params(
    page: int = Query(1),
    limit: int | None = Query(None),
) -> PageParams:
    """Out-of-range values are clamped, not rejected."""
    return PageParams.clamp(
        page,
        limit,
        default_limit=settings.PAGE_DEFAULT_LIMIT,
        max_limit=settings.PAGE_MAX_LIMIT,
    )


PageDep = Annotated[PageParams, Depends(get_page_params)]
