# teamap/core/deps.py
"""
Dependencias de autenticación compartidas por todos los routers.

El token se busca, en este orden:
  1. Authorization: Bearer XXX
  2. ?token=XXX
  3. cookie httpOnly `accessToken` (navegador)
"""
from fastapi import Depends, Header, Query, Cookie
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from teamap.core.errors import AuthenticationError
from teamap.core.security import decode_access_token
from teamap.db.session import get_session
from teamap.users.models import User
from teamap.users.repository import get_by_id

ACCESS_COOKIE = "accessToken"


def _extract_token(
    token: str | None,
    authorization: str | None,
    cookie_token: str | None = None,
) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    if token:
        return token
    return cookie_token or None


async def _resolve_user(db: AsyncSession, tok: str) -> User:
    try:
        user_id = int(decode_access_token(tok))
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired", code="TOKEN_EXPIRED")
    except (JWTError, ValueError):
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")

    user = await get_by_id(db, user_id)
    if not user:
        raise AuthenticationError("User not found")
    return user


async def get_current_user(
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None, include_in_schema=False),
    authorization: str | None = Header(None),
    access_cookie: str | None = Cookie(None, alias=ACCESS_COOKIE),
) -> User:
    tok = _extract_token(token, authorization, access_cookie)
    if not tok:
        raise AuthenticationError("Access token required")
    return await _resolve_user(db, tok)


async def get_optional_user(
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None, include_in_schema=False),
    authorization: str | None = Header(None),
    access_cookie: str | None = Cookie(None, alias=ACCESS_COOKIE),
) -> User | None:
    """Igual que get_current_user, pero un token malo = visitante anónimo."""
    tok = _extract_token(token, authorization, access_cookie)
    if not tok:
        return None
    try:
        return await _resolve_user(db, tok)
    except AuthenticationError:
        return None


def viewer_id_of(user: User | None) -> int | None:
    return user.id if user else None
