# quotation_backend/utils/get_user.py
from fastapi import Request, Depends, HTTPException, Header
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from quotation_backend.core.db import get_db
from quotation_backend.core.security import decode_token
from quotation_backend.models.user_models import User


def _extract_token(token: str | None, authorization: str | None) -> str | None:
    if token:
        return token
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()
    return None


async def get_current_user(
    request: Request,
    token: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from a ``token`` header or an ``Authorization: Bearer`` header."""
    raw_token = _extract_token(token, authorization)
    if not raw_token:
        raise HTTPException(status_code=401, detail="Missing access token")

    try:
        payload = decode_token(raw_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    username = payload.get("sub")
    token_version = payload.get("token_version")
    if not username or token_version is None:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = (await db.execute(select(User).where(User.username == username))).scalars().first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.token_version != token_version:
        raise HTTPException(status_code=401, detail="Token invalidated. Please log in again.")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is inactive.")

    # read by ActivityLoggerMiddleware
    request.state.user_id = user.id
    request.state.username = user.username
    return user
