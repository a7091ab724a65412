# quotation_backend/services/auth_service.py
import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from quotation_backend.models.user_models import User
from quotation_backend.core.enums import UserRole
from quotation_backend.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from quotation_backend.core.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES,
)
from quotation_backend.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)

ALLOWED_ROLES = {role.value for role in UserRole}


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for '%s'", username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive.")
    return user


async def issue_access_token(db: AsyncSession, user: User) -> str:
    """Sign a login token carrying the user's current token_version."""
    expire_minutes = (
        ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
        if user.role == UserRole.ADMIN.value
        else ACCESS_TOKEN_EXPIRE_MINUTES
    )

    access_token = create_access_token(
        {"sub": user.username, "user_id": user.id, "role": user.role},
        token_version=user.token_version,
        expires_delta=timedelta(minutes=expire_minutes),
    )

    user.last_login = datetime.now(timezone.utc)
    log_user_activity(db, user, message=f"User '{user.username}' logged in", action="login")
    await db.commit()

    return access_token


async def logout_user(db: AsyncSession, user: User):
    """Invalidate every token issued to ``user`` so far."""
    user.token_version += 1
    log_user_activity(db, user, message=f"User '{user.username}' logged out", action="logout")
    await db.commit()


async def create_user(db: AsyncSession, username: str, password: str, role: str) -> User:
    existing = await db.execute(select(User).where(User.username == username))
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail="Username already exists")
    if role not in ALLOWED_ROLES:
        raise HTTPException(status_code=400, detail=f"Role must be one of {sorted(ALLOWED_ROLES)}")
    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    user = User(username=username, password_hash=hash_password(password), role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
