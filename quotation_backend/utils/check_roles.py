# quotation_backend/utils/check_roles.py
import logging
from functools import wraps
from typing import Callable, Iterable

from fastapi import HTTPException

from quotation_backend.core.enums import UserRole

logger = logging.getLogger(__name__)


def has_role(user, *roles: UserRole) -> bool:
    return user is not None and (user.role or "").lower() in {UserRole(r).value for r in roles}


def require_role(roles: Iterable[UserRole]):
    """
    Route decorator limiting access to ``roles``.

    The decorated route must declare the authenticated user as
    ``_user=Depends(get_current_user)``.
    """
    allowed = tuple(UserRole(r) for r in roles)

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, _user, **kwargs):
            if _user is None:
                raise HTTPException(status_code=401, detail="User not authenticated")
            if not has_role(_user, *allowed):
                logger.warning("'%s' (%s) denied access to %s", _user.username, _user.role, func.__name__)
                raise HTTPException(status_code=403, detail="Permission denied")
            return await func(*args, _user=_user, **kwargs)
        return wrapper
    return decorator
