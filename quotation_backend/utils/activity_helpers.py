# quotation_backend/utils/activity_helpers.py
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from quotation_backend.models.activity_models import UserActivity

SYSTEM_USERNAME = "system"


def log_user_activity(db: AsyncSession, actor, message: str, action: Optional[str] = None, quotation=None):
    """
    Queue an audit row on the session; it is written with the caller's commit.
    ``actor`` may be None for scheduled jobs.
    """
    db.add(UserActivity(
        user_id=actor.id if actor else None,
        username=actor.username if actor else SYSTEM_USERNAME,
        action=str(action) if action else None,
        quotation_id=quotation.id if quotation is not None else None,
        message=message,
    ))
