# quotation_backend/models/activity_models.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from quotation_backend.core.db import Base


class UserActivity(Base):
    """Audit trail of who did what; quotation rows outlive deleted drafts."""
    __tablename__ = "user_activity"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    username = Column(String, nullable=False)
    action = Column(String(30), nullable=True, index=True)
    quotation_id = Column(Integer, nullable=True, index=True)
    message = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
