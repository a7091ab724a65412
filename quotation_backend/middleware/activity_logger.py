# quotation_backend/middleware/activity_logger.py
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class ActivityLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Only log POST, PUT, DELETE (modify) requests; the user is attached by get_current_user
        if request.method in ["POST", "PUT", "DELETE"]:
            username = getattr(request.state, "username", None)
            if username:
                logger.info(
                    "%s %s by '%s' -> %s",
                    request.method, request.url.path, username, response.status_code,
                )

        return response
