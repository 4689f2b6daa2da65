"""
Rate Limiting Middleware for FastAPI

Throttles credential guessing on the login endpoint. Other routes carry
the global default limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

# Create rate limiter instance
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/hour"],  # Global default limit
    storage_uri="memory://",
    headers_enabled=False,
)

# Applied to POST /api/auth/login
LOGIN_RATE_LIMIT = settings.login_rate_limit


def configure_rate_limiting(app):
    """
    Attach the limiter to the FastAPI application.

    Rejections are rendered by the handler registered in
    ``app.exception_handlers``.

    Args:
        app: FastAPI application instance
    """
    app.state.limiter = limiter
