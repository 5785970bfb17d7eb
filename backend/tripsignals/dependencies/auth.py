"""Authentication dependencies for FastAPI routes.

Sessions are issued by the hosted auth provider's login flow; this service
only reads the signed session cookie.
"""

from fastapi import Request

from tripsignals.errors import NotAuthenticated


def get_current_user_id(request: Request) -> str | None:
    """Return the logged-in user id or None."""
    user_id = request.session.get("user_id")
    return str(user_id) if user_id else None


def require_user_id(request: Request) -> str:
    """Return the logged-in user id or raise NotAuthenticated (mapped to 401)."""
    user_id = get_current_user_id(request)
    if not user_id:
        raise NotAuthenticated("Login required")
    return user_id
