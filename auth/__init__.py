"""
Auth package for the URL shortener.

Identifies users with a pair of cookies: `user_id` and its HMAC-SHA256
`signature`. Requests without a valid pair get a fresh user id and new
cookies; nothing else is required to use the service.
"""

from .dependencies import get_current_user
from .middleware import install_cookie_auth

__all__ = ["get_current_user", "install_cookie_auth"]
