"""
Cookie auth middleware.

Runs before every route: stores the resolved user id on `request.state` and,
when a new identity was issued, sets both cookies on the outgoing response
(whatever response class the route returned).
"""

import logging

from fastapi import FastAPI, Request

from .config import COOKIE_PATH, SIGNATURE_COOKIE, USER_ID_COOKIE
from .service import issue_cookies, resolve_user

logger = logging.getLogger(__name__)


def install_cookie_auth(app: FastAPI, secret: str) -> None:
    """Register the cookie auth middleware on `app`."""

    @app.middleware("http")
    async def cookie_auth(request: Request, call_next):
        user_id, issued = resolve_user(
            request.cookies.get(USER_ID_COOKIE),
            request.cookies.get(SIGNATURE_COOKIE),
            secret,
        )
        request.state.user_id = user_id
        response = await call_next(request)
        if issued:
            value, signature = issue_cookies(user_id, secret)
            response.set_cookie(USER_ID_COOKIE, value, path=COOKIE_PATH, httponly=True)
            response.set_cookie(SIGNATURE_COOKIE, signature, path=COOKIE_PATH, httponly=True)
            logger.debug("Issued new user id %s", user_id)
        return response
