"""
Core authentication logic.

Resolves the caller's identity from the cookie pair. There are no passwords:
a user is whoever holds a correctly signed `user_id` cookie.
"""

import uuid
from typing import Optional, Tuple

from .utils import sign_user_id, verify_signature


def resolve_user(user_id: Optional[str], signature: Optional[str], secret: str) -> Tuple[str, bool]:
    """
    Return the user id for the presented cookies.

    Args:
        user_id (Optional[str]): Value of the `user_id` cookie.
        signature (Optional[str]): Value of the `signature` cookie.
        secret (str): HMAC key.

    Returns:
        Tuple[str, bool]: `(user_id, issued)`. `issued` is True when the cookies
        were missing or forged and a new identity was generated.
    """
    if user_id and signature and verify_signature(user_id, signature, secret):
        return user_id, False
    return str(uuid.uuid4()), True


def issue_cookies(user_id: str, secret: str) -> Tuple[str, str]:
    """Return the `(user_id, signature)` cookie values for a user."""
    return user_id, sign_user_id(user_id, secret)
