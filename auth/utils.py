"""
Utility functions for the auth module.
"""

import hashlib
import hmac


def sign_user_id(user_id: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 of `user_id` keyed by `secret`."""
    return hmac.new(secret.encode("utf-8"), user_id.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(user_id: str, signature: str, secret: str) -> bool:
    """Constant-time comparison of `signature` against the expected one."""
    return hmac.compare_digest(signature.encode("utf-8"), sign_user_id(user_id, secret).encode("utf-8"))
