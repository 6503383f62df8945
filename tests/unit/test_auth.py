"""
Unit tests for cookie signing and user resolution.
"""

import uuid

from auth.service import issue_cookies, resolve_user
from auth.utils import sign_user_id, verify_signature


def test_signature_is_hex_sha256():
    signature = sign_user_id("user-1", "secret")
    assert len(signature) == 64
    int(signature, 16)


def test_verify_signature():
    signature = sign_user_id("user-1", "secret")
    assert verify_signature("user-1", signature, "secret")
    assert not verify_signature("user-2", signature, "secret")
    assert not verify_signature("user-1", signature, "other-secret")
    assert not verify_signature("user-1", "deadbeef", "secret")


def test_resolve_user_accepts_valid_pair():
    user_id, signature = issue_cookies("user-1", "secret")
    assert resolve_user(user_id, signature, "secret") == ("user-1", False)


def test_resolve_user_issues_new_identity():
    for user_id, signature in [(None, None), ("user-1", None), ("user-1", "forged")]:
        new_id, issued = resolve_user(user_id, signature, "secret")
        assert issued is True
        assert new_id != "user-1"
        uuid.UUID(new_id)
