"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to get the caller's user id.
"""

from fastapi import HTTPException, Request, status


def get_current_user(request: Request) -> str:
    """
    Dependency that returns the user id resolved by the cookie middleware.

    Raises:
        HTTPException: 401 if the middleware did not run or produced no user.
    """
    user_id = getattr(request.state, "user_id", "")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id
