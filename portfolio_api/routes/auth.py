"""
Admin login routes.
Issues a JWT stored in an httpOnly cookie and also returned in the body.
"""
from fastapi import APIRouter, Depends, Request, Response
import logging

from portfolio_api.config import settings
from portfolio_api.schemas import LoginRequest, TokenResponse, UploaderProfile
from portfolio_api.utils.auth import get_admin_profile
from portfolio_api.utils.jwt_auth import (
    COOKIE_NAME,
    authenticate_user,
    create_access_token,
    verify_cms_token,
)
from portfolio_api.utils.rate_limit import limiter, RATE_LIMITS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["login"])
async def login(request: Request, credentials: LoginRequest, response: Response):
    """
    Log in as the admin.

    Returns:
        TokenResponse: Access token and lifetime in seconds

    Raises:
        HTTPException: 401 on bad credentials, 429 when rate limited
    """
    claims = authenticate_user(credentials.username, credentials.password)
    token = create_access_token(claims)
    max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
        max_age=max_age,
    )
    logger.info(f"Admin login succeeded for {credentials.username}")

    return TokenResponse(access_token=token, expires_in=max_age)


@router.post("/logout")
async def logout(response: Response):
    """Clear the auth cookie."""
    response.delete_cookie(key=COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=UploaderProfile)
async def me(token: dict = Depends(verify_cms_token)):
    """Profile of the logged-in admin."""
    return get_admin_profile()
