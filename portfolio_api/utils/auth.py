"""
Password authentication utilities for CMS access.
Uses bcrypt for secure password hashing.
"""
import bcrypt
import hmac
from portfolio_api.config import settings
from portfolio_api.schemas import UploaderProfile


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.
    Used for generating the initial password hash.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hashed password.

    Args:
        password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(
            password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Malformed hash
        return False


def verify_admin_credentials(username: str, password: str) -> bool:
    """
    Verify admin username and password against configured values.

    Args:
        username: Username to check against ADMIN_USERNAME
        password: Plain text password to verify

    Returns:
        True if both match, False otherwise

    Raises:
        ValueError: If ADMIN_PASSWORD_HASH is not configured
    """
    if not settings.ADMIN_PASSWORD_HASH:
        raise ValueError("ADMIN_PASSWORD_HASH not configured")

    username_ok = hmac.compare_digest(username.encode('utf-8'), settings.ADMIN_USERNAME.encode('utf-8'))
    password_ok = verify_password(password, settings.ADMIN_PASSWORD_HASH)
    return username_ok and password_ok


def get_admin_profile() -> UploaderProfile:
    """Profile snapshot stored on images the admin uploads."""
    return UploaderProfile(
        name=settings.ADMIN_USERNAME,
        avatar_url=settings.ADMIN_AVATAR_URL or None,
    )
