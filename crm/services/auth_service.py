"""Authentication — password hashing, CAPTCHA verification, login.

Business Rules:
- Passwords are stored as bcrypt hashes only; every comparison goes through
  verify_password()
- CAPTCHA verification fails closed: transport errors, non-200 responses
  and malformed payloads all count as "not human"
- A failed login never says which factor (CAPTCHA, username, password,
  deactivated account) was wrong; the reason is only logged
- RECAPTCHA_ENABLED=false skips the CAPTCHA check (local development)

Called by: routers/auth.py, routers/users.py, startup.py
Depends on: http_client.py, config, models
"""

import bcrypt
import httpx
from loguru import logger
from sqlalchemy.orm import Session

from ..config import settings
from ..http_client import http
from ..models import User
from .errors import AuthenticationError


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (corrupt or legacy row)
        return False


async def verify_captcha(token: str | None, remote_ip: str | None = None) -> bool:
    """Ask the reCAPTCHA siteverify endpoint whether ``token`` is valid."""
    if not settings.recaptcha_enabled:
        return True
    if not token:
        return False
    if not settings.recaptcha_secret:
        logger.error("reCAPTCHA enabled but RECAPTCHA_SECRET is not set — rejecting login")
        return False

    data = {"secret": settings.recaptcha_secret, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip
    try:
        resp = await http.post(
            settings.recaptcha_verify_url,
            data=data,
            timeout=settings.recaptcha_timeout_seconds,
        )
        if resp.status_code != 200:
            logger.warning("reCAPTCHA verify returned HTTP {}", resp.status_code)
            return False
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("reCAPTCHA verify failed: {}", e)
        return False

    if not isinstance(payload, dict):
        logger.warning("reCAPTCHA verify returned a non-object body")
        return False
    if not payload.get("success", False):
        logger.info("reCAPTCHA rejected token: {}", payload.get("error-codes", []))
        return False
    return True


async def authenticate(
    db: Session,
    username: str,
    password: str,
    captcha_token: str | None,
    remote_ip: str | None = None,
) -> User:
    if not await verify_captcha(captcha_token, remote_ip):
        logger.info("Login rejected for '{}': CAPTCHA", username)
        raise AuthenticationError()

    user = db.query(User).filter(User.username == (username or "").strip()).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login rejected for '{}': credentials", username)
        raise AuthenticationError()
    if not user.is_active:
        logger.info("Login rejected for '{}': account deactivated", username)
        raise AuthenticationError()

    logger.info("User '{}' logged in", user.username)
    return user
