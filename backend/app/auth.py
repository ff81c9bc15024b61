"""
Firebase authentication dependency for FastAPI.

Verifies Firebase ID tokens and extracts user information. The acting
user's uid is what the change log records for every write.

With settings.auth_dev_mode on, the bearer token is taken as the uid
without verification (local development only).
"""

import os
from pathlib import Path
import firebase_admin
from firebase_admin import auth, credentials, exceptions as firebase_exceptions
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import get_settings
from app.logging_config import get_logger

logger = get_logger(__name__)


def _init_firebase() -> None:
    """Initialize the Firebase Admin SDK once, on first token verification."""
    try:
        firebase_admin.get_app()
        return  # Already initialized
    except ValueError:
        pass  # Need to initialize

    settings = get_settings()
    # __file__ = backend/app/auth.py → .parent.parent = backend/
    backend_dir = Path(__file__).parent.parent

    possible_paths = []
    if settings.firebase_credentials_path:
        possible_paths.append(Path(settings.firebase_credentials_path))
    possible_paths.append(backend_dir / "serviceAccountKey.json")
    possible_paths.extend(backend_dir.glob("*-firebase-adminsdk-*.json"))

    env_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
    if env_path:
        possible_paths.append(Path(env_path))

    for key_path in possible_paths:
        if key_path.exists() and key_path.is_file():
            cred = credentials.Certificate(str(key_path))
            firebase_admin.initialize_app(cred)
            logger.info(f"Firebase Admin SDK initialized with: {key_path.name}")
            return

    logger.warning("No Firebase service account key found! Token verification may fail.")
    firebase_admin.initialize_app()
    logger.info("Firebase Admin SDK initialized without credentials")


security = HTTPBearer()


class AuthenticatedUser:
    """Represents an authenticated user."""

    def __init__(self, uid: str, email: str | None = None, name: str | None = None):
        self.uid = uid
        self.email = email
        self.name = name

    def __repr__(self):
        return f"AuthenticatedUser(uid={self.uid}, email={self.email})"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthenticatedUser:
    """
    Verify the bearer token and return the authenticated user.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    token = credentials.credentials

    if get_settings().auth_dev_mode:
        logger.debug(f"Dev-mode user: {token}")
        return AuthenticatedUser(uid=token)

    _init_firebase()
    try:
        decoded_token = auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        raise _unauthorized("Token has expired")
    except auth.InvalidIdTokenError:
        logger.warning("Invalid Firebase token")
        raise _unauthorized("Invalid authentication token")
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.error(f"Authentication error: {e}")
        raise _unauthorized("Authentication failed")

    user = AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )
    logger.debug(f"Authenticated user: {user.uid} ({user.email})")
    return user
