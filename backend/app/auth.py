"""
Firebase authentication for FastAPI.

Verifies Firebase ID tokens and extracts user information. The Admin SDK
is initialized on first use so importing the app never needs credentials.
"""

import os
from pathlib import Path
import firebase_admin
from firebase_admin import auth, credentials
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import get_settings
from app.logging_config import get_logger

logger = get_logger(__name__)


def _init_firebase():
    try:
        firebase_admin.get_app()
        return  # Already initialized
    except ValueError:
        pass  # Need to initialize

    # __file__ = backend/app/auth.py -> .parent.parent = backend/
    backend_dir = Path(__file__).parent.parent

    possible_paths = []
    settings = get_settings()
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
    """Represents an authenticated user from Firebase."""

    def __init__(self, uid: str, email: str | None = None, name: str | None = None):
        self.uid = uid
        self.email = email
        self.name = name

    def __repr__(self):
        return f"AuthenticatedUser(uid={self.uid}, email={self.email})"


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthenticatedUser:
    """
    Verify Firebase ID token and return authenticated user.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    _init_firebase()

    try:
        decoded_token = auth.verify_id_token(credentials.credentials)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError:
        logger.warning("Invalid Firebase token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug(f"Authenticated user: {decoded_token['uid']}")

    return AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )
