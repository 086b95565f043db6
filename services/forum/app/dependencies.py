import logging

import jwt
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import Settings

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return Settings()


def _decode_subject(token: str, settings: Settings) -> str:
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    subject = payload["sub"]
    if not isinstance(subject, str) or not subject:
        raise ValueError("Token subject must be a non-empty string")
    return subject


async def get_optional_viewer(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    settings: Settings = Depends(get_settings),
) -> str | None:
    """Returns the viewer's external (firebase) id, or None for anonymous requests.

    Invalid tokens are treated as anonymous: every read path here has a
    logged-out rendition.
    """
    if credentials is None:
        return None
    try:
        return _decode_subject(credentials.credentials, settings)
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        logger.debug("Ignoring invalid bearer token: %s", exc)
        return None


async def get_current_viewer(
    viewer: str | None = Depends(get_optional_viewer),
) -> str:
    if viewer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return viewer
