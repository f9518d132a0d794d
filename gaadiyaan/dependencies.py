# gaadiyaan/dependencies.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from . import crud
from .config import Settings, settings
from .db import get_db
from .exceptions import AuthenticationError, PermissionDenied
from .security import decode_access_token
from .uploads import ImageStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login", auto_error=False)


@dataclass
class Identity:
    """An authenticated caller."""
    id: int
    role: str
    dealer_id: Optional[str] = None


def get_settings() -> Settings:
    return settings


def get_image_store(config: Settings = Depends(get_settings)) -> ImageStore:
    return ImageStore(
        root=config.upload_root,
        public_base_url=config.public_base_url,
        url_path=config.upload_url_path,
        max_bytes=config.max_upload_bytes,
    )


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
) -> Identity:
    """
    Resolve the bearer token to the calling user.

    Usage in routes:
        identity: Identity = Depends(get_current_user)
    """
    if not token:
        raise AuthenticationError("Not authenticated")
    payload = decode_access_token(token, config)
    if payload is None or payload.get("sub") is None:
        raise AuthenticationError("Could not validate credentials")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Could not validate credentials")
    user = crud.get_user(db, user_id)
    if user is None:
        raise AuthenticationError("Could not validate credentials")
    return Identity(id=user.id, role=user.role, dealer_id=user.dealer_id)


def require_roles(*roles: str):
    """Dependency factory accepting only callers with one of `roles`."""
    def dependency(identity: Identity = Depends(get_current_user)) -> Identity:
        if identity.role not in roles:
            raise PermissionDenied("Not authorized to perform this action")
        return identity
    return dependency
