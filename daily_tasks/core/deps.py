import logging
from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional

from daily_tasks.core.config import settings
from daily_tasks.core.database import get_db
from daily_tasks.core.security import decode_token
from daily_tasks.schemas.user import CloudUser
from daily_tasks.services.schema_capabilities import SchemaCapabilities, get_capabilities

logger = logging.getLogger(__name__)

CLOUD_NOT_CONFIGURED = "Cloud backend is not configured: set BACKEND_URL and BACKEND_PUBLIC_KEY"


def require_cloud() -> None:
    if not settings.cloud_ready:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=CLOUD_NOT_CONFIGURED)


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    return authorization.replace("Bearer ", "")


def get_current_user(
    _: None = Depends(require_cloud),
    token: str = Depends(get_bearer_token),
) -> CloudUser:
    user = decode_token(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


def get_caps(
    _: None = Depends(require_cloud),
    db: Session = Depends(get_db),
) -> SchemaCapabilities:
    # hors mode cloud la table n'est jamais créée : require_cloud passe avant l'inspection
    try:
        return get_capabilities(db.get_bind())
    except SQLAlchemyError as e:
        logger.error(f"[schema] cannot inspect tasks table: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
