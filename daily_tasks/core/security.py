from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from daily_tasks.core.config import settings
from daily_tasks.schemas.user import CloudUser

def create_access_token(user_id: str, email: str, full_name: Optional[str] = None, expire_min: int = 60) -> str:
    #token au format du fournisseur d'identité (utilisé en dev et dans les tests)
    metadata = {"email": email}
    if full_name:
        metadata["full_name"] = full_name
    payload = {
        "sub": user_id,
        "email": email,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "role": "authenticated",
        "user_metadata": metadata,
        "exp": datetime.utcnow() + timedelta(minutes=expire_min),
    }
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm="HS256")

def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError:
        return None

def display_name_from(email: Optional[str], metadata: Optional[dict]) -> str:
    """full_name, then name, then the local part of the email, then "user"."""
    metadata = metadata or {}
    if metadata.get("full_name"):
        return metadata["full_name"]
    if metadata.get("name"):
        return metadata["name"]
    if email:
        return email.split("@")[0]
    return "user"

def user_from_claims(claims: dict) -> Optional[CloudUser]:
    user_id = claims.get("sub")
    if not user_id:
        return None
    metadata = claims.get("user_metadata") or {}
    email = claims.get("email") or metadata.get("email") or ""
    return CloudUser(id=user_id, email=email, display_name=display_name_from(email, metadata))

def decode_token(token: str) -> Optional[CloudUser]:
    payload = verify_token(token)
    if payload is None:
        return None
    return user_from_claims(payload)
