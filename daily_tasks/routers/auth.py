from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional

from daily_tasks.core.config import settings
from daily_tasks.core.deps import require_cloud, get_bearer_token, get_current_user
from daily_tasks.schemas.user import CloudUser, LoginUrlResponse, LogoutResponse
from daily_tasks.services import identity_service

router = APIRouter(prefix="/auth", tags=["auth"])

@router.get("/login-url", response_model=LoginUrlResponse, dependencies=[Depends(require_cloud)])
def login_url(redirect_to: Optional[str] = Query(None)):
    """URL de connexion Google (OAuth délégué, avec accès calendrier)"""
    return LoginUrlResponse(
        url=identity_service.authorize_url(redirect_to),
        scopes=settings.CALENDAR_SCOPE,
    )

@router.get("/session", response_model=CloudUser)
def session(current_user: CloudUser = Depends(get_current_user)):
    """Utilisateur de la session courante"""
    return current_user

@router.post("/logout", response_model=LogoutResponse)
def logout(
    current_user: CloudUser = Depends(get_current_user),
    token: str = Depends(get_bearer_token),
):
    """Révoque la session chez le fournisseur d'identité"""
    try:
        identity_service.sign_out(token)
    except identity_service.IdentityError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Sign out failed")
    return LogoutResponse(signed_out=True)
