"""Admin API endpoints."""

from fastapi import APIRouter, HTTPException, status

from app.config import get_settings
from app.schemas.admin import AdminLoginRequest, AdminLoginResponse
from app.utils.jwt import create_admin_access_token

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/auth/login", response_model=AdminLoginResponse)
async def admin_login(request: AdminLoginRequest) -> AdminLoginResponse:
    """Admin login with master password."""
    settings = get_settings()

    if not settings.admin_master_password:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin access not configured",
        )

    if request.password != settings.admin_master_password:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
        )

    token = create_admin_access_token()

    return AdminLoginResponse(
        access_token=token,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )
