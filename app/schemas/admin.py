"""Admin auth schemas."""

from pydantic import BaseModel


class AdminLoginRequest(BaseModel):
    """Admin login with the master password."""

    password: str


class AdminLoginResponse(BaseModel):
    """Issued admin token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds
