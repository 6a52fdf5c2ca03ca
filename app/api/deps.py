"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.services.routines import RoutineCatalog, get_routine_catalog
from app.services.tracing import InvocationEngine
from app.services.type_catalog import get_type_catalog
from app.utils.jwt import decode_access_token, is_admin_token

__all__ = [
    "get_db",
    "AsyncSession",
    "require_admin",
    "get_catalog",
    "get_invocation_engine",
]

# Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def require_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> bool:
    """Verify admin JWT token. Raises 401/403 if not admin."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not is_admin_token(payload):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    return True


def get_catalog() -> RoutineCatalog:
    """The routine catalog traces resolve against."""
    return get_routine_catalog()


def get_invocation_engine(
    catalog: Annotated[RoutineCatalog, Depends(get_catalog)],
) -> InvocationEngine:
    """Build an invocation engine from settings and the catalogs."""
    settings = get_settings()
    return InvocationEngine(
        catalog,
        get_type_catalog(),
        search_path=settings.routine_search_path,
        unknown_label=settings.trace_unknown_label,
    )
