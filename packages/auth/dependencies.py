from typing import Annotated, Optional
from fastapi import Depends, HTTPException, status, Header

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.auth.providers.factory import get_sso_provider
from packages.auth.providers.interface import SSOProviderInterface

logger = get_logger(__name__)


def get_auth_provider() -> SSOProviderInterface:
    return get_sso_provider()


@trace_span
async def authenticate_token(
    token: str, provider: Optional[SSOProviderInterface] = None
) -> AuthenticatedUser:
    """Resolve a bearer token to a user. Raises 401 HTTPException on failure."""
    provider = provider or get_auth_provider()
    user_id = await provider.get_provider_user_id_from_token(token)
    return AuthenticatedUser(user_id=user_id)


@trace_span
async def get_current_user(
    authorization: Annotated[Optional[str], Header()] = None,
    provider: SSOProviderInterface = Depends(get_auth_provider),
) -> AuthenticatedUser:
    """Get current authenticated user from the Firebase ID token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]
    return await authenticate_token(token, provider)


@trace_span
async def get_current_active_user(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    logger.debug(f"Authenticated user_id={current_user.user_id}")
    return current_user
