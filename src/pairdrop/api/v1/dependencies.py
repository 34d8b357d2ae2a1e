"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends

from pairdrop.services.session import SessionService, get_session_service


def get_session_service_dep() -> SessionService:
    """Return a session service over the configured storage root."""
    return get_session_service()


# Type alias for session service dependency
SessionServiceDep = Annotated[SessionService, Depends(get_session_service_dep)]
