"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from medgestor.config import settings
from medgestor.core.exceptions import UnauthorizedException
from medgestor.core.security import decode_access_token
from medgestor.database import get_db
from medgestor.services.appointment_repository import AppointmentRepository
from medgestor.services.appointment_scheduler import AppointmentScheduler
from medgestor.services.directories import (
    SqlInsurancePlanDirectory,
    SqlPatientDirectory,
    SqlUserDirectory,
)
from medgestor.services.interfaces import (
    AppointmentStore,
    InsurancePlanDirectory,
    PatientDirectory,
    UserDirectory,
)
from medgestor.services.time_normalizer import TimeNormalizer

# Security
security = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def get_appointment_store(db: DatabaseSession) -> AppointmentStore:
    """Appointment storage bound to the request's session."""
    return AppointmentRepository(db)


def get_user_directory(db: DatabaseSession) -> UserDirectory:
    """User directory bound to the request's session."""
    return SqlUserDirectory(db)


def get_patient_directory(db: DatabaseSession) -> PatientDirectory:
    """Patient directory bound to the request's session."""
    return SqlPatientDirectory(db)


def get_insurance_plan_directory(db: DatabaseSession) -> InsurancePlanDirectory:
    """Insurance plan directory bound to the request's session."""
    return SqlInsurancePlanDirectory(db)


@lru_cache
def get_time_normalizer() -> TimeNormalizer:
    """Shared time normalizer for the configured display timezone."""
    return TimeNormalizer(settings.app_timezone)


def get_scheduler(
    store: Annotated[AppointmentStore, Depends(get_appointment_store)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
    patients: Annotated[PatientDirectory, Depends(get_patient_directory)],
    insurance_plans: Annotated[InsurancePlanDirectory, Depends(get_insurance_plan_directory)],
    time_normalizer: Annotated[TimeNormalizer, Depends(get_time_normalizer)],
) -> AppointmentScheduler:
    """Build a scheduler wired to the request's collaborators."""
    return AppointmentScheduler(
        store=store,
        users=users,
        patients=patients,
        insurance_plans=insurance_plans,
        time_normalizer=time_normalizer,
    )


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        UnauthorizedException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedException("Token de autenticação ausente.")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException()

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise UnauthorizedException()

    try:
        return UUID(user_id_str)
    except ValueError:
        raise UnauthorizedException("Token com identificador de usuário inválido.")


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
) -> dict:
    """
    Get current user from the user directory.

    Raises:
        UnauthorizedException: If the user no longer exists
    """
    user = await users.find_user_by_id(user_id)
    if not user:
        raise UnauthorizedException("Usuário não encontrado.")
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[dict, Depends(get_current_user)]
Scheduler = Annotated[AppointmentScheduler, Depends(get_scheduler)]
