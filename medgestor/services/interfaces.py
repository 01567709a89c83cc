"""Storage and directory ports consumed by the scheduling services.

Records are plain dicts keyed by column name, the same shape returned by
``result.mappings()`` on the SQLAlchemy Core tables.
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class AppointmentStore(Protocol):
    """Persistence operations over the appointments table."""

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert an appointment and return the stored row.

        Raises:
            DuplicateBookingError: If the doctor already has a row at that instant
        """
        ...

    async def find_one(self, criteria: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first row whose columns equal ``criteria``."""
        ...

    async def find_many(
        self,
        criteria: dict[str, Any],
        *,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Return rows matching ``criteria`` within an inclusive instant range."""
        ...

    async def update_by_id(
        self, appointment_id: UUID, values: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Update a row and return it, or None if it does not exist.

        Raises:
            DuplicateBookingError: If the change collides with another booking
        """
        ...

    async def delete_by_id(self, appointment_id: UUID) -> bool:
        """Hard delete a row. Returns False if nothing was deleted."""
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """Read-only lookup of clinic users (``id``, ``name``, ``role``)."""

    async def find_user_by_id(self, user_id: UUID) -> dict[str, Any] | None: ...


@runtime_checkable
class PatientDirectory(Protocol):
    """Read-only lookup of patients (``id``, ``name``)."""

    async def find_patient_by_id(self, patient_id: UUID) -> dict[str, Any] | None: ...


@runtime_checkable
class InsurancePlanDirectory(Protocol):
    """Read-only lookup of insurance plans (``id``, ``name``)."""

    async def find_insurance_plan_by_id(self, plan_id: UUID) -> dict[str, Any] | None: ...
