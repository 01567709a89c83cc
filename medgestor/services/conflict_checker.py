"""Double-booking detection for doctors."""

from datetime import datetime
from uuid import UUID

from medgestor.services.interfaces import AppointmentStore


class ConflictChecker:
    """Checks whether a doctor is already booked at an exact instant.

    Appointments are point bookings: only an identical instant collides.
    """

    def __init__(self, store: AppointmentStore):
        """Initialize with the appointment store."""
        self.store = store

    async def has_conflict(
        self,
        doctor_id: UUID,
        instant: datetime,
        exclude_appointment_id: UUID | None = None,
    ) -> bool:
        """
        Check for another appointment of the doctor at the same instant.

        Args:
            doctor_id: Doctor to check
            instant: Candidate UTC instant
            exclude_appointment_id: Appointment being updated, ignored in the check

        Returns:
            True if a different appointment already occupies the slot
        """
        existing = await self.store.find_many(
            {"doctor_id": doctor_id, "appointment_at": instant},
        )
        return any(row["id"] != exclude_appointment_id for row in existing)
