"""SQLAlchemy Core storage for appointments."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medgestor.core.exceptions import DuplicateBookingError
from medgestor.models.appointments import APPOINTMENTS_DOCTOR_INSTANT_KEY, appointments


class AppointmentRepository:
    """Appointment persistence backed by the ``appointments`` table."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    def _conditions(self, criteria: dict[str, Any]) -> list:
        return [appointments.c[column] == value for column, value in criteria.items()]

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        """Insert an appointment and return the stored row."""
        stmt = insert(appointments).values(**values).returning(appointments)
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except IntegrityError as e:
            await self._raise_duplicate_or_reraise(e)

        return dict(result.mappings().one())

    async def find_one(self, criteria: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first row matching all ``criteria`` columns."""
        stmt = select(appointments).where(*self._conditions(criteria)).limit(1)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def find_many(
        self,
        criteria: dict[str, Any],
        *,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Return matching rows ordered by appointment instant."""
        conditions = self._conditions(criteria)
        if starts_at is not None:
            conditions.append(appointments.c.appointment_at >= starts_at)
        if ends_at is not None:
            conditions.append(appointments.c.appointment_at <= ends_at)

        stmt = (
            select(appointments)
            .where(*conditions)
            .order_by(appointments.c.appointment_at.asc())
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def update_by_id(
        self, appointment_id: UUID, values: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Update a row and return it, or None if it does not exist."""
        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**values)
            .returning(appointments)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except IntegrityError as e:
            await self._raise_duplicate_or_reraise(e)

        row = result.mappings().first()
        return dict(row) if row else None

    async def delete_by_id(self, appointment_id: UUID) -> bool:
        """Hard delete a row. Returns False if nothing matched."""
        stmt = delete(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount > 0

    async def _raise_duplicate_or_reraise(self, error: IntegrityError) -> None:
        await self.db.rollback()
        error_msg = str(error.orig) if hasattr(error, "orig") else str(error)
        if APPOINTMENTS_DOCTOR_INSTANT_KEY in error_msg:
            raise DuplicateBookingError(error_msg) from error
        raise error
