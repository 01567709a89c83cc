"""Read-only lookups of users, patients and insurance plans."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medgestor.models.insurance_plans import insurance_plans
from medgestor.models.patients import patients
from medgestor.models.users import users


class SqlUserDirectory:
    """User lookups used for doctor validation and authentication."""

    def __init__(self, db: AsyncSession):
        """Initialize directory with database session."""
        self.db = db

    async def find_user_by_id(self, user_id: UUID) -> dict[str, Any] | None:
        """Get user by ID."""
        query = select(users.c.id, users.c.name, users.c.email, users.c.role).where(
            users.c.id == user_id
        )
        result = await self.db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None


class SqlPatientDirectory:
    """Patient lookups."""

    def __init__(self, db: AsyncSession):
        """Initialize directory with database session."""
        self.db = db

    async def find_patient_by_id(self, patient_id: UUID) -> dict[str, Any] | None:
        """Get patient by ID."""
        query = select(patients.c.id, patients.c.name, patients.c.email).where(
            patients.c.id == patient_id
        )
        result = await self.db.execute(query)
        patient = result.mappings().first()
        return dict(patient) if patient else None


class SqlInsurancePlanDirectory:
    """Insurance plan lookups."""

    def __init__(self, db: AsyncSession):
        """Initialize directory with database session."""
        self.db = db

    async def find_insurance_plan_by_id(self, plan_id: UUID) -> dict[str, Any] | None:
        """Get insurance plan by ID."""
        query = select(insurance_plans.c.id, insurance_plans.c.name).where(
            insurance_plans.c.id == plan_id
        )
        result = await self.db.execute(query)
        plan = result.mappings().first()
        return dict(plan) if plan else None
