"""Database models."""

from medgestor.models.appointments import appointments
from medgestor.models.base import metadata
from medgestor.models.insurance_plans import insurance_plans
from medgestor.models.patients import patients
from medgestor.models.users import users

__all__ = [
    "appointments",
    "insurance_plans",
    "metadata",
    "patients",
    "users",
]
