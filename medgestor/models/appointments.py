"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from medgestor.models.base import metadata

APPOINTMENTS_DOCTOR_INSTANT_KEY = "uq_appointments_doctor_id_appointment_at"

appointments = Table(
    "appointments",
    metadata,
    Column(
        "id",
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    # References
    Column(
        "doctor_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "patient_id",
        UUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "insurance_plan_id",
        UUID(as_uuid=True),
        ForeignKey("insurance_plans.id", ondelete="SET NULL"),
        nullable=True,
    ),
    # Appointment details, stored in UTC
    Column("appointment_at", TIMESTAMP(timezone=True), nullable=False, index=True),
    Column("type", Text, nullable=False),
    Column("insurance", Boolean, nullable=False, server_default=text("false")),
    # Audit fields
    Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()")),
    # Constraints
    CheckConstraint(
        "type IN ('initial', 'return')",
        name="appointments_type_check",
    ),
    # Concurrent inserts that both pass the service pre-check fail here
    UniqueConstraint("doctor_id", "appointment_at", name=APPOINTMENTS_DOCTOR_INSTANT_KEY),
)
