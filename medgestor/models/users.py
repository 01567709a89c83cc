"""User model definition using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID

from medgestor.models.base import metadata

# Owned by the user directory; the scheduler only reads id, name and role.
users = Table(
    "users",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("role", String(20), nullable=False),
    # Medical council registration, doctors only
    Column("crm", String(20)),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
    CheckConstraint(
        "role IN ('admin', 'doctor', 'secretary')",
        name="users_role_check",
    ),
)
