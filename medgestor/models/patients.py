"""Patient model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID

from medgestor.models.base import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")),
    Column("name", Text, nullable=False),
    Column("cpf", String(14), nullable=False, unique=True),
    Column("email", Text),
    Column("phone", String(20)),
    Column("birth_date", Date),
    Column("allergies", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
)
