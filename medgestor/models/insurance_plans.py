"""Insurance plan model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID

from medgestor.models.base import metadata

insurance_plans = Table(
    "insurance_plans",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")),
    Column("name", Text, nullable=False, unique=True),
    Column("description", Text),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=text("NOW()")),
)
