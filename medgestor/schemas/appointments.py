"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class AppointmentType(str, Enum):
    """Appointment type enumeration."""

    INITIAL = "initial"
    RETURN = "return"


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON with the browser client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AppointmentCreate(CamelModel):
    """Schema for creating a new appointment."""

    doctor_id: UUID
    patient_id: UUID
    date: str = Field(..., description="Local date and time, dd/mm/yyyy hh:mm")
    type: AppointmentType
    insurance: bool
    insurance_plan_id: UUID | None = None

    @field_validator("insurance_plan_id", mode="before")
    @classmethod
    def blank_plan_to_none(cls, v: Any) -> Any:
        """The client sends an empty string when no plan is selected."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


# insurance_plan_id may be sent as null to clear the plan
NON_NULLABLE_UPDATE_FIELDS = ("doctor_id", "patient_id", "date", "type", "insurance")


class AppointmentUpdate(CamelModel):
    """Schema for a partial appointment update. Omitted fields are kept."""

    doctor_id: UUID | None = None
    patient_id: UUID | None = None
    date: str | None = None
    type: AppointmentType | None = None
    insurance: bool | None = None
    insurance_plan_id: UUID | None = None

    @field_validator("insurance_plan_id", mode="before")
    @classmethod
    def blank_plan_to_none(cls, v: Any) -> Any:
        """The client sends an empty string when no plan is selected."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def require_any_field(self) -> "AppointmentUpdate":
        """Reject empty update bodies."""
        if not self.model_fields_set:
            raise ValueError("Informe ao menos um campo para atualizar.")
        for name in NON_NULLABLE_UPDATE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"O campo {to_camel(name)} não pode ser nulo.")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent by the client."""
        return self.model_dump(exclude_unset=True)


class AppointmentFilters(BaseModel):
    """Schema for appointment filtering."""

    appointment_type: AppointmentType | None = None
    doctor_id: UUID | None = None
    patient_id: UUID | None = None
    start_date: str | None = None
    end_date: str | None = None


class PersonSummary(CamelModel):
    """Minimal doctor/patient display fields."""

    id: UUID
    name: str


class InsurancePlanSummary(CamelModel):
    """Minimal insurance plan display fields."""

    id: UUID
    name: str


class AppointmentView(CamelModel):
    """Presentation-ready appointment with its instant formatted for display."""

    id: UUID
    doctor_id: UUID
    patient_id: UUID
    date: str
    date_only: str
    time_only: str
    type: AppointmentType
    insurance: bool
    insurance_plan_id: UUID | None = None
    doctor: PersonSummary | None = None
    patient: PersonSummary | None = None
    insurance_plan: InsurancePlanSummary | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
