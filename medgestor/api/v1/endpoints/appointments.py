"""Appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from medgestor.dependencies import CurrentUser, Scheduler
from medgestor.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentType,
    AppointmentUpdate,
    AppointmentView,
)

router = APIRouter()


@router.post(
    "",
    response_model=AppointmentView,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Create new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: CurrentUser,
    scheduler: Scheduler,
) -> AppointmentView:
    """
    Schedule an appointment for a doctor and a patient.

    Args:
        data: Appointment creation data, date as ``dd/mm/yyyy hh:mm``
        current_user: Authenticated user
        scheduler: Appointment scheduler

    Returns:
        Created appointment
    """
    return await scheduler.create_appointment(
        doctor_id=data.doctor_id,
        patient_id=data.patient_id,
        raw_date=data.date,
        appointment_type=data.type,
        insurance=data.insurance,
        insurance_plan_id=data.insurance_plan_id,
    )


@router.get(
    "",
    response_model=list[AppointmentView],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    current_user: CurrentUser,
    scheduler: Scheduler,
    appointment_type: AppointmentType | None = Query(None, alias="type"),
    doctor_id: UUID | None = Query(None, alias="doctorId"),
    patient_id: UUID | None = Query(None, alias="patientId"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
) -> list[AppointmentView]:
    """
    List appointments ordered by date.

    Args:
        current_user: Authenticated user
        scheduler: Appointment scheduler
        appointment_type: Filter by type
        doctor_id: Filter by doctor ID
        patient_id: Filter by patient ID
        start_date: Earliest local date, ``dd/mm/yyyy hh:mm``
        end_date: Latest local date, ``dd/mm/yyyy hh:mm``

    Returns:
        Matching appointments
    """
    filters = AppointmentFilters(
        appointment_type=appointment_type,
        doctor_id=doctor_id,
        patient_id=patient_id,
        start_date=start_date,
        end_date=end_date,
    )
    return await scheduler.list_appointments(filters)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentView,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    scheduler: Scheduler,
) -> AppointmentView:
    """
    Get a specific appointment by ID.

    Raises:
        NotFoundException: If appointment not found
    """
    return await scheduler.get_appointment(appointment_id)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentView,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    current_user: CurrentUser,
    scheduler: Scheduler,
) -> AppointmentView:
    """
    Update an existing appointment. Omitted fields are left unchanged.

    Args:
        appointment_id: Appointment ID
        data: Fields to replace
        current_user: Authenticated user
        scheduler: Appointment scheduler

    Returns:
        Updated appointment
    """
    return await scheduler.update_appointment(appointment_id, data.changes())


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Appointments"],
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    scheduler: Scheduler,
) -> None:
    """
    Permanently delete an appointment.

    Raises:
        NotFoundException: If appointment not found
    """
    await scheduler.delete_appointment(appointment_id)
