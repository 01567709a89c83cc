"""Appointment scheduling business logic."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog

from medgestor.core.exceptions import (
    BadRequestException,
    ConflictException,
    DuplicateBookingError,
    NotFoundException,
)
from medgestor.schemas.appointments import (
    AppointmentFilters,
    AppointmentType,
    AppointmentView,
    InsurancePlanSummary,
    PersonSummary,
)
from medgestor.services.conflict_checker import ConflictChecker
from medgestor.services.interfaces import (
    AppointmentStore,
    InsurancePlanDirectory,
    PatientDirectory,
    UserDirectory,
)
from medgestor.services.time_normalizer import TimeNormalizer

logger = structlog.get_logger()

DOCTOR_ROLE = "doctor"
INSURANCE_PLAN_REQUIRED = "O ID do plano de saúde é obrigatório quando a consulta é por convênio."


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class AppointmentScheduler:
    """Creates, lists, updates and deletes appointments.

    Every invariant is checked before the single storage write of an
    operation, so a failed request never leaves a record behind.
    """

    def __init__(
        self,
        store: AppointmentStore,
        users: UserDirectory,
        patients: PatientDirectory,
        insurance_plans: InsurancePlanDirectory,
        time_normalizer: TimeNormalizer,
        conflict_checker: ConflictChecker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the scheduler with its collaborators."""
        self.store = store
        self.users = users
        self.patients = patients
        self.insurance_plans = insurance_plans
        self.time_normalizer = time_normalizer
        self.conflict_checker = conflict_checker or ConflictChecker(store)
        self.clock = clock

    async def create_appointment(
        self,
        doctor_id: UUID,
        patient_id: UUID,
        raw_date: str,
        appointment_type: AppointmentType | str,
        insurance: bool,
        insurance_plan_id: UUID | None = None,
    ) -> AppointmentView:
        """
        Schedule a new appointment.

        Args:
            doctor_id: User ID of the doctor
            patient_id: Patient ID
            raw_date: Local date and time, ``dd/mm/yyyy hh:mm``
            appointment_type: ``initial`` or ``return``
            insurance: Whether the appointment is covered by an insurance plan
            insurance_plan_id: Plan covering the appointment, required when insured

        Returns:
            The created appointment

        Raises:
            MalformedDateException: If the date cannot be parsed
            PastDateException: If the date is not in the future
            NotFoundException: If the doctor, patient or plan does not exist
            BadRequestException: If an insured appointment has no plan
            ConflictException: If the doctor is already booked at that instant
        """
        instant = self.time_normalizer.parse_and_validate(raw_date, self.clock())
        doctor = await self._require_doctor(doctor_id)
        patient = await self._require_patient(patient_id)

        plan = None
        if insurance:
            if insurance_plan_id is None:
                raise BadRequestException(INSURANCE_PLAN_REQUIRED)
            plan = await self._require_insurance_plan(insurance_plan_id)

        if await self.conflict_checker.has_conflict(doctor_id, instant):
            self._log_conflict(doctor_id, instant)
            raise ConflictException()

        now = self.clock()
        values = {
            "id": uuid4(),
            "doctor_id": doctor_id,
            "patient_id": patient_id,
            "appointment_at": instant,
            "type": AppointmentType(appointment_type).value,
            "insurance": insurance,
            "insurance_plan_id": insurance_plan_id if insurance else None,
            "created_at": now,
            "updated_at": now,
        }

        try:
            row = await self.store.insert(values)
        except DuplicateBookingError as e:
            self._log_conflict(doctor_id, instant)
            raise ConflictException() from e

        view = self._to_view(row, doctor, patient, plan)
        logger.info(
            "appointment_created",
            appointment_id=str(view.id),
            doctor_id=str(doctor_id),
            patient_id=str(patient_id),
            date=view.date,
        )
        return view

    async def list_appointments(self, filters: AppointmentFilters) -> list[AppointmentView]:
        """
        List appointments matching the filters, ordered by date.

        Args:
            filters: Optional type, doctor, patient and local date range

        Returns:
            Matching appointments with doctor/patient display fields

        Raises:
            MalformedDateException: If a date bound cannot be parsed
        """
        criteria: dict[str, Any] = {}
        if filters.appointment_type:
            criteria["type"] = filters.appointment_type.value
        if filters.doctor_id:
            criteria["doctor_id"] = filters.doctor_id
        if filters.patient_id:
            criteria["patient_id"] = filters.patient_id

        starts_at = self.time_normalizer.parse(filters.start_date) if filters.start_date else None
        ends_at = self.time_normalizer.parse(filters.end_date) if filters.end_date else None

        rows = await self.store.find_many(criteria, starts_at=starts_at, ends_at=ends_at)

        # Lookups are memoized for this call only
        doctors: dict[UUID, dict | None] = {}
        patients: dict[UUID, dict | None] = {}
        plans: dict[UUID, dict | None] = {}

        views = []
        for row in rows:
            if row["doctor_id"] not in doctors:
                doctors[row["doctor_id"]] = await self.users.find_user_by_id(row["doctor_id"])
            if row["patient_id"] not in patients:
                patients[row["patient_id"]] = await self.patients.find_patient_by_id(
                    row["patient_id"]
                )
            plan = None
            plan_id = row.get("insurance_plan_id")
            if plan_id is not None:
                if plan_id not in plans:
                    plans[plan_id] = await self.insurance_plans.find_insurance_plan_by_id(plan_id)
                plan = plans[plan_id]

            views.append(
                self._to_view(row, doctors[row["doctor_id"]], patients[row["patient_id"]], plan)
            )

        return views

    async def get_appointment(self, appointment_id: UUID) -> AppointmentView:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        row = await self._require_appointment(appointment_id)
        return await self._hydrate(row)

    async def update_appointment(
        self, appointment_id: UUID, changes: dict[str, Any]
    ) -> AppointmentView:
        """
        Apply a partial update to an appointment.

        Only the keys present in ``changes`` are replaced. A new date or doctor
        is re-validated and re-checked for conflicts, ignoring the appointment
        itself.

        Args:
            appointment_id: Appointment ID
            changes: Subset of ``doctor_id``, ``patient_id``, ``date``, ``type``,
                ``insurance`` and ``insurance_plan_id``

        Returns:
            Updated appointment

        Raises:
            NotFoundException: If the appointment or a referenced entity is missing
            MalformedDateException: If the new date cannot be parsed
            PastDateException: If the new date is not in the future
            BadRequestException: If an insured appointment ends up without a plan
            ConflictException: If the doctor is already booked at the new instant
        """
        current = await self._require_appointment(appointment_id)
        update_values: dict[str, Any] = {}

        raw_date = changes.get("date")
        if raw_date is not None:
            update_values["appointment_at"] = self.time_normalizer.parse_and_validate(
                raw_date, self.clock()
            )

        doctor_id = changes.get("doctor_id")
        if doctor_id is not None:
            await self._require_doctor(doctor_id)
            update_values["doctor_id"] = doctor_id

        patient_id = changes.get("patient_id")
        if patient_id is not None:
            await self._require_patient(patient_id)
            update_values["patient_id"] = patient_id

        appointment_type = changes.get("type")
        if appointment_type is not None:
            update_values["type"] = AppointmentType(appointment_type).value

        update_values.update(await self._resolve_insurance(current, changes))

        target_doctor = update_values.get("doctor_id", current["doctor_id"])
        target_instant = update_values.get("appointment_at", current["appointment_at"])
        if "appointment_at" in update_values or "doctor_id" in update_values:
            if await self.conflict_checker.has_conflict(
                target_doctor, target_instant, exclude_appointment_id=appointment_id
            ):
                self._log_conflict(target_doctor, target_instant)
                raise ConflictException()

        if not update_values:
            return await self._hydrate(current)

        update_values["updated_at"] = self.clock()

        try:
            row = await self.store.update_by_id(appointment_id, update_values)
        except DuplicateBookingError as e:
            self._log_conflict(target_doctor, target_instant)
            raise ConflictException() from e

        if row is None:
            raise NotFoundException("appointment")

        logger.info(
            "appointment_updated",
            appointment_id=str(appointment_id),
            fields=sorted(k for k in update_values if k != "updated_at"),
        )
        return await self._hydrate(row)

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """
        Permanently delete an appointment.

        Raises:
            NotFoundException: If appointment not found
        """
        if not await self.store.delete_by_id(appointment_id):
            raise NotFoundException("appointment")

        logger.info("appointment_deleted", appointment_id=str(appointment_id))

    async def _resolve_insurance(
        self, current: dict[str, Any], changes: dict[str, Any]
    ) -> dict[str, Any]:
        """Compute the insurance columns an update should write."""
        plan_id = changes.get("insurance_plan_id")
        insurance = changes.get("insurance")

        if insurance is None:
            # Plan can only be swapped on an insured appointment
            if plan_id is None:
                return {}
            await self._require_insurance_plan(plan_id)
            if not current["insurance"]:
                return {}
            return {"insurance_plan_id": plan_id}

        if not insurance:
            return {"insurance": False, "insurance_plan_id": None}

        plan_id = plan_id or current.get("insurance_plan_id")
        if plan_id is None:
            raise BadRequestException(INSURANCE_PLAN_REQUIRED)
        await self._require_insurance_plan(plan_id)
        return {"insurance": True, "insurance_plan_id": plan_id}

    async def _require_appointment(self, appointment_id: UUID) -> dict[str, Any]:
        row = await self.store.find_one({"id": appointment_id})
        if row is None:
            raise NotFoundException("appointment")
        return row

    async def _require_doctor(self, doctor_id: UUID) -> dict[str, Any]:
        doctor = await self.users.find_user_by_id(doctor_id)
        if doctor is None or doctor.get("role") != DOCTOR_ROLE:
            raise NotFoundException("doctor")
        return doctor

    async def _require_patient(self, patient_id: UUID) -> dict[str, Any]:
        patient = await self.patients.find_patient_by_id(patient_id)
        if patient is None:
            raise NotFoundException("patient")
        return patient

    async def _require_insurance_plan(self, plan_id: UUID) -> dict[str, Any]:
        plan = await self.insurance_plans.find_insurance_plan_by_id(plan_id)
        if plan is None:
            raise NotFoundException("insurance_plan")
        return plan

    async def _hydrate(self, row: dict[str, Any]) -> AppointmentView:
        """Attach directory display fields to a stored row."""
        doctor = await self.users.find_user_by_id(row["doctor_id"])
        patient = await self.patients.find_patient_by_id(row["patient_id"])
        plan = None
        if row.get("insurance_plan_id") is not None:
            plan = await self.insurance_plans.find_insurance_plan_by_id(row["insurance_plan_id"])
        return self._to_view(row, doctor, patient, plan)

    def _to_view(
        self,
        row: dict[str, Any],
        doctor: dict[str, Any] | None,
        patient: dict[str, Any] | None,
        plan: dict[str, Any] | None,
    ) -> AppointmentView:
        instant = row["appointment_at"]
        return AppointmentView(
            id=row["id"],
            doctor_id=row["doctor_id"],
            patient_id=row["patient_id"],
            date=self.time_normalizer.format(instant),
            date_only=self.time_normalizer.format_date(instant),
            time_only=self.time_normalizer.format_time(instant),
            type=row["type"],
            insurance=row["insurance"],
            insurance_plan_id=row.get("insurance_plan_id"),
            doctor=_summary(PersonSummary, doctor),
            patient=_summary(PersonSummary, patient),
            insurance_plan=_summary(InsurancePlanSummary, plan),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    def _log_conflict(doctor_id: UUID, instant: datetime) -> None:
        logger.info(
            "appointment_conflict",
            doctor_id=str(doctor_id),
            appointment_at=instant.isoformat(),
        )


def _summary(model: type, record: dict[str, Any] | None) -> Any:
    if record is None:
        return None
    return model(id=record["id"], name=record["name"])
