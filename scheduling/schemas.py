"""Request schemas for the appointment endpoints.

The public booking form historically posted camelCase keys
(``customerName``, ``appointmentDate`` ...); both spellings are accepted.
Every field is checked in one pass so the client can render all form
errors at once.
"""
from datetime import date
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as SchemaError

from models.appointment import APPOINTMENT_STATUSES
from scheduling.errors import ValidationError
from scheduling.slots import parse_slot, slots_for


def _alias(snake: str, camel: str):
    return AliasChoices(snake, camel)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_time(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    minutes = parse_slot(value)
    if minutes is None:
        raise ValueError("Invalid time. Use a slot label like 9:00 AM")
    return minutes


def _check_vehicle_year(value):
    if value is None:
        return value
    max_year = date.today().year + 1
    if not 1900 <= value <= max_year:
        raise ValueError(f"Vehicle year must be between 1900 and {max_year}")
    return value


def _check_slot(minutes: int, day: Optional[date]):
    if day is None:
        return minutes
    allowed = slots_for(day)
    if not allowed:
        raise ValueError("Shop is closed on this day")
    if minutes not in allowed:
        raise ValueError("Time is not a bookable slot for this day")
    return minutes


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: str = Field(min_length=2, max_length=100, validation_alias=_alias("customer_name", "customerName"))
    email: EmailStr
    phone: str = Field(min_length=10, max_length=20)

    vehicle_make: Optional[str] = Field(default=None, max_length=50, validation_alias=_alias("vehicle_make", "vehicleMake"))
    vehicle_model: Optional[str] = Field(default=None, max_length=50, validation_alias=_alias("vehicle_model", "vehicleModel"))
    vehicle_year: Optional[int] = Field(default=None, validation_alias=_alias("vehicle_year", "vehicleYear"))

    service_type: str = Field(min_length=1, max_length=100, validation_alias=_alias("service_type", "serviceType"))

    appointment_date: date = Field(validation_alias=_alias("appointment_date", "appointmentDate"))
    # minutes since midnight, parsed from the slot label
    appointment_time: int = Field(validation_alias=_alias("appointment_time", "appointmentTime"))

    duration: int = Field(default=60, ge=30, le=240)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator(
        "vehicle_make", "vehicle_model", "vehicle_year", "notes", "duration",
        mode="before",
    )
    @classmethod
    def _optional_blank(cls, value, info: ValidationInfo):
        value = _blank_to_none(value)
        if value is None and info.field_name == "duration":
            return 60
        return value

    @field_validator("vehicle_year")
    @classmethod
    def _vehicle_year_range(cls, value):
        return _check_vehicle_year(value)

    @field_validator("appointment_date")
    @classmethod
    def _date_in_future(cls, value: date, info: ValidationInfo):
        today = (info.context or {}).get("today") or date.today()
        if value <= today:
            raise ValueError("Date must be in the future")
        return value

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _time_label(cls, value):
        return _parse_time(value)

    @field_validator("appointment_time")
    @classmethod
    def _time_is_slot(cls, value: int, info: ValidationInfo):
        return _check_slot(value, info.data.get("appointment_date"))


class AppointmentUpdate(BaseModel):
    """Admin edit: every field optional, no future-date rule."""

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: Optional[str] = Field(default=None, min_length=2, max_length=100, validation_alias=_alias("customer_name", "customerName"))
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=10, max_length=20)

    vehicle_make: Optional[str] = Field(default=None, max_length=50, validation_alias=_alias("vehicle_make", "vehicleMake"))
    vehicle_model: Optional[str] = Field(default=None, max_length=50, validation_alias=_alias("vehicle_model", "vehicleModel"))
    vehicle_year: Optional[int] = Field(default=None, validation_alias=_alias("vehicle_year", "vehicleYear"))

    service_type: Optional[str] = Field(default=None, min_length=1, max_length=100, validation_alias=_alias("service_type", "serviceType"))

    appointment_date: Optional[date] = Field(default=None, validation_alias=_alias("appointment_date", "appointmentDate"))
    appointment_time: Optional[int] = Field(default=None, validation_alias=_alias("appointment_time", "appointmentTime"))

    duration: Optional[int] = Field(default=None, ge=30, le=240)
    notes: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[str] = None

    @field_validator("vehicle_year")
    @classmethod
    def _vehicle_year_range(cls, value):
        return _check_vehicle_year(value)

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _time_label(cls, value):
        if value is None:
            return value
        return _parse_time(value)

    @field_validator("status")
    @classmethod
    def _known_status(cls, value):
        if value is not None and value not in APPOINTMENT_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(APPOINTMENT_STATUSES)}")
        return value


def schema_errors(exc: SchemaError) -> list[dict]:
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "body"
        message = err.get("msg", "Invalid value")
        ctx_error = (err.get("ctx") or {}).get("error")
        if err.get("type") == "value_error" and ctx_error is not None:
            message = str(ctx_error)
        details.append({"field": field, "message": message})
    return details


def parse_payload(schema, payload, **context):
    """Validate ``payload`` against ``schema`` or raise our ValidationError."""
    if not isinstance(payload, dict):
        raise ValidationError(details=[{"field": "body", "message": "JSON object required"}])
    try:
        return schema.model_validate(payload, context=context or None)
    except SchemaError as exc:
        raise ValidationError(details=schema_errors(exc)) from exc
