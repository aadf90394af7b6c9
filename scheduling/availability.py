import logging
from datetime import date

from scheduling.errors import ValidationError
from scheduling.repository import find_appointments_by_date
from scheduling.slots import slots_for

logger = logging.getLogger(__name__)


def parse_day(value, field: str = "date") -> date:
    """Parse a YYYY-MM-DD query value."""
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field} parameter is required", details=[{"field": field, "message": "Required"}])
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(
            "Invalid date format. Use YYYY-MM-DD",
            details=[{"field": field, "message": "Invalid date format. Use YYYY-MM-DD"}],
        ) from None


def get_available_slots(day: date) -> list[int]:
    """Generated slots for ``day`` minus those held by non-cancelled appointments.

    Keeps generation order. Closed days return an empty list without
    touching the database.
    """
    slots = slots_for(day)
    if not slots:
        return []

    taken = {a.start_minutes for a in find_appointments_by_date(day)}
    available = [s for s in slots if s not in taken]
    logger.debug("availability %s: %d of %d slots open", day.isoformat(), len(available), len(slots))
    return available
