from .errors import (
    SchedulingError,
    ValidationError,
    ConflictError,
    NotFoundError,
    ForbiddenError,
    InvalidTransitionError,
)
from .slots import BUSINESS_HOURS, generate_slots, slots_for, format_slot, parse_slot
from .availability import get_available_slots, parse_day
from .booking import create_appointment
from .lifecycle import set_status, cancel_appointment, update_appointment, delete_appointment
