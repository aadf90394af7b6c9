import re
from datetime import date, time
from typing import Optional

# Monday = 0 ... Sunday = 6; None means the shop is closed
BUSINESS_HOURS = {
    0: (time(8, 0), time(18, 0)),
    1: (time(8, 0), time(18, 0)),
    2: (time(8, 0), time(18, 0)),
    3: (time(8, 0), time(18, 0)),
    4: (time(8, 0), time(18, 0)),
    5: (time(9, 0), time(16, 0)),
    6: None,
}

_LABEL_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_LABEL_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def hours_for(day: date):
    """Return the (open, close) pair for ``day`` or None when closed."""
    return BUSINESS_HOURS.get(day.weekday())


def generate_slots(open_time: time, close_time: time) -> list[int]:
    """Hourly start times from opening up to, not including, closing.

    Slots are minutes since midnight; the last one starts an hour before
    close so a 60 minute service finishes on time.
    """
    return [hour * 60 for hour in range(open_time.hour, close_time.hour)]


def slots_for(day: date) -> list[int]:
    hours = hours_for(day)
    if not hours:
        return []
    return generate_slots(*hours)


def format_slot(minutes: int) -> str:
    hour, minute = divmod(minutes, 60)
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {period}"


def parse_slot(label) -> Optional[int]:
    """Parse "9:00 AM", "09:00 am" or "14:00" into minutes since midnight."""
    if not isinstance(label, str):
        return None

    match = _LABEL_12H.match(label)
    if match:
        hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if not 1 <= hour <= 12 or minute > 59:
            return None
        hour = hour % 12
        if period == "PM":
            hour += 12
        return hour * 60 + minute

    match = _LABEL_24H.match(label)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            return None
        return hour * 60 + minute

    return None


def business_hours_json(day: date):
    hours = hours_for(day)
    if not hours:
        return None
    return {"open": hours[0].strftime("%H:%M"), "close": hours[1].strftime("%H:%M")}
