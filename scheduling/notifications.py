import logging

from flask import current_app

from scheduling.slots import format_slot
from utils.emailer import send_email

logger = logging.getLogger(__name__)

_STATUS_LINES = {
    "confirmed": "Your appointment is confirmed. See you then!",
    "cancelled": "Your appointment has been cancelled. Book a new time any time on our website.",
    "completed": "Thanks for visiting us. Your service is complete.",
    "no_show": "We missed you at your appointment. Please book a new time if you still need service.",
    "pending": "Your appointment is pending review. We will contact you shortly to confirm.",
}


def _when(appt) -> str:
    return f"{appt.appointment_date.strftime('%A, %B %d, %Y')} at {format_slot(appt.start_minutes)}"


def _send(to_email: str, subject: str, body: str, kind: str, appointment_id: str, reply_to=None) -> bool:
    ok, error = send_email(to_email, subject, body, reply_to=reply_to)
    if not ok:
        # unconfigured SMTP is normal in development
        logger.debug("%s email for appointment %s not sent: %s", kind, appointment_id, error)
    return ok


def notify_booking_created(appt) -> dict:
    shop = current_app.config.get("SHOP_NAME", "Auto Shop")
    body = (
        f"Hi {appt.customer_name},\n\n"
        f"We received your request for {appt.service_type} on {_when(appt)}.\n"
        "We will contact you shortly to confirm.\n\n"
        f"Thank you,\n{shop}"
    )
    sent = {"customer": _send(appt.email, f"{shop}: appointment request received", body, "booking", appt.id)}

    shop_inbox = current_app.config.get("NOTIFY_EMAIL")
    if shop_inbox:
        vehicle = " ".join(str(v) for v in (appt.vehicle_year, appt.vehicle_make, appt.vehicle_model) if v) or "n/a"
        shop_body = (
            f"New appointment {appt.id}\n\n"
            f"Customer: {appt.customer_name} <{appt.email}> {appt.phone}\n"
            f"Service: {appt.service_type}\n"
            f"Vehicle: {vehicle}\n"
            f"When: {_when(appt)} ({appt.duration} min)\n"
            f"Notes: {appt.notes or '-'}\n"
        )
        sent["shop"] = _send(
            shop_inbox, f"New appointment: {appt.customer_name}", shop_body, "shop", appt.id,
            reply_to=appt.email,
        )
    return sent


def notify_status_changed(appt) -> bool:
    shop = current_app.config.get("SHOP_NAME", "Auto Shop")
    line = _STATUS_LINES.get(appt.status, f"Your appointment status is now {appt.status}.")
    body = (
        f"Hi {appt.customer_name},\n\n"
        f"Update on your {appt.service_type} appointment on {_when(appt)}:\n"
        f"{line}\n\n"
        f"Thank you,\n{shop}"
    )
    return _send(appt.email, f"{shop}: appointment {appt.status.replace('_', ' ')}", body, "status", appt.id)
