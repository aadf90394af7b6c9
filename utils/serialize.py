from scheduling.slots import format_slot


def appointment_json(a) -> dict:
    return {
        "id": a.id,
        "customer_name": a.customer_name,
        "email": a.email,
        "phone": a.phone,
        "vehicle_year": a.vehicle_year,
        "vehicle_make": a.vehicle_make,
        "vehicle_model": a.vehicle_model,
        "service_type": a.service_type,
        "appointment_date": a.appointment_date.isoformat(),
        "appointment_time": format_slot(a.start_minutes),
        "duration": a.duration,
        "notes": a.notes,
        "status": a.status,
        "customer_id": a.customer_id,
        "created_at": a.created_at.isoformat() if a.created_at else None,
        "updated_at": a.updated_at.isoformat() if a.updated_at else None,
    }


def user_json(u) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "full_name": u.full_name,
        "phone_number": u.phone_number,
        "roles": sorted(r.name for r in u.roles),
    }
