from datetime import date, datetime, time, timedelta

PASSWORD = "TestPassword123"

# Far enough ahead to always be bookable
BOOKING_DAY = date.today() + timedelta(days=30)

def at(day: date, slot: str) -> datetime:
    """Datetime for an "HH:MM" slot on a day."""
    hour, minute = (int(part) for part in slot.split(":"))
    return datetime.combine(day, time(hour, minute))

def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
