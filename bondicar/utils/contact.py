"""WhatsApp deep links for coordinating with drivers and passengers."""

import re
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me"
APP_NAME = "BondiCar"


def digits_only(phone: str | None) -> str:
    """Strip everything but digits from a phone number."""
    return re.sub(r"\D", "", phone or "")


def whatsapp_link(phone: str | None, message: str) -> str | None:
    """Build a wa.me link with a pre-filled message, None without a usable phone."""
    number = digits_only(phone)
    if not number:
        return None
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(message, safe='')}"


def trip_message(name: str, origin: str, destination: str, when: str) -> str:
    """Opening message for a one-off trip."""
    return (
        f"Hi {name}, I saw your trip from {origin} to {destination} on {when} "
        f"in {APP_NAME} and I'd like to book a seat."
    )


def series_message(name: str, origin: str, destination: str) -> str:
    """Opening message for a recurring series."""
    return (
        f"Hi {name}, I saw your recurring trip from {origin} to {destination} "
        f"in {APP_NAME} and I'd like to book a seat."
    )


def offer_message(name: str, origin: str, destination: str) -> str:
    """Opening message after accepting a driver's offer."""
    return (
        f"Hi {name}, I accepted your offer for my trip from {origin} to {destination} "
        f"in {APP_NAME}. Let's coordinate the details."
    )
