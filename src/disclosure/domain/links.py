"""Outbound deep links: WhatsApp chat and telephone URIs."""

import re
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me/"

_NON_DIGITS = re.compile(r"\D")


def digits_only(number: str) -> str:
    return _NON_DIGITS.sub("", number or "")


def whatsapp_url(number: str, text: str | None = None) -> str:
    """Return a wa.me link for the number (digits only) with optional pre-filled text."""
    url = WHATSAPP_BASE_URL + digits_only(number)
    if text:
        url += "?text=" + quote(text, safe="")
    return url


def tel_url(number: str) -> str:
    return "tel:" + (number or "").strip().replace(" ", "")


def whatsapp_greeting(subject: str | None, name: str, phone: str) -> str | None:
    """Pre-filled WhatsApp text, or None when there is nothing to say about the subject."""
    if not subject:
        return None
    return (
        f"Hi, I'm interested in {subject}. "
        f"My name is {name} and my phone is {phone}."
    )
