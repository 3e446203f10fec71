"""Validation and sanitization of lead-capture input (name, email, message).

Phone numbers depend on region metadata and live in infrastructure.phone.
Every check fails closed: anything it cannot positively accept is invalid.
"""

import re

# Letters (including Latin-1 accented), whitespace, hyphens, apostrophes.
_NAME_RE = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")
_NAME_DISALLOWED_RE = re.compile(r"[^a-zA-ZÀ-ÿ\s'-]")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_EMAIL_DISALLOWED_RE = re.compile(r"[^\w@.-]", re.ASCII)

_DANGEROUS_MESSAGE_RE = re.compile(r"<script|javascript:|\bon[a-z]+\s*=", re.IGNORECASE)
_SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)

NAME_REQUIRED = "Name is required"
NAME_INVALID = "Name can only contain letters, spaces, hyphens, and apostrophes"
EMAIL_REQUIRED = "Email is required"
EMAIL_INVALID = "Please enter a valid email address"
MESSAGE_REQUIRED = "Message is required"
MESSAGE_INVALID = "Message contains invalid content"


def _blank(value: str | None) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_name(name: str | None) -> bool:
    if _blank(name):
        return False
    return bool(_NAME_RE.match(name.strip()))


def sanitize_name(name: str) -> str:
    """Drop disallowed characters so a name field can be corrected as the user types."""
    return _NAME_DISALLOWED_RE.sub("", name or "")


def validate_email(email: str | None) -> bool:
    if _blank(email):
        return False
    return bool(_EMAIL_RE.match(email.strip()))


def sanitize_email(email: str) -> str:
    return _EMAIL_DISALLOWED_RE.sub("", email or "").lower()


def validate_message(message: str | None) -> bool:
    """Reject empty messages and script-injection patterns. Not an HTML sanitizer."""
    if _blank(message):
        return False
    return _DANGEROUS_MESSAGE_RE.search(message) is None


def sanitize_message(message: str) -> str:
    cleaned = _SCRIPT_BLOCK_RE.sub("", message or "")
    cleaned = _JS_SCHEME_RE.sub("", cleaned)
    cleaned = _EVENT_HANDLER_RE.sub("", cleaned)
    return cleaned.strip()


def get_name_error(name: str | None) -> str:
    """Return the field error for name, or "" when valid."""
    if _blank(name):
        return NAME_REQUIRED
    if not validate_name(name):
        return NAME_INVALID
    return ""


def get_email_error(email: str | None) -> str:
    if _blank(email):
        return EMAIL_REQUIRED
    if not validate_email(email):
        return EMAIL_INVALID
    return ""


def get_message_error(message: str | None) -> str:
    if _blank(message):
        return MESSAGE_REQUIRED
    if not validate_message(message):
        return MESSAGE_INVALID
    return ""
