"""Phone number formatting for display. Numbers are stored as entered and never rejected."""

import phonenumbers


def _parse(raw: str, region: str | None) -> phonenumbers.PhoneNumber | None:
    try:
        parsed = phonenumbers.parse(raw, region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return parsed


def display_phone(raw: str | None, region: str | None = None) -> str:
    """Return the number in international format, or the stripped input unchanged
    when it cannot be parsed. region applies to numbers without a leading +."""
    text = (raw or "").strip()
    if not text:
        return ""
    parsed = _parse(text, region)
    if parsed is None:
        return text
    return phonenumbers.format_number(
        parsed, phonenumbers.PhoneNumberFormat.INTERNATIONAL
    )


def dial_uri(raw: str | None, region: str | None = None) -> str | None:
    """tel: URI (RFC 3966) for the number, or None if it is not a valid number."""
    text = (raw or "").strip()
    parsed = _parse(text, region) if text else None
    if parsed is None:
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.RFC3966)
