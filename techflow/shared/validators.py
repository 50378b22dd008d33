"""Shared validation utilities"""

import re
from datetime import datetime, timezone
from typing import Optional


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number.

    Spaces, dashes, dots and parentheses are stripped. An optional leading
    "+" is kept, and 7 to 15 digits must remain.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    phone = phone.strip()
    prefix = "+" if phone.startswith("+") else ""
    digits = re.sub(r"[\s\-\.\(\)]", "", phone.lstrip("+"))

    if not digits.isdigit():
        raise ValueError("Phone number may only contain digits, spaces, dashes and parentheses")

    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must have between 7 and 15 digits")

    return f"{prefix}{digits}"


def slugify(value: str) -> str:
    """Lower-case URL slug: non-alphanumerics collapse to single dashes"""
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return slug.strip("-")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive UTC; naive values are taken as UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
