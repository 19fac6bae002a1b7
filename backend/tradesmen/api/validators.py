"""
Input validation helpers.

Each helper raises ValidationException (HTTP 400) with a message that is
safe to show to the person filling in the form.
"""
from tradesmen.api.middleware.error_handler import ValidationException

MAX_EMAIL_LENGTH = 254


def validate_required(value: str, field: str) -> None:
    if not value or not value.strip():
        raise ValidationException(f"{field} is required")


def validate_length(value: str, min_len: int, max_len: int, field: str) -> None:
    """Check the trimmed length of a value."""
    length = len(value.strip())
    if length < min_len:
        raise ValidationException(f"{field} must be at least {min_len} characters")
    if length > max_len:
        raise ValidationException(f"{field} must be {max_len} characters or less")


def validate_email(email: str) -> None:
    """Basic email check: present, contains '@', and not longer than 254 characters."""
    email = email.strip()
    if not email:
        raise ValidationException("Email is required")
    if "@" not in email:
        raise ValidationException("Email must contain '@'")
    if len(email) > MAX_EMAIL_LENGTH:
        raise ValidationException(f"Email must be {MAX_EMAIL_LENGTH} characters or less")


def validate_range(value: int, min_value: int, max_value: int, field: str) -> None:
    if value < min_value or value > max_value:
        raise ValidationException(f"{field} must be between {min_value} and {max_value}")
