# Input validation and sanitization helpers used by the request schemas.
# Each helper raises ValueError so pydantic reports it as a 400.

import html
import re

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
LETTER_RE = re.compile(r"[a-zA-Z]")
DIGIT_RE = re.compile(r"[0-9]")

def sanitize_text(value: str, max_length: int, field_name: str) -> str:
    """Trim, bound and HTML-escape free text"""
    if "\x00" in value:
        raise ValueError(f"{field_name} contains invalid characters")

    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be empty")
    if len(value) > max_length:
        raise ValueError(f"{field_name} exceeds maximum length of {max_length} characters")

    return html.escape(value)

def validate_username(username: str) -> str:
    username = username.strip()
    if len(username) < 3 or len(username) > 30:
        raise ValueError("username must be between 3 and 30 characters")
    if not USERNAME_RE.match(username):
        raise ValueError("username can only contain letters, numbers, underscores, and hyphens")
    return username

def validate_password(password: str) -> str:
    if len(password) < 8:
        raise ValueError("password must be at least 8 characters long")
    if len(password) > 128:
        raise ValueError("password must be less than 128 characters")
    if not LETTER_RE.search(password) or not DIGIT_RE.search(password):
        raise ValueError("password must contain at least one letter and one number")
    return password
