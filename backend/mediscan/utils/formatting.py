"""
MediScan API: Formatting Utilities
===================================

What:  Pure, side-effect-free helpers shared by routes and services.
Who:   Route handlers (log truncation), the document store (leaderboard
       previews) and the frontend-facing payloads.

Nothing here performs I/O. ``generate_analysis_id`` is the only function
whose output is not determined by its input.
"""

import random
import re
import string
import time
from datetime import datetime
from typing import Union

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
SIZE_STEP = 1024

BASE36_ALPHABET = string.digits + string.ascii_lowercase

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"\+?[1-9]\d{0,15}", re.ASCII)
PHONE_SEPARATORS = re.compile(r"[\s\-()]")
EMAIL_MASK_PATTERN = re.compile(r"(.{2}).*(@.*)")

IMAGE_TYPE_DISPLAY_NAMES = {
    "brain": "Brain MRI",
    "heart": "Cardiac Scan",
    "lungs": "Lung CT",
    "liver": "Liver Scan",
}

ELLIPSIS = "..."


def format_file_size(size: Union[int, float]) -> str:
    """
    Render a byte count with binary (1024) steps.

    Examples:
        0        → "0 Bytes"
        1536     → "1.5 KB"
        1048576  → "1 MB"

    Sizes of a terabyte and above stay in GB.
    """
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    if size == 0:
        return "0 Bytes"

    unit = 0
    value = float(size)
    while value >= SIZE_STEP and unit < len(SIZE_UNITS) - 1:
        value /= SIZE_STEP
        unit += 1

    rendered = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {SIZE_UNITS[unit]}"


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_analysis_id() -> str:
    """
    Return an id like ``analysis_lr5x1k2a_k3j9d0q2m``.

    Millisecond timestamp and random suffix, both base-36. Collision-resistant
    enough for display ids; not a security token.
    """
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(random.choice(BASE36_ALPHABET) for _ in range(9))
    return f"analysis_{timestamp}_{suffix}"


def validate_email(email: str) -> bool:
    """Structural check only: something@something.something, no spaces."""
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_phone(phone: str) -> bool:
    """Optional leading +, then up to 16 digits not starting with 0."""
    return PHONE_PATTERN.fullmatch(PHONE_SEPARATORS.sub("", phone)) is not None


def format_confidence(confidence: float) -> str:
    """0.873 → "87.3%"."""
    return f"{confidence * 100:.1f}%"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


def get_image_type_display_name(image_type: str) -> str:
    return IMAGE_TYPE_DISPLAY_NAMES.get(image_type, image_type)


def format_timestamp(value: Union[datetime, str]) -> str:
    """
    Render a datetime (or ISO 8601 string) as ``1/15/2024 at 2:05:09 PM``.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))

    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return (
        f"{value.month}/{value.day}/{value.year} at "
        f"{hour}:{value.minute:02d}:{value.second:02d} {meridiem}"
    )


def mask_email(email: str) -> str:
    """Keep the first two characters and the domain: ``jo****@example.com``."""
    return EMAIL_MASK_PATTERN.sub(r"\1****\2", email, count=1)
