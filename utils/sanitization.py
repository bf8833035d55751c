# utils/sanitization.py
from typing import Any, Optional
import re

CONTROL_CHARS = r"[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]"
HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def clean_text(value: Optional[str]) -> str:
    """Strip control characters and surrounding whitespace; keeps newlines."""
    if value is None:
        return ""

    text = re.sub(CONTROL_CHARS, "", str(value))
    return text.strip()


def clean_optional(value: Any) -> Optional[str]:
    """Like clean_text, but blank input is stored as NULL."""
    text = clean_text(value)
    return text or None


def is_hex_color(value: Optional[str]) -> bool:
    return bool(value) and bool(HEX_COLOR.match(value))
