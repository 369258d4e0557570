"""Scalar type inference for leaf fields."""

import json
import math
import re
from typing import Any

from .base import TypeTag

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}", re.ASCII)
EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
URL_PATTERN = re.compile(r"^https?://")


def infer_type(value: Any) -> TypeTag:
    """Classify a leaf value. The order of the checks matters: a string
    that starts like a date is a date even if it would also pass as a URL.
    """
    if value is None:
        return TypeTag.NULL
    if isinstance(value, list):
        return TypeTag.ARRAY
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float)):
        return TypeTag.NUMBER
    if isinstance(value, str):
        if DATE_PATTERN.match(value):
            return TypeTag.DATE
        if EMAIL_PATTERN.fullmatch(value):
            return TypeTag.EMAIL
        if URL_PATTERN.match(value):
            return TypeTag.URL
    return TypeTag.STRING


def to_text(value: Any) -> str:
    """Render a leaf value the way it would appear in a JSON payload."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, list):
        return ",".join("" if item is None else to_text(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def format_number(value: float) -> str:
    """Format a float like JavaScript does: integral values below 1e21
    without a fraction, decimals down to 1e-6 written out, exponents as
    ``1e-7`` / ``1e+21``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    exp = int(exponent)
    if -7 < exp < 0:
        digits = mantissa.lstrip("-").replace(".", "")
        sign = "-" if value < 0 else ""
        return f"{sign}0.{'0' * (-exp - 1)}{digits}"
    return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
