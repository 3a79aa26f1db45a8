"""Utilities for normalizing numeric form input to Decimal."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any


_CURRENCY_PATTERN = re.compile(r"(?i)\btry\b|\btl\b|₺|\$|€|£")

ZERO = Decimal("0")
ONE = Decimal("1")


def normalize_decimal(text: str) -> Decimal:
    """Normalize plain or Turkish formatted numeric strings to Decimal.

    Rules:
    - Trim whitespace and currency markers (TRY, TL, ₺, $, €, £)
    - Remove spaces used as thousand separators
    - When a comma is present it is the decimal separator and dots are
      thousand separators ("1.234,56")
    - Without a comma a single dot is the decimal separator ("1234.56");
      several dots must group thousands ("1.234.567")
    - Support negative amounts with leading or trailing '-'
    - Raise ValueError for invalid formats
    """
    if text is None:
        raise ValueError("Input text is None")

    raw = text.strip()
    if not raw:
        raise ValueError("Input text is empty")

    negative = False
    if raw.startswith("-"):
        negative = True
        raw = raw[1:].strip()
    if raw.endswith("-"):
        negative = True
        raw = raw[:-1].strip()

    cleaned = _CURRENCY_PATTERN.sub("", raw)
    cleaned = re.sub(r"\s+", "", cleaned).strip()
    if cleaned.startswith("-") and not negative:
        negative = True
        cleaned = cleaned[1:]
    if not cleaned:
        raise ValueError("Input text has no numeric content")

    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif cleaned.count(".") > 1:
        if not re.fullmatch(r"\d{1,3}(\.\d{3})+", cleaned):
            raise ValueError(f"Invalid numeric format: {text!r}")
        cleaned = cleaned.replace(".", "")

    if not re.fullmatch(r"\d+(\.\d+)?|\.\d+", cleaned):
        raise ValueError(f"Invalid numeric format: {text!r}")

    try:
        value = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric format: {text!r}") from exc

    return value.copy_negate() if negative else value


def coerce_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Convert any form value to Decimal without raising.

    None, empty strings, malformed text and non-finite numbers yield default.
    Floats go through str() so 0.1 stays 0.1.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        result = Decimal(str(value))
        return result if result.is_finite() else default
    try:
        return normalize_decimal(str(value))
    except ValueError:
        return default


def coerce_rate(value: Any) -> Decimal:
    """Exchange rates fall back to 1 when missing, malformed, zero or negative."""
    rate = coerce_decimal(value, ONE)
    return rate if rate > 0 else ONE
