"""Pricing calculation for quote/load lines."""

from .line_calculator import LineAmounts, calculate_line
from .number_normalizer import coerce_decimal, normalize_decimal

__all__ = ["LineAmounts", "calculate_line", "coerce_decimal", "normalize_decimal"]
