"""Shared parsing helpers for runtime values and chapter metadata."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation


_MAX_CHAPTER_NUMBER_DECIMALS = 2


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_chapter_number(value: object) -> Decimal:
    """Parse a positive chapter number with at most two decimal places.

    Accepts `int`, `Decimal`, and numeric strings such as `12`, `12.5`, or `12.25`.
    Floats are converted through their shortest text form.

    Raises:
        ValueError: If the value is not numeric, not positive, or too precise.
    """

    if isinstance(value, bool):
        raise ValueError("Chapter number must be a positive number.")
    if isinstance(value, Decimal):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError("Chapter number is required.")
        try:
            parsed = Decimal(normalized)
        except InvalidOperation as exc:
            raise ValueError(f"Chapter number `{normalized}` is not a number.") from exc

    if not parsed.is_finite() or parsed <= 0:
        raise ValueError("Chapter number must be a positive number.")
    exponent = parsed.normalize().as_tuple().exponent
    if isinstance(exponent, int) and -exponent > _MAX_CHAPTER_NUMBER_DECIMALS:
        raise ValueError(
            f"Chapter number `{parsed}` allows at most "
            f"{_MAX_CHAPTER_NUMBER_DECIMALS} decimal places."
        )
    return parsed


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer from an int or numeric string."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a positive integer.")
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def parse_non_negative_float(value: object, field_name: str) -> float:
    """Parse a non-negative float from a number or numeric string."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a non-negative number.")
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a non-negative number.")
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a non-negative number.") from exc
    if parsed < 0.0 or parsed != parsed:
        raise ValueError(f"`{field_name}` must be a non-negative number.")
    return parsed
