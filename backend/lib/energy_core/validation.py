# backend/lib/energy_core/validation.py
import math
import re
from datetime import datetime
from typing import Any

from .errors import ClientInputError

DATE_FORMAT = "%Y-%m-%d"
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# DynamoDB number range; anything outside cannot be stored
NUMBER_LIMIT = 1e126
MIN_POSITIVE_NUMBER = 1e-130


def is_valid_date(value: Any) -> bool:
    """
    Strict YYYY-MM-DD check: the shape must match exactly and the
    calendar date must exist (2023-13-01 and 2023-02-30 are rejected).
    """
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def is_present(value: Any) -> bool:
    # 0 is a legitimate reading, so only None and blank strings count as absent
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def parse_non_negative(value: Any, message: str) -> float:
    if isinstance(value, bool):
        raise ClientInputError(message)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ClientInputError(message)
    if math.isnan(number) or math.isinf(number) or number < 0:
        raise ClientInputError(message)
    if number >= NUMBER_LIMIT or 0 < number < MIN_POSITIVE_NUMBER:
        raise ClientInputError(message)
    return number
