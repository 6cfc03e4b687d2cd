from .dates import DATE_FORMATS, parse_date, parse_date_value
from .rules import calculate_age, is_valid_email, validate_row

__all__ = [
    "DATE_FORMATS",
    "parse_date",
    "parse_date_value",
    "calculate_age",
    "is_valid_email",
    "validate_row",
]
