from datetime import date, datetime
import re
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, model_validator

INVISIBLE_CHARS_PATTERN = re.compile(
    r'[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]')


def deep_clean(value: Any):
    """Recursively convert empty strings to None and strip invisible chars."""

    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    return value


def safe_parse_date(value: Any):
    """Convert date strings to date/datetime, return None if invalid."""
    if value is None or value == "":
        return None

    if isinstance(value, (date, datetime)):
        return value

    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class EmptyStringModel(BaseModel):
    """
    Input model that treats blank strings as missing.

    Forms and CSV uploads send "" for fields the user left empty. Unique
    columns (serial number, FAR number) must receive NULL in that case,
    never an empty string, or every blank row collides on the index.
    """
    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if isinstance(values, dict):
            return deep_clean(values)
        return values

    @model_validator(mode="before")
    @classmethod
    def fix_dates(cls, values):
        if not isinstance(values, dict):
            return values

        for field_name, field in cls.model_fields.items():
            if field_name not in values:
                continue
            annotation = field.annotation
            origin = get_origin(annotation)
            args = get_args(annotation)

            is_date_field = (
                annotation in (date, datetime)
                or (origin is Union and any(a in (date, datetime) for a in args))
            )
            if not is_date_field:
                continue

            parsed = safe_parse_date(values[field_name])
            wants_date = annotation is date or (
                origin is Union and date in args and datetime not in args)
            if wants_date and isinstance(parsed, datetime):
                parsed = parsed.date()
            values[field_name] = parsed

        return values
