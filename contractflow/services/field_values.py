"""
Field types and the rules for the string values stored against them
"""
import re
from datetime import datetime
from enum import Enum
from typing import Union

from contractflow.core.exceptions import ValidationError


class FieldType(str, Enum):
    TEXT = "text"
    DATE = "date"
    SIGNATURE = "signature"
    CHECKBOX = "checkbox"


# Vertical spacing used when a field is added without an explicit position
FIELD_ROW_HEIGHT = 60

CHECKBOX_VALUES = ("true", "false")

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_iso_date(text: str) -> bool:
    """Strict YYYY-MM-DD that is also a real calendar date"""
    if not DATE_PATTERN.fullmatch(text):
        return False
    try:
        datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def default_value(field_type: Union[FieldType, str]) -> str:
    """Initial value written for a new contract"""
    return "false" if FieldType(field_type) == FieldType.CHECKBOX else ""


def normalize_value(field_type: Union[FieldType, str], value, label: str = "") -> str:
    """
    Validate a submitted value for the given field type and return the
    string that is stored.
    """
    field_type = FieldType(field_type)
    name = label or field_type.value

    if field_type == FieldType.CHECKBOX:
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value).strip().lower()
        if text not in CHECKBOX_VALUES:
            raise ValidationError(f"Field '{name}' expects 'true' or 'false', got '{value}'")
        return text

    if value is None:
        return ""
    if isinstance(value, bool):
        raise ValidationError(f"Field '{name}' expects text, got a boolean")
    text = str(value)

    if field_type == FieldType.DATE and text and not is_iso_date(text):
        raise ValidationError(f"Field '{name}' expects a YYYY-MM-DD date, got '{value}'")

    return text
