"""Utility functions for handling enum/string values safely."""
from enum import Enum
from typing import Optional, Type


def enum_to_str(v):
    """
    Safely convert enum or string value to string.

    Examples:
        >>> enum_to_str(EmployeeStatus.ACTIVE)
        'active'
        >>> enum_to_str('active')
        'active'
        >>> enum_to_str(None)
        None
    """
    if v is None:
        return None
    if isinstance(v, Enum):
        return v.value
    return str(v)


def parse_enum(enum_cls: Type[Enum], v) -> Optional[Enum]:
    """
    Coerce a raw value into enum_cls, case-insensitively.

    Raises:
        ValueError: If v is not one of the enum's values
    """
    if v is None or isinstance(v, enum_cls):
        return v
    raw = str(v).strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == raw:
            return member
    allowed = [m.value for m in enum_cls]
    raise ValueError(f"Invalid value '{v}'. Must be one of {allowed}")
