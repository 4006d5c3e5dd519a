"""
Attribute codec.

Converts untyped inbound values into the five attribute kinds a task
carries: string, number, boolean, string list and string map. Coercion is
permissive and never raises; strict checks live in tasktable.policy.
"""

import math
import sys
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Callable, Dict, List, Union

Number = Union[int, float]

DEFAULT_PRIORITY = 3
DEFAULT_COMPLETED = False

FLOAT_MAX_EXPONENT = sys.float_info.max_10_exp


def to_string(value: Any) -> str:
    """Textual representation of any value."""
    if isinstance(value, str):
        return value
    return str(value)


def to_number(value: Any) -> Number:
    """
    Numeric reading of a value.

    Integral results come back as int. Values without a numeric reading
    become 0 (NaN cannot be stored by any backend).
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return 0
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value) if value.is_integer() else value
    if isinstance(value, Decimal):
        # Beyond float range reads as overflow, like "1e999"
        if not value.is_finite() or value.adjusted() > FLOAT_MAX_EXPONENT:
            return 0
        return int(value) if value == value.to_integral_value() else float(value)
    return 0


def to_boolean(value: Any) -> bool:
    return bool(value)


def to_string_list(value: Any) -> List[Any]:
    """Ordered sequences pass through; anything else is an empty list."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def to_string_map(value: Any) -> Dict[str, Any]:
    """Mappings pass through; anything else is an empty map."""
    if isinstance(value, Mapping):
        return dict(value)
    return {}


FIELD_CODECS: Dict[str, Callable[[Any], Any]] = {
    "title": to_string,
    "priority": to_number,
    "completed": to_boolean,
    "tags": to_string_list,
    "metadata": to_string_map,
}

# Fields a caller may set after creation
MUTABLE_FIELDS = tuple(FIELD_CODECS)


def coerce_field(name: str, value: Any) -> Any:
    """Coerce a value for the named mutable field."""
    return FIELD_CODECS[name](value)
