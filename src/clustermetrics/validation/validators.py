"""
Validation functions for configuration values.

Each validator returns the value coerced to its target type or raises
ValidationError naming the field.
"""

from typing import Any, List, Optional, Union

from .exceptions import ValidationError

Number = Union[int, float]


def _invalid(field_name: str, value: Any, expected: str) -> ValidationError:
    return ValidationError(f"{field_name} must be {expected}, got {value!r}", field_name=field_name, value=value)


def _check_bounds(number: Number, value: Any, min_value: Number,
                  max_value: Optional[Number], field_name: str) -> Number:
    if number < min_value:
        raise _invalid(field_name, value, f">= {min_value}")
    if max_value is not None and number > max_value:
        raise _invalid(field_name, value, f"<= {max_value}")
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate an integer setting such as a queue size.

    Numeric strings are accepted; booleans are not, even though ``bool`` is
    an ``int`` subclass.

    Raises:
        ValidationError: If the value is not an integer or is out of bounds
    """
    if isinstance(value, bool):
        raise _invalid(field_name, value, "an integer")
    try:
        number = int(value)
    except (ValueError, TypeError):
        raise _invalid(field_name, value, "an integer") from None
    return _check_bounds(number, value, min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """Validate a duration in seconds (or any non-negative number)."""
    if isinstance(value, bool):
        raise _invalid(field_name, value, "a number")
    try:
        number = float(value)
    except (ValueError, TypeError):
        raise _invalid(field_name, value, "a number") from None
    return _check_bounds(number, value, min_value, max_value, field_name)


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """Validate that a value is a real boolean, not a truthy string or number."""
    if not isinstance(value, bool):
        raise _invalid(field_name, value, "true or false")
    return value


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        valid_choices: Allowed choices
        field_name: Name of the field being validated
        case_sensitive: Whether ``"info"`` may match ``"INFO"``

    Returns:
        The matching choice, spelled as in ``valid_choices``

    Raises:
        ValidationError: If value is not in choices
    """
    text = str(value)
    for choice in valid_choices:
        if choice == text or (not case_sensitive and choice.lower() == text.lower()):
            return choice
    raise _invalid(field_name, value, f"one of {valid_choices}")
