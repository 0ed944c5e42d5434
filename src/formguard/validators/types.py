"""Type checkers for field values.

Each checker takes the raw value and the field's `type_params` and returns
the value coerced into the field type, or raises TypeCheckError. Checkers
never see empty values; emptiness is decided before type checking.

The module also knows which measure `min`/`max` bound for each type:
- "value": numeric or temporal magnitude
- "length": string length
- "count": list element count
"""

import ipaddress
import re
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import DefaultContext, Decimal, InvalidOperation
from typing import Any
from urllib.parse import urlsplit


class TypeCheckError(ValueError):
    """A value cannot be coerced into the field type."""
    pass


TypeChecker = Callable[[Any, dict[str, Any]], Any]


# =============================================================================
# Format Patterns
# =============================================================================

# Email: Basic RFC 5322 compliant pattern
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

INT_PATTERN = re.compile(r"^[+-]?\d+$")

NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

TRUE_STRINGS = {"1", "true"}
FALSE_STRINGS = {"0", "false"}
SWITCH_TRUE_STRINGS = TRUE_STRINGS | {"on", "yes"}
SWITCH_FALSE_STRINGS = FALSE_STRINGS | {"off", "no"}

DEFAULT_URL_SCHEMES = ("http", "https")

SCALAR_TYPES = (str, int, float, bool, Decimal)

# Interpreter limit for int <-> str conversion; larger integers are rejected
MAX_INT_DIGITS = 4300

# Largest decimal exponent accepted from input (default context Emax)
MAX_DECIMAL_EXPONENT = DefaultContext.Emax


# =============================================================================
# Checkers
# =============================================================================


def check_int(value: Any, params: dict[str, Any]) -> int:
    if isinstance(value, bool):
        raise TypeCheckError("booleans are not integers")
    if isinstance(value, int):
        # About 3.3 bits per decimal digit, so this stays under the str() limit
        if value.bit_length() > MAX_INT_DIGITS * 3:
            raise TypeCheckError("integer is too large")
        return value
    if isinstance(value, Decimal):
        if not value.is_finite() or value.adjusted() >= MAX_INT_DIGITS:
            raise TypeCheckError("value is not an integer of supported size")
        if value == value.to_integral_value():
            return int(value)
        raise TypeCheckError(f"{value!r} is not an integer")
    if isinstance(value, float):
        if _is_finite(value) and value == int(value):
            return int(value)
        raise TypeCheckError(f"{value!r} is not an integer")
    if isinstance(value, str) and INT_PATTERN.match(value.strip()):
        text = value.strip().lstrip("+-")
        if len(text) > MAX_INT_DIGITS:
            raise TypeCheckError("integer has too many digits")
        return int(value.strip())
    raise TypeCheckError("value is not an integer")


def check_numeric(value: Any, params: dict[str, Any]) -> Decimal:
    if isinstance(value, bool):
        raise TypeCheckError("booleans are not numbers")
    if isinstance(value, (int, Decimal)):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(repr(value))
    elif isinstance(value, str) and NUMERIC_PATTERN.match(value.strip()):
        number = Decimal(value.strip())
    else:
        raise TypeCheckError("value is not a number")

    if not number.is_finite():
        raise TypeCheckError("value is not a finite number")
    if number and abs(number.adjusted()) > MAX_DECIMAL_EXPONENT:
        raise TypeCheckError("value is out of the supported number range")

    precision = params.get("precision")
    if precision is not None and decimal_places(number) > int(precision):
        raise TypeCheckError(f"value has more than {precision} decimal places")

    return number


def decimal_places(number: Decimal) -> int:
    """Count significant decimal places, ignoring trailing zeros.

    Works on the digit tuple so no context limit (precision, Emax) applies.
    """
    _, digits, exponent = number.as_tuple()
    trailing = len(digits) - len("".join(map(str, digits)).rstrip("0"))
    if trailing == len(digits):
        return 0
    return max(0, -(exponent + trailing))


def check_scalar(value: Any, params: dict[str, Any]) -> Any:
    if isinstance(value, SCALAR_TYPES):
        return value
    raise TypeCheckError(f"{type(value).__name__} is not a scalar")


def check_list(value: Any, params: dict[str, Any]) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        raise TypeCheckError(f"{type(value).__name__} is not a list")
    for item in value:
        if not isinstance(item, SCALAR_TYPES):
            raise TypeCheckError(f"list element {item!r} is not a scalar")
    return list(value)


def _check_truth(value: Any, true_strings: set[str], false_strings: set[str]) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in true_strings:
            return True
        if text in false_strings:
            return False
    raise TypeCheckError(f"{value!r} is not a boolean")


def check_bool(value: Any, params: dict[str, Any]) -> bool:
    return _check_truth(value, TRUE_STRINGS, FALSE_STRINGS)


def check_switch(value: Any, params: dict[str, Any]) -> bool:
    return _check_truth(value, SWITCH_TRUE_STRINGS, SWITCH_FALSE_STRINGS)


def check_string(value: Any, params: dict[str, Any]) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    raise TypeCheckError(f"{type(value).__name__} is not a string")


def check_email(value: Any, params: dict[str, Any]) -> str:
    if isinstance(value, str) and EMAIL_PATTERN.match(value):
        return value
    raise TypeCheckError(f"{value!r} is not a valid email address")


def check_ip(value: Any, params: dict[str, Any]) -> str:
    if not isinstance(value, str):
        raise TypeCheckError(f"{type(value).__name__} is not an IP address")
    try:
        address = ipaddress.ip_address(value.strip())
    except ValueError:
        raise TypeCheckError(f"{value!r} is not a valid IP address")

    version = params.get("version")
    if version is not None and address.version != int(version):
        raise TypeCheckError(f"{value!r} is not an IPv{version} address")

    return str(address)


def check_url(value: Any, params: dict[str, Any]) -> str:
    if not isinstance(value, str) or not value or any(c.isspace() for c in value):
        raise TypeCheckError(f"{value!r} is not a valid URL")

    schemes = tuple(s.lower() for s in params.get("schemes", DEFAULT_URL_SCHEMES))
    try:
        parts = urlsplit(value)
    except ValueError:
        raise TypeCheckError(f"{value!r} is not a valid URL")

    if parts.scheme.lower() not in schemes or not parts.hostname:
        raise TypeCheckError(f"{value!r} is not a valid URL")

    return value


def check_date(value: Any, params: dict[str, Any]) -> date:
    if isinstance(value, datetime):
        raise TypeCheckError("datetime given where a date is expected")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            if "format" in params:
                return datetime.strptime(value, params["format"]).date()
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise TypeCheckError(f"{value!r} is not a valid date")


def check_datetime(value: Any, params: dict[str, Any]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            if "format" in params:
                return datetime.strptime(value, params["format"])
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    raise TypeCheckError(f"{value!r} is not a valid datetime")


def check_time(value: Any, params: dict[str, Any]) -> time:
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            if "format" in params:
                return datetime.strptime(value, params["format"]).time()
            return time.fromisoformat(value)
        except ValueError:
            pass
    raise TypeCheckError(f"{value!r} is not a valid time")


def _is_finite(value: float | Decimal) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return value == value and value not in (float("inf"), float("-inf"))


# Built-in checkers, keyed by type name
TYPE_CHECKERS: dict[str, TypeChecker] = {
    "int": check_int,
    "numeric": check_numeric,
    "scalar": check_scalar,
    "list": check_list,
    "bool": check_bool,
    "switch": check_switch,
    "string": check_string,
    "email": check_email,
    "ip": check_ip,
    "url": check_url,
    "date": check_date,
    "datetime": check_datetime,
    "time": check_time,
}

TEMPORAL_TYPES = {"date", "datetime", "time"}
LENGTH_TYPES = {"string", "email", "url", "ip"}
TRUTH_TYPES = {"bool", "switch"}


def check_type(type_name: str, value: Any, params: dict[str, Any] | None = None) -> Any:
    """Coerce a value into the given field type.

    Conversion failures of any kind (oversized numbers, decimal context
    signals) are reported as TypeCheckError, since values are untrusted.

    Raises:
        TypeCheckError: If the value does not fit the type
    """
    try:
        return TYPE_CHECKERS[type_name](value, params or {})
    except TypeCheckError:
        raise
    except (ValueError, ArithmeticError) as e:
        raise TypeCheckError(f"value cannot be converted to {type_name}") from e


# =============================================================================
# Bounds
# =============================================================================


def measure(type_name: str, value: Any) -> tuple[str, Any] | None:
    """Return (kind, measure) that min/max bound for a coerced value.

    Returns None when the type has no bounds (bool, switch).
    """
    if type_name in ("int", "numeric"):
        return "value", Decimal(value)
    if type_name in TEMPORAL_TYPES:
        return "value", value
    if type_name in LENGTH_TYPES:
        return "length", len(value)
    if type_name == "list":
        return "count", len(value)
    if type_name == "scalar":
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            return "length", len(value)
        return "value", check_numeric(value, {})
    return None


def parse_bound(type_name: str, raw: Any, params: dict[str, Any] | None = None) -> Any:
    """Parse a configured min/max into something comparable with measure().

    Raises:
        TypeCheckError: If the bound does not fit the type
    """
    params = params or {}

    if type_name in TRUTH_TYPES:
        raise TypeCheckError(f"type '{type_name}' does not support min/max")

    if type_name in TEMPORAL_TYPES:
        if isinstance(raw, str):
            iso_parsers: dict[str, Callable[[str], Any]] = {
                "date": date.fromisoformat,
                "datetime": datetime.fromisoformat,
                "time": time.fromisoformat,
            }
            try:
                return iso_parsers[type_name](raw)
            except ValueError:
                pass
        return check_type(type_name, raw, params)

    if type_name in LENGTH_TYPES or type_name == "list":
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            raise TypeCheckError(f"{raw!r} is not a valid length")
        return raw

    # int, numeric, scalar
    try:
        return check_numeric(raw, {})
    except (TypeCheckError, InvalidOperation):
        raise TypeCheckError(f"{raw!r} is not a valid number")
