"""Type checkers and field constraint checks.

The constraint evaluator lives in formguard.validators.constraints; it is
not imported here because the definition registry depends on the type
checkers below.
"""

from formguard.validators.types import (
    TYPE_CHECKERS,
    TypeCheckError,
    check_type,
    measure,
    parse_bound,
)

__all__ = [
    "TYPE_CHECKERS",
    "TypeCheckError",
    "check_type",
    "measure",
    "parse_bound",
]
