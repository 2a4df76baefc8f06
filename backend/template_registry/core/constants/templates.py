"""
Template constants — naming rules, version format, registry error codes.
"""

# Template names: letters, digits, and "_-/." separators (namespaced names like "team/build")
NAME_PATTERN: str = r"^[\w/.\-]+$"

# Dotted semantic version: "1", "1.7", "1.7.3"
VERSION_PATTERN: str = r"^\d+(\.\d+){0,2}$"

MAX_LABELS: int = 50
MAX_LABEL_LENGTH: int = 64

# PostgreSQL unique_violation, surfaced by PostgREST in APIError.code
UNIQUE_VIOLATION_CODE: str = "23505"

# A publish that loses a create race is resolved again from fresh reads this many times
PUBLISH_CONFLICT_RETRIES: int = 1

SORT_ASCENDING: str = "ascending"
SORT_DESCENDING: str = "descending"

# PostgreSQL errors worth re-trying: serialization failure, deadlock, lock
# not available, and server shutdown / unavailable
TRANSIENT_ERROR_CODES: frozenset[str] = frozenset(
    {"40001", "40P01", "55P03", "57P01", "57P02", "57P03"}
)
# Class 08: connection exceptions
TRANSIENT_ERROR_CLASSES: frozenset[str] = frozenset({"08"})
