"""
Constants package — re-exports from domain-specific modules.

Usage:
    from template_registry.core.constants.templates import VERSION_PATTERN
    # or import everything:
    from template_registry.core.constants import templates
"""

from template_registry.core.constants import templates
from template_registry.core.constants.templates import (
    NAME_PATTERN,
    VERSION_PATTERN,
    MAX_LABELS,
    MAX_LABEL_LENGTH,
    UNIQUE_VIOLATION_CODE,
    TRANSIENT_ERROR_CODES,
    TRANSIENT_ERROR_CLASSES,
    PUBLISH_CONFLICT_RETRIES,
    SORT_ASCENDING,
    SORT_DESCENDING,
)

__all__ = [
    "templates",
    "NAME_PATTERN",
    "VERSION_PATTERN",
    "MAX_LABELS",
    "MAX_LABEL_LENGTH",
    "UNIQUE_VIOLATION_CODE",
    "TRANSIENT_ERROR_CODES",
    "TRANSIENT_ERROR_CLASSES",
    "PUBLISH_CONFLICT_RETRIES",
    "SORT_ASCENDING",
    "SORT_DESCENDING",
]
