"""
Severity filter deciding which log records become events.
"""

from typing import Any, Mapping, Optional, Tuple

from .event import LogLevel

FATAL_ERROR_MARKER = "fatal error"
ERROR_FIELD = "error"

# Only warnings and higher are sent to the backend
DELIVERY_THRESHOLD = LogLevel.WARNING


def should_deliver(
    level: LogLevel,
    message: str,
    fields: Optional[Mapping[str, Any]] = None,
) -> Tuple[LogLevel, bool]:
    """
    Decide the effective level of a record and whether to deliver it.

    The content-based escalations run before the threshold check so they can
    lift an otherwise suppressed record into deliverable territory.

    Args:
        level: Nominal level of the record
        message: Formatted log message
        fields: Structured fields of the record

    Returns:
        Tuple of (effective_level, deliver)
    """
    if not message or not message.strip():
        return level, False

    effective = level
    if message.startswith(FATAL_ERROR_MARKER):
        effective = LogLevel.FATAL

    if fields and ERROR_FIELD in fields:
        effective = max(effective, LogLevel.ERROR)

    return effective, effective >= DELIVERY_THRESHOLD
