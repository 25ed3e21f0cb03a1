"""
Turns a log record into an event by enriching a copy of the prototype.
"""

from typing import Any, Dict, Optional
import copy
import logging

from .event import Event, LogLevel

STEP_NAME_FIELD = "stepName"

_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "extra_fields", "taskName"}


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the structured data attached to a log record.

    Fields come from ``extra_fields`` (``StructuredLogger``), then from
    attributes added through ``extra=``. An exception attached to the record
    is exposed as the ``error`` field unless one is already present.
    """
    fields: Dict[str, Any] = dict(getattr(record, "extra_fields", None) or {})
    for key, value in vars(record).items():
        if key not in _RESERVED_ATTRIBUTES and not key.startswith("_"):
            fields.setdefault(key, value)
    if record.exc_info and record.exc_info[1] is not None:
        fields.setdefault("error", str(record.exc_info[1]))
    return fields


def enrich(
    prototype: Event,
    record: logging.LogRecord,
    effective_level: LogLevel,
    fields: Optional[Dict[str, Any]] = None,
) -> Event:
    """Build the event for one record.

    ``prototype`` is deep-copied and never modified, so concurrent callers
    sharing it never see each other's record fields.

    An empty subject is set to ``str()`` of the record's ``stepName`` field.
    When the record has no ``stepName``, the logger name (``record.name``)
    is used instead.
    """
    if fields is None:
        fields = record_fields(record)

    event = copy.deepcopy(prototype)
    event.tags.update(fields)

    event.event_timestamp = int(record.created)
    if not event.subject:
        step_name = fields.get(STEP_NAME_FIELD)
        event.subject = str(step_name) if step_name is not None else record.name
    event.body = record.getMessage()
    event.set_log_level(effective_level)
    event.tags["logLevel"] = str(effective_level)
    return event
