"""
Event model for the alert notification backend.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from enum import Enum, IntEnum
import json
import logging

from ..exceptions import MalformedTemplateError


class LogLevel(IntEnum):
    """Ordered log levels understood by the severity filter"""
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_logging(cls, levelno: int) -> "LogLevel":
        """Map a standard library level number to the closest lower LogLevel"""
        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFO
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.TRACE


class Severity(Enum):
    """Backend event severity"""
    INFO = "INFO"
    NOTICE = "NOTICE"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class Category(Enum):
    """Backend event category"""
    NOTIFICATION = "NOTIFICATION"
    ALERT = "ALERT"
    EXCEPTION = "EXCEPTION"


_LEVEL_MAPPING = {
    LogLevel.TRACE: (Severity.INFO, Category.NOTIFICATION),
    LogLevel.DEBUG: (Severity.INFO, Category.NOTIFICATION),
    LogLevel.INFO: (Severity.INFO, Category.NOTIFICATION),
    LogLevel.WARNING: (Severity.WARNING, Category.ALERT),
    LogLevel.ERROR: (Severity.ERROR, Category.EXCEPTION),
    LogLevel.FATAL: (Severity.FATAL, Category.EXCEPTION),
}


@dataclass
class Resource:
    """Resource the event is about"""
    resource_type: str = ""
    resource_name: str = ""
    resource_instance: str = ""
    tags: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data: Dict[str, Any] = {
            "resourceType": self.resource_type,
            "resourceName": self.resource_name,
        }
        if self.resource_instance:
            data["resourceInstance"] = self.resource_instance
        if self.tags:
            data["tags"] = self.tags
        return data


@dataclass
class Event:
    """Alert notification event"""
    event_type: str = ""
    tags: Dict[str, Any] = field(default_factory=dict)
    resource: Optional[Resource] = None
    subject: str = ""
    body: str = ""
    event_timestamp: int = 0
    severity: Optional[Severity] = None
    category: Optional[Category] = None
    priority: Optional[int] = None

    def set_log_level(self, level: LogLevel) -> None:
        """Derive severity and category from the effective log level"""
        self.severity, self.category = _LEVEL_MAPPING[level]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the backend field names"""
        data: Dict[str, Any] = {"eventType": self.event_type}
        if self.event_timestamp:
            data["eventTimestamp"] = self.event_timestamp
        if self.severity is not None:
            data["severity"] = self.severity.value
        if self.category is not None:
            data["category"] = self.category.value
        if self.subject:
            data["subject"] = self.subject
        if self.body:
            data["body"] = self.body
        if self.priority is not None:
            data["priority"] = self.priority
        if self.tags:
            data["tags"] = self.tags
        if self.resource is not None:
            data["resource"] = self.resource.to_dict()
        return data

    def to_json(self) -> str:
        """Convert to JSON"""
        # Record fields can carry arbitrary objects; fall back to their str() form
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Build an event from a backend-shaped dictionary"""
        from .template import apply_template

        return apply_template(cls(), data)


def parse_severity(value: Any) -> Severity:
    try:
        return Severity(str(value).upper())
    except ValueError:
        raise MalformedTemplateError(f"unknown severity '{value}'")


def parse_category(value: Any) -> Category:
    try:
        return Category(str(value).upper())
    except ValueError:
        raise MalformedTemplateError(f"unknown category '{value}'")
