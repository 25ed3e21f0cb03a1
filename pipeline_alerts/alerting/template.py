"""
Layered event templates.

The prototype event of a hook is built once from up to three sources, each
overriding the previous one:

    built-in defaults -> template file -> inline template

Scalar fields are only overwritten by non-empty template values, tag maps are
merged key by key with the template winning, and unknown keys are ignored.
A source that cannot be read or parsed is reported as a warning and skipped.
"""

from typing import Any, Dict, Optional, Union
import copy
import json

from .event import Event, Resource, parse_severity, parse_category
from ..exceptions import MalformedTemplateError
from ..monitoring import StructuredLogger

logger = StructuredLogger("alerting_template", level="INFO")

DEFAULT_EVENT_TYPE = "Piper"
DEFAULT_RESOURCE_TYPE = "Pipeline"
DEFAULT_RESOURCE_NAME = "Pipeline"


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == {} or value == 0


def _expect(value: Any, kind: type, name: str) -> Any:
    if isinstance(value, bool) or not isinstance(value, kind):
        raise MalformedTemplateError(
            f"field '{name}' must be of type {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _merge_resource(resource: Optional[Resource], data: Any) -> Optional[Resource]:
    _expect(data, dict, "resource")
    merged = resource if resource is not None else Resource()
    for key, attr in (
        ("resourceType", "resource_type"),
        ("resourceName", "resource_name"),
        ("resourceInstance", "resource_instance"),
    ):
        value = data.get(key)
        if not _is_empty(value):
            setattr(merged, attr, _expect(value, str, f"resource.{key}"))
    tags = data.get("tags")
    if tags is not None:
        merged.tags.update(_expect(tags, dict, "resource.tags"))
    return merged


def apply_template(base: Event, data: Dict[str, Any]) -> Event:
    """Merge an already decoded template into a copy of ``base``.

    Args:
        base: Event to start from; left untouched.
        data: Decoded template document.

    Returns:
        The merged event.

    Raises:
        MalformedTemplateError: If the document or one of its known fields has
            the wrong shape.
    """
    if not isinstance(data, dict):
        raise MalformedTemplateError(
            f"event template must be a JSON object, got {type(data).__name__}"
        )

    merged = copy.deepcopy(base)

    for key, attr in (("eventType", "event_type"), ("subject", "subject"), ("body", "body")):
        value = data.get(key)
        if not _is_empty(value):
            setattr(merged, attr, _expect(value, str, key))

    value = data.get("eventTimestamp")
    if not _is_empty(value):
        merged.event_timestamp = _expect(value, int, "eventTimestamp")

    value = data.get("priority")
    if not _is_empty(value):
        merged.priority = _expect(value, int, "priority")

    value = data.get("severity")
    if not _is_empty(value):
        merged.severity = parse_severity(value)

    value = data.get("category")
    if not _is_empty(value):
        merged.category = parse_category(value)

    tags = data.get("tags")
    if tags is not None:
        merged.tags.update(_expect(tags, dict, "tags"))

    resource = data.get("resource")
    if resource is not None:
        merged.resource = _merge_resource(merged.resource, resource)

    return merged


def merge_with_template(base: Event, template: Union[str, bytes]) -> Event:
    """Parse a JSON template and merge it into a copy of ``base``.

    Raises:
        MalformedTemplateError: If ``template`` is not a valid JSON event
            document. ``base`` is unchanged in that case.
    """
    try:
        data = json.loads(template)
    except (ValueError, TypeError) as e:
        raise MalformedTemplateError(f"event template is not valid JSON: {e}") from e
    return apply_template(base, data)


def default_event(correlation_id: str) -> Event:
    """Built-in defaults every prototype starts from."""
    return Event(
        event_type=DEFAULT_EVENT_TYPE,
        tags={"ans:correlationId": correlation_id, "ans:sourceEventId": correlation_id},
        resource=Resource(
            resource_type=DEFAULT_RESOURCE_TYPE,
            resource_name=DEFAULT_RESOURCE_NAME,
        ),
    )


def build_prototype(
    correlation_id: str,
    template_file_path: Optional[str] = None,
    template: Optional[str] = None,
) -> Event:
    """Build the prototype event from defaults, template file and inline template.

    Never raises for template problems; they are logged as warnings and the
    event built so far is kept.
    """
    event = default_event(correlation_id)

    if template_file_path:
        try:
            with open(template_file_path, "rb") as f:
                file_template = f.read()
        except OSError as e:
            logger.warning(
                f"provided event template file with path '{template_file_path}' could not be read",
                stepName="ANS",
                error=str(e),
            )
        else:
            event = _merge_or_warn(event, file_template)

    if template:
        event = _merge_or_warn(event, template)

    return event


def _merge_or_warn(event: Event, template: Union[str, bytes]) -> Event:
    try:
        return merge_with_template(event, template)
    except MalformedTemplateError as e:
        if isinstance(template, bytes):
            template = template.decode("utf-8", errors="replace")
        logger.warning(
            f"provided event template '{template}' could not be unmarshalled",
            stepName="ANS",
            error=str(e),
        )
        return event
