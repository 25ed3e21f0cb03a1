"""
Process bootstrap for the alert hook - installs it on a logger and exposes a
small command line to verify the setup or send a test event.
"""

import argparse
import logging
import sys
import uuid
from typing import Dict, List, Optional, Union

from pipeline_alerts.alerting import AlertNotificationHook, DeliveryClient
from pipeline_alerts.config import ConfigManager, HookConfiguration
from pipeline_alerts.exceptions import AlertHookError
from pipeline_alerts.monitoring import MetricsCollector, StructuredLogger, get_metrics_collector

logger = StructuredLogger("pipeline_alerts.cli", level="INFO")

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


def install_alert_hook(
    target: Union[logging.Logger, StructuredLogger],
    configuration: HookConfiguration,
    correlation_id: str,
    client: Optional[DeliveryClient] = None,
    metrics: Optional[MetricsCollector] = None,
    timeout: Optional[float] = None,
) -> AlertNotificationHook:
    """Construct the hook and attach it to ``target``.

    Construction errors propagate; nothing is attached in that case.
    """
    hook = AlertNotificationHook.create(
        configuration,
        correlation_id,
        client=client,
        metrics=metrics,
        timeout=timeout,
    )
    if isinstance(target, StructuredLogger):
        target.add_handler(hook)
    else:
        target.addHandler(hook)
    logger.info("Alert notification hook installed", correlationId=correlation_id)
    return hook


def _parse_fields(pairs: List[str]) -> Dict[str, str]:
    fields = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"field '{pair}' must look like key=value")
        fields[key] = value
    return fields


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipeline-alerts",
        description="Forward pipeline log records to the alert notification service",
    )
    parser.add_argument('--env', default='development', help='Configuration environment')
    parser.add_argument('--config-path', default='config', help='Configuration directory')
    parser.add_argument('--correlation-id', help='Correlation id of the run (default: configured or random)')

    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('check', help='Validate service key and backend setup')

    send = subparsers.add_parser('send', help='Send one log message through the hook')
    send.add_argument('message', help='Log message')
    send.add_argument('--level', choices=sorted(LEVELS), default='warning', help='Log level')
    send.add_argument('--step-name', help='Step name used as event subject')
    send.add_argument('--field', action='append', default=[], help='Extra field as key=value')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        manager = ConfigManager(env=args.env, config_path=args.config_path)
        correlation_id = args.correlation_id or manager.get_correlation_id() or str(uuid.uuid4())
        hook = AlertNotificationHook.create(
            manager.get_hook_configuration(),
            correlation_id,
            metrics=get_metrics_collector(),
            timeout=manager.get_request_timeout(),
        )
    except AlertHookError as e:
        logger.error("Alert notification hook setup failed", error_type=type(e).__name__, error=str(e))
        return 1

    if args.command == 'check':
        logger.info("Alert notification hook setup is valid", correlationId=correlation_id)
        return 0

    try:
        fields = _parse_fields(args.field)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    if args.step_name:
        fields["stepName"] = args.step_name

    record = logging.LogRecord(
        logger.logger.name, LEVELS[args.level], __file__, 0, args.message, (), None
    )
    record.extra_fields = fields

    error = hook.fire(record)
    hook.close()
    if error is not None:
        logger.error("Event delivery failed", error_type=type(error).__name__, error=str(error))
        return 1

    logger.info("Message processed", level=args.level, correlationId=correlation_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
