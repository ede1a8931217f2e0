"""Fire-and-forget telemetry for successful redirects

Classes:
    TelemetrySink:
        Interface receiving one event per served redirect or preview.
    LoggingTelemetrySink:
        Default sink which writes the event as a structured log line, under 'redirect'.

Functions:
    emit(sink, event) -> None:
        Hand an event to a sink; sink failures are logged and swallowed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any


logger = logging.getLogger(__name__)


class TelemetrySink(ABC):
    @abstractmethod
    def record(self, event: dict[str, Any]) -> None:
        pass


class LoggingTelemetrySink(TelemetrySink):
    def record(self, event: dict[str, Any]) -> None:
        # Nested so the event's timestamp can't shadow the log line's own
        logger.info('Link redirect recorded.', extra={'event': 'link_redirect', 'redirect': event})


def emit(sink: TelemetrySink | None, event: dict[str, Any]) -> None:
    """Record `event` on `sink`; never raises"""
    if sink is None:
        return
    try:
        sink.record(event)
    except Exception as e:
        logger.warning('Telemetry sink failed. Dropping event.', extra={'error': repr(e), 'hash': event.get('hash')})
