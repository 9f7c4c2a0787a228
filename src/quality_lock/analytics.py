"""Privacy-safe, fire-and-forget analytics for auto-fix operations.

Events carry only ids, counts, buckets and booleans. Keys that could hold
user text (content, text, prompt, output, diff, snippet) are stripped before
any channel sees the payload, as are non-scalar values.

Channels are async callables: (event: str, payload: dict) -> None.
Channel failures are logged but never reach the auto-fix decision path.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

AnalyticsChannel = Callable[[str, dict], Awaitable[None]]

FORBIDDEN_KEY = re.compile(r"^(content|text|prompt|output|diff|snippet)$", re.IGNORECASE)

EVENT_ATTEMPT_STARTED = "auto_fix_attempt_started"
EVENT_ATTEMPT_COMPLETED = "auto_fix_attempt_completed"
EVENT_FIX_COMPLETED = "auto_fix_completed"

_SCALARS = (str, int, float, bool, type(None))


def bucket_duration(ms: float) -> str:
    if ms <= 500:
        return "0-500"
    if ms <= 2000:
        return "501-2000"
    if ms <= 5000:
        return "2001-5000"
    return ">5000"


def sanitize_payload(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Drop forbidden keys and non-scalar values from an event payload."""
    cleaned: dict[str, Any] = {}
    for key, value in payload.items():
        if FORBIDDEN_KEY.match(key):
            logger.warning("analytics_forbidden_key_stripped", analytics_event=event, key=key)
            continue
        if not isinstance(value, _SCALARS):
            logger.warning("analytics_non_scalar_stripped", analytics_event=event, key=key)
            continue
        cleaned[key] = value
    return cleaned


async def log_channel(event: str, payload: dict) -> None:
    """Default channel: structured log line per event."""
    logger.info(event, **payload)


class AnalyticsEmitter:
    """Dispatches sanitized events to every registered channel."""

    def __init__(self, channels: Optional[list[AnalyticsChannel]] = None) -> None:
        self._channels: list[AnalyticsChannel] = list(channels) if channels else [log_channel]
        self._pending: set[asyncio.Task] = set()

    def register_channel(self, callback: AnalyticsChannel) -> None:
        """Register an analytics sink (e.g. a transport client wrapper)."""
        self._channels.append(callback)

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        """Schedule delivery and return immediately.

        Inside a running event loop delivery happens on a background task;
        outside one it runs to completion on a private loop.
        """
        cleaned = sanitize_payload(event, payload)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._dispatch(event, cleaned))
            return
        task = loop.create_task(self._dispatch(event, cleaned))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for all scheduled deliveries (tests, shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _dispatch(self, event: str, payload: dict[str, Any]) -> None:
        for channel in self._channels:
            try:
                await channel(event, dict(payload))
            except Exception:
                logger.warning("analytics_channel_failed", analytics_event=event, exc_info=True)
