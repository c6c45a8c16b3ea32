# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Pipeline events.

The compaction engine and the orchestrator report what they decided through
an ``EventHook`` instead of logging inline. The default hook writes one log
record per event; tests pass a list's ``append`` to capture them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

HISTORY_MEASURED = "history_measured"
CONTEXT_COMPACTED = "context_compacted"
CHAT_COMPLETED = "chat_completed"


@dataclass(frozen=True)
class PipelineEvent:
    """A single observation from the chat pipeline."""

    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHook = Callable[[PipelineEvent], None]


def log_event(event: PipelineEvent) -> None:
    """Default hook: one INFO record with the event payload as ``extra``."""
    details = " ".join(f"{k}={v}" for k, v in event.data.items())
    logger.info("%s %s", event.type, details, extra={"event": event.type, **event.data})


def emit(hook: Optional[EventHook], event_type: str, **data: Any) -> None:
    """Deliver an event to *hook*.

    Hook failures are logged and never reach the caller.

    Args:
        hook (Optional[EventHook]): Receiver, or ``None`` to drop the event.
        event_type (str): Event name.
        **data: Event payload.
    """
    if hook is None:
        return
    try:
        hook(PipelineEvent(type=event_type, data=data))
    except Exception:
        logger.exception("Event hook failed for %s", event_type)
