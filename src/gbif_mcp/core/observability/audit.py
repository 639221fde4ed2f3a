"""Audit logging for resilience events.

Circuit transitions, rate-limit waits, retries, cache maintenance, and
truncation are written to a dedicated ``gbif_mcp.audit`` logger so they can
be filtered apart from ordinary diagnostics.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class AuditEventType(Enum):
    """Types of audit events emitted by the request pipeline."""

    CIRCUIT_STATE_CHANGE = "circuit_state_change"
    CIRCUIT_REJECTED = "circuit_rejected"
    RATE_LIMIT_WAIT = "rate_limit_wait"
    RATE_LIMIT_BACKOFF = "rate_limit_backoff"
    RETRY_ATTEMPT = "retry_attempt"
    CACHE_CLEARED = "cache_cleared"
    RESPONSE_TRUNCATED = "response_truncated"
    TOOL_INVOCATION = "tool_invocation"
    OTHER = "other"


@dataclass
class AuditEvent:
    """Structured audit event."""

    event_type: AuditEventType
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "details": self.details,
        }


class AuditLogger:
    """Writes audit events to the ``gbif_mcp.audit`` logger."""

    def __init__(self):
        self._logger = logging.getLogger("gbif_mcp.audit")

    def log(self, event: AuditEvent, level: int = logging.INFO) -> None:
        """Log an audit event."""
        self._logger.log(level, f"AUDIT: {event.event_type.value}", extra={"audit": event.to_dict()})


_audit = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger."""
    return _audit


def audit_log(event_type: str, *, level: int = logging.INFO, **details: Any) -> None:
    """
    Convenience function for audit logging.

    Args:
        event_type: Type of event (circuit_state_change, rate_limit_wait, ...)
        level: Logging level for the record
        **details: Additional details to include in the audit log
    """
    try:
        event_enum = AuditEventType(event_type)
    except ValueError:
        event_enum = AuditEventType.OTHER
        details["original_event_type"] = event_type

    _audit.log(AuditEvent(event_type=event_enum, details=details), level=level)
