"""
Observability utilities for gbif-mcp: audit events, tool decorators and log redaction.
"""

from gbif_mcp.core.observability.audit import (
    AuditEvent,
    AuditEventType,
    AuditLogger,
    audit_log,
    get_audit_logger,
)
from gbif_mcp.core.observability.decorators import mcp_tool, validation_error_response
from gbif_mcp.core.observability.redaction import (
    MASK,
    SENSITIVE_KEY_FRAGMENTS,
    RedactionFilter,
    is_sensitive_key,
    redact_sensitive,
    redact_text,
)

__all__ = [
    # Audit
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "audit_log",
    "get_audit_logger",
    # Tool decorators
    "mcp_tool",
    "validation_error_response",
    # Redaction
    "MASK",
    "SENSITIVE_KEY_FRAGMENTS",
    "RedactionFilter",
    "is_sensitive_key",
    "redact_sensitive",
    "redact_text",
]
