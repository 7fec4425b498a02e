"""Audit logging package."""

from trackly.audit.logger import AuditLogger, setup_logging

__all__ = ["AuditLogger", "setup_logging"]
