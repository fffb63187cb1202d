"""
Guest Reviews Orchestrator Module
=================================

Process-level wiring shared by whatever hosts the review services.

Usage:
    from src.orchestrator import setup_logging_from_settings

    setup_logging_from_settings()
"""

from .logging_config import (
    JSONFormatter,
    ReadableFormatter,
    ReviewContextFilter,
    log_context,
    redact,
    setup_logging,
    setup_logging_from_settings,
)

__all__ = [
    "JSONFormatter",
    "ReadableFormatter",
    "ReviewContextFilter",
    "log_context",
    "redact",
    "setup_logging",
    "setup_logging_from_settings",
]
