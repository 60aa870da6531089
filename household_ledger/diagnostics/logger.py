"""
Engine Diagnostics Logger

DESIGN DECISION: Nothing in the engine is fatal. Every degraded input
(bad timestamp, bad quote, missing rate path, empty collection) is:
1. Logged locally as a structured event
2. Collected on the result so the caller can surface it

The collector lives for exactly one aggregation call and is then
discarded with the result. Nothing is persisted.
"""

import logging
from typing import Optional

import structlog

from household_ledger.models.diagnostics import EngineIssue, IssueSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: str = "household_ledger"):
    """Get a structlog logger bound to the stdlib logger `name`."""
    return structlog.get_logger(name)


class IssueCollector:
    """
    Per-call sink for engine issues.
    
    Logs each issue at its severity and keeps it for the result.
    The same issue is only recorded once per (type, subject, message).
    """
    
    def __init__(self, logger=None):
        self._logger = logger or get_logger("household_ledger.engine")
        self._issues: list[EngineIssue] = []
        self._seen: set[tuple[str, Optional[str], str]] = set()
    
    def record(self, issue: EngineIssue) -> None:
        """Log an issue and keep it."""
        key = (issue.issue_type.value, issue.subject, issue.message)
        if key in self._seen:
            return
        self._seen.add(key)
        self._issues.append(issue)
        
        log_dict = issue.to_log_dict()
        if issue.severity == IssueSeverity.ERROR:
            self._logger.error("engine_issue", **log_dict)
        elif issue.severity == IssueSeverity.WARNING:
            self._logger.warning("engine_issue", **log_dict)
        elif issue.severity == IssueSeverity.INFO:
            self._logger.info("engine_issue", **log_dict)
        else:
            self._logger.debug("engine_issue", **log_dict)
    
    @property
    def issues(self) -> list[EngineIssue]:
        """Issues recorded so far, oldest first."""
        return list(self._issues)
    
    def __len__(self) -> int:
        return len(self._issues)


def configure_log_level(level: str) -> None:
    """Set the stdlib level that gates engine diagnostics."""
    logging.getLogger("household_ledger").setLevel(level.upper())
