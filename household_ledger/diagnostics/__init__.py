"""Engine diagnostics package."""

from household_ledger.diagnostics.logger import (
    IssueCollector,
    configure_log_level,
    get_logger,
)

__all__ = ["IssueCollector", "configure_log_level", "get_logger"]
