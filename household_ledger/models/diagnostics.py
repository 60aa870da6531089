"""
Diagnostic Models

The engine never fails a computation because part of its input is
malformed. Instead, each problem becomes an EngineIssue that is logged
and returned alongside the result for the presentation layer to surface.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EngineIssueType(str, Enum):
    """Kinds of problems the engine and integrity check report."""
    MALFORMED_TIMESTAMP = "malformed_timestamp"
    INVALID_QUOTE = "invalid_quote"
    UNCONVERTIBLE = "unconvertible"
    EMPTY_STORE = "empty_store"
    DANGLING_REFERENCE = "dangling_reference"
    MISSING_RATE = "missing_rate"


class IssueSeverity(str, Enum):
    """Severity level for engine issues."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EngineIssue(BaseModel):
    """A single non-fatal problem found while computing."""
    
    issue_type: EngineIssueType
    severity: IssueSeverity = IssueSeverity.WARNING
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    subject: Optional[str] = Field(
        default=None,
        description="Entity id, currency or record the issue is about"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    detected_at: datetime = Field(default_factory=datetime.utcnow)
    
    def to_log_dict(self) -> dict[str, Any]:
        """Flatten for structured logging."""
        return {
            "issue_type": self.issue_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "subject": self.subject,
            "details": self.details,
            "detected_at": self.detected_at.isoformat(),
        }


class IssueBuilder:
    """
    Factory for the issues the engine raises.
    
    Keeps message wording and severity in one place.
    """
    
    @staticmethod
    def malformed_timestamp(value: Any, context: str) -> EngineIssue:
        return EngineIssue(
            issue_type=EngineIssueType.MALFORMED_TIMESTAMP,
            severity=IssueSeverity.WARNING,
            message=f"Unparsable timestamp {value!r} in {context}; treated as oldest",
            subject=context,
            details={"value": str(value)},
        )
    
    @staticmethod
    def invalid_quote(
        base_currency: str,
        quote_currency: str,
        rate: float,
        reason: str,
    ) -> EngineIssue:
        return EngineIssue(
            issue_type=EngineIssueType.INVALID_QUOTE,
            severity=IssueSeverity.WARNING,
            message=(
                f"Dropped quote {quote_currency}->{base_currency} "
                f"(rate={rate!r}): {reason}"
            ),
            subject=f"{base_currency}/{quote_currency}",
            details={
                "base_currency": base_currency,
                "quote_currency": quote_currency,
                "rate": str(rate),
                "reason": reason,
            },
        )
    
    @staticmethod
    def unconvertible(subject: str, currency: str, base_currency: str) -> EngineIssue:
        return EngineIssue(
            issue_type=EngineIssueType.UNCONVERTIBLE,
            severity=IssueSeverity.WARNING,
            message=(
                f"No rate path from {currency} to {base_currency}; "
                f"{subject} counted as 0"
            ),
            subject=subject,
            details={"currency": currency, "base_currency": base_currency},
        )
    
    @staticmethod
    def empty_store(kind: str) -> EngineIssue:
        return EngineIssue(
            issue_type=EngineIssueType.EMPTY_STORE,
            severity=IssueSeverity.INFO,
            message=f"No {kind} records; totals default to zero",
            subject=kind,
        )
    
    @staticmethod
    def dangling_reference(kind: str, record_ref: str, missing_id: str) -> EngineIssue:
        return EngineIssue(
            issue_type=EngineIssueType.DANGLING_REFERENCE,
            severity=IssueSeverity.WARNING,
            message=f"{kind} {record_ref} refers to non-existent id {missing_id}",
            subject=record_ref,
            details={"kind": kind, "missing_id": missing_id},
        )
    
    @staticmethod
    def missing_rate(currency: str, base_currency: str) -> EngineIssue:
        return EngineIssue(
            issue_type=EngineIssueType.MISSING_RATE,
            severity=IssueSeverity.ERROR,
            message=f"Missing exchange rate path for {currency} to {base_currency}",
            subject=currency,
            details={"currency": currency, "base_currency": base_currency},
        )
