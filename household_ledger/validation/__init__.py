"""Ledger validation package."""

from household_ledger.validation.integrity import LedgerIntegrityChecker, check_integrity

__all__ = ["LedgerIntegrityChecker", "check_integrity"]
