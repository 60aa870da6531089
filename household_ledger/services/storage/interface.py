"""
Abstract Record Store Interface

DESIGN DECISION: The engine never talks to storage. The record store is
an external collaborator that hands the engine an immutable snapshot.
Defining it as an abstract interface lets us:
1. Back it with a spreadsheet, a browser store or a database later
2. Use in-memory storage for testing
3. Keep the engine decoupled from persistence

The interface only covers reads plus the snapshot helper. Editing
records belongs to the CRUD layer of each implementation.
"""

from abc import ABC, abstractmethod

from household_ledger.models.records import (
    Account,
    FixedAsset,
    LoanObligation,
    Member,
    RateQuote,
    ValuationRecord,
)
from household_ledger.models.snapshot import (
    LedgerEntities,
    LedgerSnapshot,
    LedgerValuations,
)


class RecordStoreInterface(ABC):
    """
    Abstract interface for household record storage.
    
    Any storage implementation must implement the list methods.
    Lists are returned in arrival order; the engine relies on that
    order to break timestamp ties.
    """
    
    @abstractmethod
    async def list_members(self) -> list[Member]:
        """All household members."""
        pass
    
    @abstractmethod
    async def list_accounts(self) -> list[Account]:
        """All liquid accounts."""
        pass
    
    @abstractmethod
    async def list_fixed_assets(self) -> list[FixedAsset]:
        """All fixed assets."""
        pass
    
    @abstractmethod
    async def list_liquid_valuations(self) -> list[ValuationRecord]:
        """Full valuation history of accounts, in arrival order."""
        pass
    
    @abstractmethod
    async def list_fixed_valuations(self) -> list[ValuationRecord]:
        """Full valuation history of fixed assets, in arrival order."""
        pass
    
    @abstractmethod
    async def list_rate_quotes(self) -> list[RateQuote]:
        """Every rate quote ever recorded, in arrival order."""
        pass
    
    @abstractmethod
    async def list_loans(self) -> list[LoanObligation]:
        """The full loan ledger, settled records included, in arrival order."""
        pass
    
    async def load_snapshot(self) -> LedgerSnapshot:
        """
        Read everything into one frozen LedgerSnapshot.
        
        The snapshot holds copies; later writes to the store do not
        affect it.
        """
        return LedgerSnapshot(
            entities=LedgerEntities(
                members=tuple(await self.list_members()),
                accounts=tuple(await self.list_accounts()),
                fixed_assets=tuple(await self.list_fixed_assets()),
            ),
            valuations=LedgerValuations(
                liquid=tuple(await self.list_liquid_valuations()),
                fixed=tuple(await self.list_fixed_valuations()),
            ),
            quotes=tuple(await self.list_rate_quotes()),
            loans=tuple(await self.list_loans()),
        )


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
