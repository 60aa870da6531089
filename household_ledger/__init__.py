"""
Household Ledger - Source Package

The aggregation and currency-conversion engine behind a household
asset ledger: accounts, fixed assets, loans and exchange-rate quotes
in, one consolidated net-worth figure out.

DESIGN PRINCIPLES:
1. Every call is a pure function of the snapshot it is given
2. Degrade gracefully, never fail the whole computation
3. Flag what cannot be converted, never drop it silently
4. Ledgers are append-only; newer records supersede older ones
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Ledger Team"
