"""
Personal Ledger - Source Package

A single-owner double-entry bookkeeping app: chart of accounts, journal,
cashbook, investment portfolio and a dashboard, kept in a Google
Spreadsheet the owner can also edit by hand.

DESIGN PRINCIPLES:
1. The journal is the source of truth; cached numbers are recomputed from it
2. Fail early, fail visibly
3. No silent corrections
4. Every write must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
