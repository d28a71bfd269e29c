"""
Finance Tracker - Source Package

A single-user personal finance ledger: record income and expenses,
keep a running balance, review history and save a text snapshot.

DESIGN PRINCIPLES:
1. Bad input is rejected, never corrected
2. Rejections are values, not crashes
3. Recorded transactions are immutable
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
