"""
Gold Ledger - Source Package

A conversational ledger for small gold, coin and currency dealers.
Each user records purchases and sales through a short guided dialog,
gets an invoice image for every saved transaction and can ask for a
summary or a full export of their history at any time.

DESIGN PRINCIPLES:
1. One dialog per user, one answer at a time
2. Invalid answers are re-asked, never guessed
3. Persist first, render second
4. Every step must be auditable
5. Storage and transport are swappable
"""

__version__ = "1.0.0"
__author__ = "Gold Ledger Team"
