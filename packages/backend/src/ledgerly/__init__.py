"""Ledgerly — multi-tenant personal-finance record API.

Stores categories, transactions, savings goals and bills for each
authenticated user. Every read and write is scoped to the caller's
identity, which is established from a verified bearer token.
"""

__version__ = "0.1.0"
