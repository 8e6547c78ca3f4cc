"""
Backend package for the console rental service.

This package provides a FastAPI application around an in-memory booking
ledger, a periodic lifecycle sweep, and the account endpoints that proxy a
hosted auth service and a key-value profile store.
"""
