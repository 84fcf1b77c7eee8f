"""
Per-user login state for the messaging extension.

The store is an injectable key-value abstraction; the in-memory implementation
keeps entries for the lifetime of the process only.
"""

from .login_store import InMemoryLoginStateStore, LoginStateStore

__all__ = ["InMemoryLoginStateStore", "LoginStateStore"]
