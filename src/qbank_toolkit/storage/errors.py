"""
Module: storage.errors

Purpose:
    Typed failures raised by the question store. Callers get one class per
    failure mode and the underlying engine error as ``__cause__``.

Deleting a record that does not exist is not an error and has no class
here.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for question store failures."""
    pass


class InitializationError(StoreError):
    """The store could not be opened or created (disabled, corrupt, newer schema)."""
    pass


class ReadError(StoreError):
    """A fetch failed after the store was open."""
    pass


class WriteError(StoreError):
    """A single-record upsert, delete or clear was rejected."""
    pass


class TransactionError(StoreError):
    """A bulk write aborted. Nothing from the batch was applied."""
    pass
