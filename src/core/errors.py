# file: src/core/errors.py
"""
Error hierarchy for the catalog core.

- TransientFetchError   data store unreachable / timeout, retryable, shown to the UI
- CancelledFetchError   a superseded catalog fetch, never shown
- StorageCorruption     persisted JSON could not be read, recovered as empty
- ValidationError       bad input from the caller (CEP, phone, missing user)
"""


class CatalogError(Exception):
    """Base class for all errors raised by the catalog core."""


class TransientFetchError(CatalogError):
    pass


class CancelledFetchError(CatalogError):
    pass


class StorageCorruption(CatalogError):
    pass


class ValidationError(CatalogError):
    pass
