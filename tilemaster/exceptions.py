"""
Store Exceptions

Exception classes raised by the remote and local stores and caught at the
sync engine boundary.
"""

from typing import Optional


class StoreError(Exception):
    """Base exception for backing store errors"""
    
    def __init__(self, message: str, code: Optional[str] = None,
                 collection: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.collection = collection


class StoreMissingTableError(StoreError):
    """Store is reachable but the collection's table is not provisioned"""
    pass


class StoreConnectionError(StoreError):
    """Store could not be reached (network, auth, timeout)"""
    pass


class LocalStoreError(StoreError):
    """Local fallback storage could not be read or written"""
    pass
