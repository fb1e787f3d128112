"""Ports (interfaces) for the reclamation bounded context.

Ports define the contracts for the content index and the content store
without specifying implementation details.
"""

from reclamation.ports.exceptions import ProcessingError, StorageError
from reclamation.ports.repositories import IContentStore, IGroupContentIndex

__all__ = [
    "IContentStore",
    "IGroupContentIndex",
    "ProcessingError",
    "StorageError",
]
