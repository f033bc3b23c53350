# ABOUTME: Exception hierarchy for catalog provisioning and book ingestion.
# ABOUTME: Fatal conditions are exceptions; recoverable ones travel as warnings.


class CatalogError(Exception):
    """Base class for all catalog errors."""


class ProvisionError(CatalogError):
    """Raised when a fresh catalog database cannot be built."""


class SchemaAssetError(ProvisionError):
    """Raised when the canonical schema script cannot be read."""


class CatalogOpenError(CatalogError):
    """Raised when an existing catalog database cannot be opened."""


class IngestError(CatalogError):
    """Raised when a book cannot be added. Rows already written stay in place."""


class StoreError(IngestError):
    """Raised when a statement against the catalog database fails."""


class BookNotFoundError(IngestError):
    """Raised when a freshly inserted book cannot be found by its uuid."""


class BookIdMismatchError(IngestError):
    """Raised when the database assigned a different id than the one requested."""


class UnreadableBookFileError(IngestError):
    """Raised when the file for a book's primary format cannot be read."""


class ReferenceResolutionError(IngestError):
    """Raised when a series, author, language, or tag cannot be resolved to one row."""


class MissingReferenceError(ReferenceResolutionError):
    """Raised when a reference row is not found right after being created."""


class AmbiguousReferenceError(ReferenceResolutionError):
    """Raised when a natural key matches more than one reference row."""
