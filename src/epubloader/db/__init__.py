# ABOUTME: Public API for the catalog database layer.
# ABOUTME: Exports provisioning, the book id map, the catalog, and its error types.

from epubloader.db.book_ids import BookIdMap
from epubloader.db.catalog import CalibreCatalog, IngestResult
from epubloader.db.connection import DEFAULT_SCHEMA_PATH, open_catalog, provision_catalog
from epubloader.db.errors import CatalogError, IngestError, ProvisionError
from epubloader.db.mapping import CatalogBook

__all__ = [
    "DEFAULT_SCHEMA_PATH",
    "BookIdMap",
    "CalibreCatalog",
    "CatalogBook",
    "CatalogError",
    "IngestError",
    "IngestResult",
    "ProvisionError",
    "open_catalog",
    "provision_catalog",
]
