# ABOUTME: Metadata package for the book records loaded into a catalog.
# ABOUTME: Exports BookInfos and the sort-key and timestamp helpers.

from epubloader.metadata.dates import DEFAULT_TIMESTAMP, to_timestamp
from epubloader.metadata.sorting import author_sort_from_name, get_sort_string
from epubloader.metadata.types import Author, BookInfos

__all__ = [
    "DEFAULT_TIMESTAMP",
    "Author",
    "BookInfos",
    "author_sort_from_name",
    "get_sort_string",
    "to_timestamp",
]
