"""Book model: page tree, metadata, table of contents and caches."""

from .page import HeadingInfo, MetaKey, MetaValue, Page, urlify
from .book import Book
from .metadata import extract_metadata, parse_directive
from .tree import PageTreeBuilder
from .toc import TocEntry, build_toc, serialize_toc, gen_book_toc_search
from .cache import AssetStore, CacheEntry, OutputCache, name_to_sha1_name, sha1_hex

__all__ = [
    "HeadingInfo",
    "MetaKey",
    "MetaValue",
    "Page",
    "urlify",
    "Book",
    "extract_metadata",
    "parse_directive",
    "PageTreeBuilder",
    "TocEntry",
    "build_toc",
    "serialize_toc",
    "gen_book_toc_search",
    "AssetStore",
    "CacheEntry",
    "OutputCache",
    "name_to_sha1_name",
    "sha1_hex",
]
