"""
Page fetching and content extraction.

This package handles browser rendering, static HTTP fetching,
single-page content extraction and bulk listing scrapes.
"""

from .browser import BrowserPool, close_shared_pool, shared_pool
from .extractor import ContentExtractor, extract_document
from .fetcher import FetchResult, fetch_static, render_page
from .listing import ListingExtractor, extract_listing_article

__all__ = [
    "BrowserPool",
    "ContentExtractor",
    "FetchResult",
    "ListingExtractor",
    "close_shared_pool",
    "extract_document",
    "extract_listing_article",
    "fetch_static",
    "render_page",
    "shared_pool",
]
