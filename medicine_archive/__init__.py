"""
Medicine Archive - NHS Medicines A to Z scraper.

Discovers every medicine on the index page, extracts its detail and seven
sub-section pages under bounded concurrency, repairs the flattened text
and writes one JSON document.
"""

from .config import ScrapeOptions
from .models import ContentParagraph, Item, ItemLink, ItemSection, RunResult, SectionKey
from .pipeline import MedicineScraper

__all__ = [
    'ScrapeOptions',
    'MedicineScraper',
    'ContentParagraph',
    'Item',
    'ItemLink',
    'ItemSection',
    'RunResult',
    'SectionKey',
]
