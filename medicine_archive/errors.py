"""
Error taxonomy for the medicine scraper.

Fatal errors abort the whole run; the rest are isolated to one medicine or
one section and reported through the event sink.
"""

from typing import Optional


class MedicineArchiveError(Exception):
    """Base class for all scraper errors."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

    def __str__(self):
        base = super().__str__()
        if self.url:
            return f"{base} ({self.url})"
        return base


class DocumentError(MedicineArchiveError):
    """A page could not be navigated to or parsed."""


class EngineStartError(MedicineArchiveError):
    """The browser engine could not be started. Fatal."""


class CatalogFetchError(MedicineArchiveError):
    """The index page was unreachable. Fatal, aborts before any item."""


class ItemFetchError(MedicineArchiveError):
    """A medicine's detail page failed. The medicine is recorded as failed."""

    def __init__(self, message: str, url: Optional[str] = None, name: Optional[str] = None):
        super().__init__(message, url)
        self.name = name


class SectionFetchError(MedicineArchiveError):
    """One sub-section page failed. Only that section is left empty."""

    def __init__(self, message: str, url: Optional[str] = None, section: Optional[str] = None):
        super().__init__(message, url)
        self.section = section
