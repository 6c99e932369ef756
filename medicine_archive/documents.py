"""
Document access for the extraction core.

The extractors never talk to a browser directly. They ask a
DocumentProvider for a BrowsingSession, navigate it to a URL and get back a
Document they can query with CSS selectors.

    DocumentProvider            (one per run: owns the engine)
        └── session()           (one per medicine: isolated cookies/storage)
              └── navigate(url) -> Document

HtmlDocument implements the query side over a BeautifulSoup snapshot of
the rendered HTML. browser_pool.PlaywrightProvider renders pages with a
real browser and snapshots them into HtmlDocuments;
StaticDocumentProvider serves fixed HTML strings (offline replays, tests).
"""

import re
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from .errors import DocumentError

# Playwright text matcher, e.g. button:has-text("Accept")
_HAS_TEXT = re.compile(r':has-text\((["\'])(.*?)\1\)')


def to_soup_selector(selector: str) -> str:
    """Rewrite Playwright-only pseudo classes into soupsieve equivalents."""
    return _HAS_TEXT.sub(lambda m: f':-soup-contains("{m.group(2)}")', selector)


class Document(ABC):
    """A rendered page that can be queried with CSS selectors."""

    @property
    @abstractmethod
    def url(self) -> str:
        pass

    @abstractmethod
    def query(self, selector: str, within: Optional[Tag] = None) -> Optional[Tag]:
        """First element matching selector, or None."""
        pass

    @abstractmethod
    def query_all(self, selector: str, within: Optional[Tag] = None) -> List[Tag]:
        """All elements matching selector, in document order."""
        pass

    @abstractmethod
    def text(self, element: Tag) -> str:
        pass

    @abstractmethod
    def attribute(self, element: Tag, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def following_siblings(self, element: Tag) -> List[Tag]:
        """Element siblings after element, in document order."""
        pass

    @abstractmethod
    def matches(self, element: Tag, selector: str) -> bool:
        pass

    @abstractmethod
    async def dismiss(self, selector: str) -> bool:
        """
        Click the first visible element matching selector.

        Returns:
            True if something was clicked, False if nothing matched.
        """
        pass


class HtmlDocument(Document):
    """Document backed by a BeautifulSoup parse of an HTML string."""

    def __init__(self, html: str, url: str):
        self._url = url
        self._load(html)
        self.dismissed: List[str] = []

    def _load(self, html: str):
        self.soup = BeautifulSoup(html, 'html.parser')

    @property
    def url(self) -> str:
        return self._url

    def query(self, selector: str, within: Optional[Tag] = None) -> Optional[Tag]:
        root = within if within is not None else self.soup
        return root.select_one(to_soup_selector(selector))

    def query_all(self, selector: str, within: Optional[Tag] = None) -> List[Tag]:
        root = within if within is not None else self.soup
        return list(root.select(to_soup_selector(selector)))

    def text(self, element: Tag) -> str:
        # Same as the DOM's textContent: descendants joined with no separator
        return element.get_text()

    def attribute(self, element: Tag, name: str) -> Optional[str]:
        value = element.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def following_siblings(self, element: Tag) -> List[Tag]:
        return [s for s in element.next_siblings if isinstance(s, Tag)]

    def matches(self, element: Tag, selector: str) -> bool:
        return element.css.match(to_soup_selector(selector))

    async def dismiss(self, selector: str) -> bool:
        if self.query(selector) is None:
            return False
        self.dismissed.append(selector)
        return True


class BrowsingSession(ABC):
    """An isolated browsing context (cookies, storage) for one medicine."""

    @abstractmethod
    async def navigate(self, url: str, timeout_ms: int) -> Document:
        """
        Load url and return the rendered document.

        Raises:
            DocumentError: navigation failed or timed out
        """
        pass


class DocumentProvider(ABC):
    """Owns the rendering engine for a run."""

    async def start(self):
        pass

    async def shutdown(self):
        pass

    @abstractmethod
    def session(self) -> AsyncIterator[BrowsingSession]:
        """Async context manager yielding a fresh BrowsingSession."""
        pass

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
        return False


class StaticSession(BrowsingSession):

    def __init__(self, provider: 'StaticDocumentProvider'):
        self.provider = provider

    async def navigate(self, url: str, timeout_ms: int) -> Document:
        self.provider.visited.append(url)
        if url in self.provider.failing:
            raise DocumentError("navigation failed", url=url)
        html = self.provider.pages.get(url)
        if html is None:
            raise DocumentError("page not found", url=url)
        return HtmlDocument(html, url)


class StaticDocumentProvider(DocumentProvider):
    """
    Serves fixed HTML by URL.

    Args:
        pages: url -> html
        failing: URLs whose navigation raises DocumentError even if the
            page is present
    """

    def __init__(self, pages: Dict[str, str], failing: Iterable[str] = ()):
        self.pages = dict(pages)
        self.failing = set(failing)
        self.visited: List[str] = []
        self.sessions_opened = 0

    @asynccontextmanager
    async def session(self):
        self.sessions_opened += 1
        yield StaticSession(self)
