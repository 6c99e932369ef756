"""
Medicine catalog discovery from the A to Z index page.
"""

from typing import Dict, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from .documents import Document
from .models import ItemLink

INDEX_LABEL = "Medicines A to Z"
MAX_NAME_LENGTH = 100


def normalize_name(text: Optional[str]) -> str:
    return " ".join((text or "").split())


class LinkCatalogBuilder:
    """
    Collects one ItemLink per medicine page linked from the index.

    An anchor is a candidate when its resolved path contains base_path
    followed by something other than "/" (so the index page itself and
    in-page fragments are skipped). Entries are keyed by absolute URL
    without fragment and returned in first-encounter order.

    Args:
        base_path: Path segment every medicine URL contains
        index_label: Text of the generic link back to the index
    """

    def __init__(self, base_path: str = "/medicines/", index_label: str = INDEX_LABEL):
        self.base_path = base_path
        self.index_label = index_label

    def resolve(self, href: Optional[str], page_url: str) -> Optional[str]:
        """Absolute canonical URL for href, or None if it is not a medicine link."""
        if not href:
            return None
        url, _fragment = urldefrag(urljoin(page_url, href.strip()))
        path = urlparse(url).path

        idx = path.find(self.base_path)
        if idx == -1:
            return None
        tail = path[idx + len(self.base_path):]
        if not tail or tail == "/":
            return None
        return url

    def accepts(self, name: str) -> bool:
        return (
            name != self.index_label
            and "Overview -" not in name
            and "see " not in name
            and 1 < len(name) < MAX_NAME_LENGTH
        )

    def build(self, document: Document) -> List[ItemLink]:
        entries: Dict[str, ItemLink] = {}

        for anchor in document.query_all("a[href]"):
            url = self.resolve(document.attribute(anchor, "href"), document.url)
            if url is None:
                continue

            name = normalize_name(document.text(anchor))
            if not self.accepts(name):
                continue

            existing = entries.get(url)
            if existing is None:
                entries[url] = ItemLink(canonical_url=url, name=name)
            elif not existing.name:
                # Backfill keeps the original position
                entries[url] = ItemLink(canonical_url=url, name=name)

        return list(entries.values())
