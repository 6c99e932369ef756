"""
Per-medicine extraction.

One call to DetailExtractor.extract() turns an ItemLink into an Item:

    Stage A  detail page      name, brand names, summary, related tags
             (any failure here fails the whole medicine)
    Stage B  section links    seven sub-section URLs from the detail page
             (failure leaves the map empty)
    Stage C  section pages    heading walk per section, Q&A for common
             questions (failure leaves only that section empty)

All pages of one medicine share one isolated browsing session.
"""

import re
from typing import List, Optional
from urllib.parse import urljoin

from .documents import BrowsingSession, Document
from .errors import DocumentError, ItemFetchError, SectionFetchError
from .events import EventKind, EventSink, ProgressEvent, null_sink
from .logger import get_logger
from .models import ContentParagraph, Item, ItemLink, ItemSection, SectionKey, SectionLinkMap, utc_now
from .sections import SectionContentExtractor, normalize
from .text_repair import TextReconstructionPipeline

log = get_logger('detail')

# Tried in order; the first one that clicks something wins
CONSENT_SELECTORS = (
    'button:has-text("Accept")',
    'button:has-text("Accept all")',
    'button:has-text("I accept")',
    'button:has-text("Accept all cookies")',
    '[data-testid="accept-cookies"]',
    '.nhsuk-cookie-banner button',
    '#nhsuk-cookie-banner button',
)

NAME_SELECTOR = 'h1, .nhsuk-heading-xl'
BRAND_SELECTOR = '.nhsuk-caption-xl'
SUMMARY_SELECTOR = 'main p, .nhsuk-main-wrapper p, .nhsuk-width-container p'
META_DESCRIPTION = 'meta[name="description"]'
CONDITION_LINKS = 'a[href*="/conditions/"]'
SECTION_LINKS = 'a[href*="/medicines/"]'

UNKNOWN_NAME = "Unknown Medicine"

# "Paracetamol for adults - Brand names: Calpol" -> "Paracetamol for adults"
_NAME_SEPARATOR = re.compile(r'\s[-–—]\s')
_BRAND_PREFIX = re.compile(r'^[-–—]?\s*(Other brand names|Brand name)s?:\s*', re.IGNORECASE)

MIN_SUMMARY_LENGTH = 50
SUMMARY_DENYLIST = (
    'cookies',
    'analytics',
    "We've put some small files",
    'Page last reviewed',
    'Next review due',
)
MAX_TAG_LENGTH = 50

# Checked in this order; an anchor belongs to the first group it matches.
# "about" is checked last: "Common questions about ibuprofen" is not the about page.
SECTION_KEYWORDS = (
    (SectionKey.ELIGIBILITY, ('who can', 'cannot take')),
    (SectionKey.HOW_AND_WHEN, ('how and when', 'how to take')),
    (SectionKey.SIDE_EFFECTS, ('side effect',)),
    (SectionKey.PREGNANCY, ('pregnancy', 'breastfeeding', 'fertility')),
    (SectionKey.INTERACTIONS, ('taking with', 'other medicines', 'interaction')),
    (SectionKey.COMMON_QUESTIONS, ('common question',)),
    (SectionKey.ABOUT, ('about',)),
)


def classify_section(text: str) -> Optional[SectionKey]:
    """Section a link text points to, or None."""
    text = text.lower()
    for key, keywords in SECTION_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return key
    return None


class DetailExtractor:
    """
    Extracts one medicine.

    Args:
        pipeline: Text repair used for every stored string
        sections: Heading-walk / Q&A segmenter
        sink: Receives section_failed events
        timeout_ms: Detail page navigation timeout
        section_timeout_ms: Sub-section page navigation timeout
    """

    def __init__(
        self,
        pipeline: TextReconstructionPipeline,
        sections: Optional[SectionContentExtractor] = None,
        sink: EventSink = null_sink,
        timeout_ms: int = 30000,
        section_timeout_ms: int = 15000,
        clock=utc_now,
    ):
        self.pipeline = pipeline
        self.sections = sections or SectionContentExtractor()
        self.sink = sink
        self.timeout_ms = timeout_ms
        self.section_timeout_ms = section_timeout_ms
        self.clock = clock

    async def extract(self, link: ItemLink, session: BrowsingSession) -> Item:
        """
        Raises:
            ItemFetchError: the detail page could not be loaded or read
        """
        # Stage A
        try:
            document = await session.navigate(link.canonical_url, self.timeout_ms)
            await dismiss_consent(document)
            item = self.read_detail(document, link)
        except DocumentError as e:
            raise ItemFetchError(f"detail page failed: {e}", url=link.canonical_url, name=link.name) from e
        except Exception as e:
            raise ItemFetchError(f"could not read detail page: {e!r}", url=link.canonical_url, name=link.name) from e

        # Stage B
        try:
            links = self.section_links(document)
        except Exception as e:
            links = {}
            self.sink(ProgressEvent(
                kind=EventKind.SECTION_LINKS_FAILED,
                name=item.name,
                url=link.canonical_url,
                error=repr(e),
            ))

        # Stage C
        for key in SectionKey:
            url = links.get(key)
            if url is None:
                continue
            try:
                item.sections[key] = await self.read_section(session, key, url)
            except SectionFetchError as e:
                item.sections[key] = ItemSection(source_url=url)
                self.sink(ProgressEvent(
                    kind=EventKind.SECTION_FAILED,
                    name=item.name,
                    url=url,
                    error=str(e.__cause__ or e),
                    details={"section": key.value},
                ))

        return item

    def read_detail(self, document: Document, link: ItemLink) -> Item:
        """Stage A fields from the rendered detail page."""
        heading = document.query(NAME_SELECTOR)
        raw_name = normalize(document.text(heading)) if heading is not None else ""
        raw_name = _NAME_SEPARATOR.split(raw_name, maxsplit=1)[0]
        name = self.pipeline.reconstruct(raw_name) or link.name or UNKNOWN_NAME

        item = Item(
            name=name,
            canonical_url=link.canonical_url,
            captured_at=self.clock(),
            other_brand_names=self.brand_names(document),
            summary=self.summary(document),
        )
        for tag in self.related_tags(document):
            item.add_tag(tag)
        return item

    def brand_names(self, document: Document) -> Optional[str]:
        caption = document.query(BRAND_SELECTOR)
        if caption is None:
            return None
        text = _BRAND_PREFIX.sub('', normalize(document.text(caption)))
        return self.pipeline.reconstruct(text) or None

    def summary(self, document: Document) -> Optional[str]:
        for paragraph in document.query_all(SUMMARY_SELECTOR):
            text = self.pipeline.reconstruct(normalize(document.text(paragraph)))
            if len(text) > MIN_SUMMARY_LENGTH and not any(marker in text for marker in SUMMARY_DENYLIST):
                return self.pipeline.enhance(text)

        meta = document.query(META_DESCRIPTION)
        if meta is not None:
            return self.pipeline.repair(normalize(document.attribute(meta, 'content'))) or None
        return None

    def related_tags(self, document: Document) -> List[str]:
        tags = []
        for anchor in document.query_all(CONDITION_LINKS):
            text = self.pipeline.reconstruct(normalize(document.text(anchor)))
            if 0 < len(text) < MAX_TAG_LENGTH and text not in tags:
                tags.append(text)
        return tags

    def section_links(self, document: Document) -> SectionLinkMap:
        """Stage B. The first anchor found for each section wins."""
        links: SectionLinkMap = {}
        for anchor in document.query_all(SECTION_LINKS):
            href = document.attribute(anchor, 'href')
            text = normalize(document.text(anchor))
            if not href or not text:
                continue
            key = classify_section(text)
            if key is not None and key not in links:
                links[key] = urljoin(document.url, href)
        return links

    async def read_section(self, session: BrowsingSession, key: SectionKey, url: str) -> ItemSection:
        """
        Stage C for one section.

        Raises:
            SectionFetchError: the page could not be loaded or read
        """
        try:
            document = await session.navigate(url, self.section_timeout_ms)
            await dismiss_consent(document)
            if key is SectionKey.COMMON_QUESTIONS:
                paragraphs = self.sections.questions(document)
            else:
                paragraphs = self.sections.heading_walk(document)
        except Exception as e:
            raise SectionFetchError(f"section {key.value} failed", url=url, section=key.value) from e

        return ItemSection(
            paragraphs=[
                ContentParagraph(title=p.title, body=self.pipeline.repair(p.body))
                for p in paragraphs
            ],
            source_url=url,
        )


async def dismiss_consent(document: Document, selectors=CONSENT_SELECTORS) -> Optional[str]:
    """
    Best-effort dismissal of the cookie consent banner.

    Returns:
        The selector that worked, or None if no banner was found.
    """
    for selector in selectors:
        try:
            if await document.dismiss(selector):
                log.debug(f"Dismissed consent banner via {selector}")
                return selector
        except DocumentError as e:
            log.debug(f"Consent selector {selector} failed: {e}")
    return None
