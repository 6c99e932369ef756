"""
Data models for medicine extraction.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional


class SectionKey(Enum):
    """The seven fixed sub-sections every medicine carries."""
    ABOUT = "about"
    ELIGIBILITY = "eligibility"
    HOW_AND_WHEN = "howAndWhenToTake"
    SIDE_EFFECTS = "sideEffects"
    PREGNANCY = "pregnancyBreastFeedingFertility"
    INTERACTIONS = "takingWithOther"
    COMMON_QUESTIONS = "commonQuestions"


# Resolved sub-section links for one medicine. A missing key means the
# link was not found on the detail page.
SectionLinkMap = Dict[SectionKey, str]


def utc_now() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ItemLink:
    """A catalog entry discovered on the index page."""
    canonical_url: str
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.canonical_url

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.canonical_url}


@dataclass
class ContentParagraph:
    """A (title, body) pair taken from one heading or one Q&A widget."""
    title: str
    body: str

    def to_dict(self) -> dict:
        return {"paragraphTitle": self.title, "paragraphText": self.body}

    @classmethod
    def from_dict(cls, data: dict) -> 'ContentParagraph':
        return cls(title=data["paragraphTitle"], body=data["paragraphText"])


@dataclass
class ItemSection:
    """Ordered paragraphs from one sub-section page."""
    paragraphs: List[ContentParagraph] = field(default_factory=list)
    source_url: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"sections": [p.to_dict() for p in self.paragraphs]}
        if self.source_url:
            data["url"] = self.source_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ItemSection':
        return cls(
            paragraphs=[ContentParagraph.from_dict(p) for p in data.get("sections", [])],
            source_url=data.get("url"),
        )


def _empty_sections() -> Dict[SectionKey, ItemSection]:
    return {key: ItemSection() for key in SectionKey}


@dataclass
class Item:
    """One scraped medicine with all seven content sections."""
    name: str
    canonical_url: str
    captured_at: str
    other_brand_names: Optional[str] = None
    summary: Optional[str] = None
    sections: Dict[SectionKey, ItemSection] = field(default_factory=_empty_sections)
    related_tags: List[str] = field(default_factory=list)

    def __post_init__(self):
        # Every item carries all seven slots, possibly empty
        for key in SectionKey:
            self.sections.setdefault(key, ItemSection())

    @property
    def about(self) -> ItemSection:
        return self.sections[SectionKey.ABOUT]

    @property
    def eligibility(self) -> ItemSection:
        return self.sections[SectionKey.ELIGIBILITY]

    @property
    def how_and_when(self) -> ItemSection:
        return self.sections[SectionKey.HOW_AND_WHEN]

    @property
    def side_effects(self) -> ItemSection:
        return self.sections[SectionKey.SIDE_EFFECTS]

    @property
    def pregnancy(self) -> ItemSection:
        return self.sections[SectionKey.PREGNANCY]

    @property
    def interactions(self) -> ItemSection:
        return self.sections[SectionKey.INTERACTIONS]

    @property
    def common_questions(self) -> ItemSection:
        return self.sections[SectionKey.COMMON_QUESTIONS]

    def add_tag(self, tag: str):
        """Add a related tag, keeping first-seen order and no duplicates."""
        if tag not in self.related_tags:
            self.related_tags.append(tag)

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "url": self.canonical_url,
            "dateCaptured": self.captured_at,
            "otherBrandNames": self.other_brand_names,
            "summary": self.summary,
        }
        for key in SectionKey:
            data[key.value] = self.sections[key].to_dict()
        data["relatedConditions"] = list(self.related_tags)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Item':
        return cls(
            name=data["name"],
            canonical_url=data["url"],
            captured_at=data.get("dateCaptured", ""),
            other_brand_names=data.get("otherBrandNames"),
            summary=data.get("summary"),
            sections={
                key: ItemSection.from_dict(data.get(key.value, {}))
                for key in SectionKey
            },
            related_tags=list(data.get("relatedConditions", [])),
        )


@dataclass
class RunResult:
    """Result document for one full scraping run."""
    total_found: int
    succeeded: int
    failed_names: List[str]
    items: List[Item]
    completed_at: str

    @property
    def attempted(self) -> int:
        return self.succeeded + len(self.failed_names)

    def success_rate(self) -> float:
        """Percentage of attempted medicines that were scraped (0-100)."""
        if not self.attempted:
            return 0.0
        return self.succeeded / self.attempted * 100

    def to_dict(self) -> dict:
        return {
            "totalMedicines": self.total_found,
            "scrapedMedicines": self.succeeded,
            "failedMedicines": list(self.failed_names),
            "medicines": [item.to_dict() for item in self.items],
            "scrapedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RunResult':
        return cls(
            total_found=data["totalMedicines"],
            succeeded=data["scrapedMedicines"],
            failed_names=list(data.get("failedMedicines", [])),
            items=[Item.from_dict(m) for m in data.get("medicines", [])],
            completed_at=data.get("scrapedAt", ""),
        )
