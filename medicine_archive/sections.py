"""
Section content extraction.

Medicine sub-section pages are flat runs of headings followed by
paragraphs, lists and callouts. The heading walk turns them into ordered
(title, body) pairs:

    <h2>Who can take it</h2>          -> title
    <p>Adults and children...</p>     -> body fragment
    <ul><li>...</li></ul>             -> body fragment
    <h2>Who may not be able...</h2>   -> next pair starts here

The common questions page uses disclosure widgets instead, one
<details> per question.

Text comes back whitespace-normalised only; DetailExtractor runs the
bodies through the reconstruction pipeline.
"""

from typing import List, Optional

from bs4 import Tag

from .documents import Document
from .models import ContentParagraph

HEADINGS = "h1, h2, h3, h4, h5, h6"

# Footer, navigation and feedback headings that never carry content
TITLE_DENYLIST = (
    "Page last reviewed",
    "Next review due",
    "Health A to Z",
    "NHS services",
    "Support links",
    "Cookies",
    "More in ",
    "Help us improve",
    "Can you answer",
    "Take our survey",
)

MIN_TITLE_LENGTH = 3      # title must be longer than this
MIN_FRAGMENT_LENGTH = 10  # sibling text must be longer than this
MIN_BODY_LENGTH = 20      # accumulated body must be longer than this

MIN_QUESTION_LENGTH = 5
MIN_ANSWER_LENGTH = 10

QA_WIDGET = "details.nhsuk-details"
QA_PROMPT = ".nhsuk-details__summary-text"
QA_PAYLOAD = ".nhsuk-details__text"


def normalize(text: Optional[str]) -> str:
    return " ".join((text or "").split())


class SectionContentExtractor:
    """Segments a rendered page into ordered ContentParagraphs."""

    def __init__(self, title_denylist=TITLE_DENYLIST):
        self.title_denylist = tuple(title_denylist)

    def qualifies(self, title: str) -> bool:
        if len(title) <= MIN_TITLE_LENGTH:
            return False
        return not any(marker in title for marker in self.title_denylist)

    def heading_walk(self, document: Document) -> List[ContentParagraph]:
        """One pair per qualifying heading, in document order."""
        paragraphs = []

        for heading in document.query_all(HEADINGS):
            title = normalize(document.text(heading))
            if not self.qualifies(title):
                continue

            fragments = []
            for sibling in document.following_siblings(heading):
                if document.matches(sibling, HEADINGS):
                    break
                text = normalize(document.text(sibling))
                if len(text) > MIN_FRAGMENT_LENGTH:
                    fragments.append(text)

            body = " ".join(fragments).strip()
            if len(body) > MIN_BODY_LENGTH:
                paragraphs.append(ContentParagraph(title=title, body=body))

        return paragraphs

    def questions(self, document: Document) -> List[ContentParagraph]:
        """One pair per disclosure widget: prompt as title, payload as body."""
        widgets = document.query_all(QA_WIDGET) or document.query_all("details")
        paragraphs = []

        for widget in widgets:
            prompt = document.query(QA_PROMPT, within=widget) or document.query("summary", within=widget)
            if prompt is None:
                continue

            question = normalize(document.text(prompt))
            answer = self._answer_text(document, widget)

            if len(question) > MIN_QUESTION_LENGTH and len(answer) > MIN_ANSWER_LENGTH:
                paragraphs.append(ContentParagraph(title=question, body=answer))

        return paragraphs

    def _answer_text(self, document: Document, widget: Tag) -> str:
        payload = document.query(QA_PAYLOAD, within=widget)
        if payload is not None:
            return normalize(document.text(payload))

        # Plain <details>: everything except the <summary>
        parts = [document.text(child) for child in document.query_all(":scope > :not(summary)", within=widget)]
        return normalize(" ".join(parts))
