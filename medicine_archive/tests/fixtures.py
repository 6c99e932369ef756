"""
HTML fixtures shaped like the NHS medicines pages.
"""

from typing import Iterable, Optional, Sequence, Tuple

BASE = "https://www.nhs.uk"
INDEX_URL = f"{BASE}/medicines/"

COOKIE_BANNER = """
<div id="nhsuk-cookie-banner">
  <h2>Cookies on the NHS website</h2>
  <p>We've put some small files called cookies on your device to make our site work.</p>
  <button id="nhsuk-cookie-banner__link_accept_analytics">Accept analytics cookies</button>
</div>
"""


def page(body: str, title: str = "NHS", head: str = "") -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head><title>{title}</title>{head}</head>
<body>
{COOKIE_BANNER}
<main id="maincontent">
{body}
</main>
<footer><h2>Support links</h2><ul><li><a href="/nhs-app/">NHS App</a></li></ul></footer>
</body>
</html>"""


def index_page(anchors: Iterable[Tuple[str, str]]) -> str:
    items = "\n".join(f'<li><a href="{href}">{text}</a></li>' for href, text in anchors)
    return page(f"<h1>Medicines A to Z</h1>\n<ul>\n{items}\n</ul>", title="Medicines A to Z")


def medicine_url(slug: str) -> str:
    return f"{INDEX_URL}{slug}/"


def detail_page(
    heading: str,
    caption: Optional[str] = None,
    paragraphs: Sequence[str] = (),
    meta_description: Optional[str] = None,
    conditions: Sequence[Tuple[str, str]] = (),
    sections: Sequence[Tuple[str, str]] = (),
) -> str:
    caption_html = ""
    if caption:
        caption_html = (
            f' <span class="nhsuk-caption-xl nhsuk-caption--bottom">'
            f'<span class="nhsuk-u-visually-hidden">-</span> {caption}</span>'
        )
    paras = "\n".join(f"<p>{p}</p>" for p in paragraphs)
    nav = "\n".join(f'<li><a href="{href}">{text}</a></li>' for href, text in sections)
    related = "\n".join(f'<li><a href="{href}">{text}</a></li>' for href, text in conditions)
    head = f'<meta name="description" content="{meta_description}">' if meta_description else ""
    body = f"""
<h1 class="nhsuk-heading-xl">{heading}{caption_html}</h1>
<nav class="nhsuk-contents-list"><ol>
{nav}
</ol></nav>
{paras}
<div class="nhsuk-related-nav"><ul>
{related}
</ul></div>
"""
    return page(body, head=head)


def section_page(blocks: Sequence[Tuple[str, str, Sequence[str]]], title: str = "Section") -> str:
    """blocks: (heading tag, heading text, [sibling html fragments])"""
    parts = [f"<h1>{title}</h1>"]
    for tag, text, fragments in blocks:
        parts.append(f"<{tag}>{text}</{tag}>")
        parts.extend(fragments)
    return page("<article>\n" + "\n".join(parts) + "\n</article>")


def questions_page(pairs: Sequence[Tuple[str, str]]) -> str:
    widgets = "\n".join(
        f"""<details class="nhsuk-details">
  <summary class="nhsuk-details__summary">
    <span class="nhsuk-details__summary-text">{question}</span>
  </summary>
  <div class="nhsuk-details__text"><p>{answer}</p></div>
</details>"""
        for question, answer in pairs
    )
    return page(f"<h1>Common questions</h1>\n{widgets}")
