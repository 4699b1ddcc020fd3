"""HTML parsing for the ministry strategic-investments pages."""

from __future__ import annotations

import re
from logging import getLogger
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

from investmap.domain.model import Investment, Location, Reference

log = getLogger(__name__)

PROJECT_PATH_MARKER = "/stratigikes/erga/"

_AMOUNT = re.compile(r"(\d+[\d.,]*)\s*€|€\s*(\d+[\d.,]*)")
_GAZETTE_TEXT = re.compile(r"Φ\.?Ε\.?Κ\.?", re.IGNORECASE)
_GAZETTE_REFERENCE = re.compile(r"ΦΕΚ\s+(\d+\s*[ΑΒΓΔ']+\s*/\s*\d+\.\d+\.\d+)", re.IGNORECASE)

_BENEFICIARY_LABELS = ("Φορέας", "Επιχείρηση")
_AMOUNT_LABELS = ("Προϋπολογισμός", "κόστος", "Budget")
_REGION_LABELS = ("Περιφέρεια", "Region")
_SECTOR_LABELS = ("Τομέας", "Sector")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _absolute(href: str, base_url: str) -> str:
    return href if href.startswith("http") else urljoin(base_url, href)


def extract_investment_links(html: str, *, base_url: str) -> list[str]:
    """Absolute URLs of every project page linked from ``html``, in page order."""

    links: list[str] = []
    for anchor in _soup(html).find_all("a", href=True):
        href = str(anchor["href"])
        if PROJECT_PATH_MARKER not in href:
            continue
        url = _absolute(href, base_url)
        if url not in links:
            links.append(url)
    if not links:
        log.debug("No project links found in page of %s bytes", len(html))
    return links


def extract_gazette_links(html: str, *, base_url: str) -> list[str]:
    """Gazette (ΦΕΚ) links on a project page, or textual references when there are none."""

    soup = _soup(html)
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"])
        text = anchor.get_text(strip=True)
        is_gazette_link = (
            "fek" in href.lower() or "ΦΕΚ" in href or href.lower().endswith(".pdf")
        )
        is_gazette_text = "ΦΕΚ" in text or _GAZETTE_TEXT.search(text) is not None
        if is_gazette_link or is_gazette_text:
            links.append(_absolute(href, base_url))
    if links:
        return links
    return [match.group(0) for match in _GAZETTE_REFERENCE.finditer(soup.get_text(" "))]


def parse_amount(text: str) -> int | float | None:
    """Parse the first euro amount in ``text`` (``240.802.000 €`` style)."""

    match = _AMOUNT.search(text)
    if match is None:
        return None
    return _to_number(match.group(1) or match.group(2))


def largest_amount(text: str) -> int | float | None:
    amounts = [_to_number(m.group(1) or m.group(2)) for m in _AMOUNT.finditer(text)]
    positive = [amount for amount in amounts if amount]
    return max(positive) if positive else None


def _to_number(raw: str) -> int | float:
    value = float(raw.replace(".", "").replace(",", "."))
    return int(value) if value.is_integer() else value


def _label_value(element: Tag) -> str:
    following = element.next_sibling
    if isinstance(following, NavigableString):
        text = str(following).strip().lstrip(":").strip()
        if text:
            return text
    sibling = element.find_next_sibling()
    if sibling is not None:
        text = sibling.get_text(" ", strip=True)
        if text:
            return text
    parent = element.parent
    if parent is not None:
        parent_sibling = parent.find_next_sibling()
        if parent_sibling is not None:
            return parent_sibling.get_text(" ", strip=True)
    return ""


def extract_basic_data(html: str, *, url: str) -> Investment:
    """Best-effort record from the page's visible labels; a hint for extraction."""

    soup = _soup(html)
    heading = soup.select_one("h1, h2, #page-title, .page-title")
    name = heading.get_text(" ", strip=True) if heading is not None else ""

    beneficiary = ""
    total: int | float = 0
    region = ""
    sector = ""
    for element in soup.select("strong, b, dt, th, .field-label"):
        label = element.get_text(" ", strip=True)
        if any(marker in label for marker in _BENEFICIARY_LABELS):
            beneficiary = _label_value(element)
        elif any(marker in label for marker in _AMOUNT_LABELS):
            total = parse_amount(_label_value(element)) or total
        elif any(marker in label for marker in _REGION_LABELS):
            region = _label_value(element)
        elif any(marker in label for marker in _SECTOR_LABELS):
            sector = _label_value(element)

    if not total:
        body = soup.body or soup
        # the largest figure on the page is usually the budget
        total = largest_amount(body.get_text(" ")) or 0

    locations: tuple[Location, ...] = ()
    if region or sector:
        locations = (Location(description=sector or "Unknown", text_location=region or None),)

    return Investment(
        name=name,
        beneficiary=beneficiary,
        total_amount=total,
        reference=Reference(source_url=url),
        locations=locations,
    )


__all__ = [
    "extract_basic_data",
    "extract_gazette_links",
    "extract_investment_links",
    "largest_amount",
    "parse_amount",
]
