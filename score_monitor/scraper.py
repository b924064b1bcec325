from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import FALLBACK_ITEM_SELECTOR, HTTP_TIMEOUT_SECONDS, ITEM_SELECTOR
from .reconciler import Observation
from .utils import get_http_session, retryable_request

logger = logging.getLogger(__name__)


@retryable_request
def _get(session: requests.Session, url: str, **kwargs: dict) -> requests.Response:
    """Thin wrapper around session.get with the policy from utils.retryable_request."""
    return session.get(url, **kwargs)


def fetch_html(url: str, *, session: Optional[requests.Session] = None) -> str:
    """Fetch the listing page. Non-2xx and transport errors propagate."""
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True
    try:
        resp = _get(session, url, timeout=HTTP_TIMEOUT_SECONDS)
        logger.debug("Fetched %s: HTTP %s, %d chars", url, resp.status_code, len(resp.text))
        return resp.text
    finally:
        if close_session:
            session.close()


# ---- Name / URL --------------------------------------------------------------

_WS_RE = re.compile(r"\s+")


def normalize_name(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def resolve_url(href: str, base_url: str) -> str:
    """Resolve `href` against the page URL; keep it unchanged if that fails."""
    try:
        return urljoin(base_url, href)
    except ValueError:
        logger.debug("Could not resolve href %r against %s", href, base_url)
        return href


# ---- Points strategies -------------------------------------------------------
# Each strategy returns None when it finds nothing; the first hit wins.

_LABEL_DIGITS_RE = re.compile(r"(\d{1,5})")
_CLASS_POINTS_RE = re.compile(r"pt-(\d{1,5})")
_MARKUP_POINTS_RE = re.compile(
    r"(?:\(|\s)(\d{1,5})(?:\s*Punkte|\s*punkt|</span>|\))",
    re.IGNORECASE,
)


def _points_from_label(item: Tag) -> Optional[int]:
    label = item.select_one("div.punkte")
    if label is None:
        return None
    m = _LABEL_DIGITS_RE.search(label.get_text().strip())
    return int(m.group(1)) if m else None


def _class_tokens(el: Optional[Tag]) -> str:
    if el is None:
        return ""
    cls = el.get("class") or []
    return " ".join(cls) if isinstance(cls, list) else str(cls)


def _points_from_class(item: Tag) -> Optional[int]:
    classes = _class_tokens(item) + " " + _class_tokens(item.find("div"))
    m = _CLASS_POINTS_RE.search(classes)
    return int(m.group(1)) if m else None


def _points_from_markup(item: Tag) -> Optional[int]:
    m = _MARKUP_POINTS_RE.search(item.decode_contents())
    return int(m.group(1)) if m else None


POINTS_STRATEGIES: Tuple[Callable[[Tag], Optional[int]], ...] = (
    _points_from_label,
    _points_from_class,
    _points_from_markup,
)


def parse_points(item: Tag, strategies: Sequence[Callable[[Tag], Optional[int]]] = POINTS_STRATEGIES) -> int:
    for strategy in strategies:
        points = strategy(item)
        if points is not None:
            return points
    return 0


# ---- Extraction --------------------------------------------------------------

def select_items(
    soup: BeautifulSoup,
    selector: str = ITEM_SELECTOR,
    fallback_selector: str = FALLBACK_ITEM_SELECTOR,
) -> List[Tag]:
    items = soup.select(selector)
    if items:
        return items
    logger.warning(
        "No items found with selector '%s'. Trying fallback '%s' ...",
        selector,
        fallback_selector,
    )
    items = soup.select(fallback_selector)
    if not items:
        logger.warning("No items found with fallback selector '%s' either.", fallback_selector)
    return items


def extract_observations(
    html: str,
    base_url: str,
    *,
    selector: str = ITEM_SELECTOR,
    fallback_selector: str = FALLBACK_ITEM_SELECTOR,
) -> List[Observation]:
    """
    Parse the listing page into observations, in document order.

    Items without a link are skipped.  Points come from the first matching
    strategy in POINTS_STRATEGIES and default to 0.
    """
    soup = BeautifulSoup(html, "html.parser")
    out: List[Observation] = []
    for item in select_items(soup, selector, fallback_selector):
        a = item.find("a")
        if a is None:
            continue
        href = (a.get("href") or "").strip()
        out.append(
            Observation(
                name=normalize_name(a.get_text()),
                url=resolve_url(href, base_url),
                points=parse_points(item),
            )
        )
    logger.info("Parsed %d items from %s", len(out), base_url)
    return out


__all__ = [
    "Observation",
    "fetch_html",
    "normalize_name",
    "resolve_url",
    "parse_points",
    "POINTS_STRATEGIES",
    "select_items",
    "extract_observations",
]
