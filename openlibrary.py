"""
Book summary lookup on Open Library, used to prefill the book form.
"""

import logging

import requests

logger = logging.getLogger(__name__)

OPENLIBRARY_URL = "https://openlibrary.org"

# Shared by every prefill lookup.
SESSION = requests.Session()
SESSION.headers.update({
    "User-Agent": "LibraryCatalog/1.0",
    "Accept": "application/json",
})


def normalize_isbn(isbn: str) -> str:
    """
    Reduce a typed ISBN ('978-0-14-143951-8') to the bare digits Open Library
    expects in /isbn/ URLs.
    """
    return (isbn or "").replace("-", "").replace(" ", "").strip()


def extract_summary(data: dict) -> str | None:
    """
    Pull the text for the book form's summary field out of an edition or
    work document. Open Library stores it under "description", either as a
    string or as {"type": ..., "value": ...}. Blank text counts as missing.
    """
    desc = data.get("description")
    if isinstance(desc, dict):
        desc = desc.get("value")
    if not isinstance(desc, str):
        return None
    return desc.strip() or None


def _get_json(url: str, timeout: float) -> dict | None:
    try:
        r = SESSION.get(url, timeout=timeout)
        if r.status_code != 200:
            logger.info("Open Library returned %s for %s", r.status_code, url)
            return None
        return r.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Open Library request failed for %s: %s", url, exc)
        return None


def fetch_summary_by_isbn(isbn: str, timeout: float = 8) -> str | None:
    """
    Summary text to prefill for ``isbn``, or None when Open Library has none
    or cannot be reached.

    The edition (/isbn/{isbn}.json) is asked first. Many editions carry no
    description, so its first linked work (/works/{id}.json) is tried next.
    """
    isbn = normalize_isbn(isbn)
    if not isbn:
        return None

    # Edition
    edition = _get_json(f"{OPENLIBRARY_URL}/isbn/{isbn}.json", timeout)
    if edition is None:
        return None

    summary = extract_summary(edition)
    if summary:
        return summary

    # Work
    works = edition.get("works")
    key = works[0].get("key") if isinstance(works, list) and works and isinstance(works[0], dict) else None
    if not key:
        return None
    work = _get_json(f"{OPENLIBRARY_URL}{key}.json", timeout)
    return extract_summary(work) if work is not None else None
