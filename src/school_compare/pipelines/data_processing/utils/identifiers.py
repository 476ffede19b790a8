"""
Canonicalisation of OpenAlex identifiers.

Roster exports and publication exports spell the same author differently: a full
URL (``https://openalex.org/A5023888391``), an API URL, or the bare id. Every join in
the comparison keys on the canonical form produced here, so the functions are
idempotent and never raise on malformed input; unrecognisable values map to the
empty string, which is never a valid identity.
"""

import logging
import re
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

AUTHOR_ID_PREFIXES = [
    re.compile(r"^https?://(?:www\.|api\.)?openalex\.org/authors/", re.IGNORECASE),
    re.compile(r"^https?://(?:www\.|api\.)?openalex\.org/", re.IGNORECASE),
]

WORK_ID_PREFIXES = [
    re.compile(r"^https?://(?:www\.|api\.)?openalex\.org/works/", re.IGNORECASE),
    re.compile(r"^https?://(?:www\.|api\.)?openalex\.org/", re.IGNORECASE),
]

DOI_PREFIXES = [
    re.compile(r"^https?://(?:dx\.)?doi\.org/", re.IGNORECASE),
    re.compile(r"^doi:\s*", re.IGNORECASE),
]

# a canonical token: no whitespace, no path separators
_TOKEN = re.compile(r"^[^\s/]+$")


def as_text(value: Any) -> str:
    """Render a raw cell as stripped text; None and NaN become empty."""
    if value is None:
        return ""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    return str(value).strip()


def _strip_prefixes(text: str, prefixes: list) -> str:
    for prefix in prefixes:
        stripped = prefix.sub("", text, count=1)
        if stripped != text:
            return stripped.strip()
    return text


def normalize_id(value: Any) -> str:
    """Canonicalise an author identifier.

    Strips the OpenAlex URL prefix, trims whitespace and passes the remaining token
    through unchanged (ids are case-sensitive). Anything that does not reduce to a
    single token is unrecognisable and yields ``""``.

    Args:
        value: A raw identifier cell; may be a URL, a bare id, empty, None or NaN.

    Returns:
        str: The canonical id, or ``""``.
    """
    text = _strip_prefixes(as_text(value), AUTHOR_ID_PREFIXES)
    if not _TOKEN.match(text):
        return ""
    return text


def normalize_work_id(value: Any) -> str:
    """Canonicalise an OpenAlex work id or URL, ``""`` when unrecognisable."""
    text = _strip_prefixes(as_text(value), WORK_ID_PREFIXES)
    if not _TOKEN.match(text):
        return ""
    return text


def normalize_doi(value: Any) -> str:
    """Lowercase a DOI and drop its resolver prefix."""
    return _strip_prefixes(as_text(value), DOI_PREFIXES).lower()


def normalize_title(value: Any) -> str:
    """Lowercase a title and collapse internal whitespace."""
    return " ".join(as_text(value).lower().split())


def split_ids(value: Any) -> list:
    """Split a delimited author id cell and canonicalise each token.

    Tokens may be separated by ``|``, ``;`` or ``,``; an already split list is also
    accepted. Empty and unrecognisable tokens are dropped and the first occurrence
    order is kept.

    Args:
        value: A delimited string or an iterable of raw ids.

    Returns:
        list: Unique canonical ids.
    """
    if isinstance(value, (list, tuple, set)):
        tokens = list(value)
    else:
        tokens = re.split(r"[|;,]", as_text(value))
    ids = (normalize_id(token) for token in tokens)
    return list(dict.fromkeys(id_ for id_ in ids if id_))
