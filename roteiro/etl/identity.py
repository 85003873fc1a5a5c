"""Extraction of Google Maps place identifiers from shared links."""

import re
from typing import Optional

from roteiro.models import Cell

PLACE_REGEX = re.compile(r"https://www\.google\.com/maps/place/.+/data=!.+!.+![0-9]+s([0-9A-Za-z_-]+)")


class NoIdentityError(ValueError):
    """Raised when a row has no Google Maps link at all."""


class IdentityNotFoundError(ValueError):
    """Raised when a link does not contain a recognisable place id."""


def link_url(cell: Cell) -> Optional[str]:
    """Return the URL behind a cell, preferring a rich link chip over a plain hyperlink."""
    for run in cell.value.get("chipRuns") or []:
        uri = ((run.get("chip") or {}).get("richLinkProperties") or {}).get("uri")
        if uri:
            return uri
    return cell.value.get("hyperlink") or None


def extract_place_id(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise NoIdentityError("Missing Google Maps link")
    match = PLACE_REGEX.search(url)
    if not match:
        raise IdentityNotFoundError("Could not find a place id in the Google Maps link")
    return match.group(1)
