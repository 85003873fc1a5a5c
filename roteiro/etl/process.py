"""Per-row processing: field extraction, place id parsing and enrichment."""

import logging
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from roteiro.etl.identity import IdentityNotFoundError, NoIdentityError, extract_place_id, link_url
from roteiro.etl.rows import MalformedRowError, extract_fields, to_field_record
from roteiro.models import Coordinates, EnrichedLocation, FieldRecord, Place, Review, RowError, RowOutcome, RowSuccess
from roteiro.vendors.google_places import GooglePlacesError, get_place

logger = logging.getLogger(__name__)

PlaceLookup = Callable[[str, str], Dict[str, Any]]

ENRICHMENT_FAILED = "Failed to fetch place details"


def _split_types(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(part for part in value.split(", ") if part)


def _display_name(metadata: Dict[str, Any]) -> str:
    display_name = metadata.get("displayName")
    if isinstance(display_name, dict):
        return display_name.get("text") or ""
    return display_name or ""


def to_place(record: FieldRecord, url: str, place_id: str, metadata: Dict[str, Any]) -> Place:
    """Build a single-review place from a field record and its Places API metadata."""
    location = metadata["location"]
    return Place(
        types=_split_types(record.tipo.formatted),
        location=EnrichedLocation(
            city=record.cidade.formatted or "",
            name=record.google_maps.formatted or "",
            coordinates=Coordinates(latitude=location["latitude"], longitude=location["longitude"]),
            display_name=_display_name(metadata),
            url=url,
            place_id=place_id,
        ),
        reviews=(
            Review(
                user=record.user.formatted or "",
                ranking=record.rank.number or 0,
                notes=record.notas.formatted or "",
            ),
        ),
    )


def process_row(
    index: int,
    values: Sequence[Dict[str, Any]],
    columns: Sequence[Dict[str, Any]],
    api_key: str,
    lookup: Optional[PlaceLookup] = None,
) -> RowOutcome:
    """Resolve one data row into a place, or a row error describing why it could not be.

    Expected failures (malformed row, missing or unparseable link, failed
    lookup) are returned as ``RowError`` instead of being raised.
    """
    lookup = lookup or get_place
    fields = extract_fields(values, columns)
    meta: Dict[str, Any] = {
        "row": index,
        "fields": {name: cell.formatted for name, cell in fields.items()},
    }

    try:
        record = to_field_record(fields)
    except MalformedRowError as exc:
        logger.warning("Row %d is malformed: %s", index, exc)
        return RowError(error=str(exc), meta=meta)

    url = link_url(record.google_maps)
    try:
        place_id = extract_place_id(url)
    except (NoIdentityError, IdentityNotFoundError) as exc:
        logger.warning("Row %d skipped: %s", index, exc)
        if url:
            meta["url"] = url
        return RowError(error=str(exc), meta=meta)

    meta["url"] = url
    meta["placeId"] = place_id
    try:
        metadata = lookup(place_id, api_key)
        place = to_place(record, url, place_id, metadata)
    except (GooglePlacesError, KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Row %d: place lookup failed for %s: %s", index, place_id, exc)
        meta["reason"] = str(exc)
        return RowError(error=ENRICHMENT_FAILED, meta=meta)

    return RowSuccess(place_id=place_id, place=place)
