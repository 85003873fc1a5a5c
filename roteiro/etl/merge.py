"""Folding per-row outcomes into the deduplicated place dataset."""

import logging
from dataclasses import replace
from functools import reduce
from typing import Dict, Iterable, NamedTuple, Tuple

from roteiro.models import Dataset, Place, RowError, RowOutcome, Uniques

logger = logging.getLogger(__name__)


class _Merged(NamedTuple):
    places: Dict[str, Place]
    errors: Tuple[RowError, ...]


_EMPTY = _Merged(places={}, errors=())


def _union(existing: Tuple[str, ...], new: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys((*existing, *new)))


def merge_step(merged: _Merged, outcome: RowOutcome) -> _Merged:
    """Return a new accumulator with ``outcome`` folded in.

    The first row seen for a place id fixes its location; later rows append
    their reviews and add any new types.
    """
    if isinstance(outcome, RowError):
        return merged._replace(errors=merged.errors + (outcome,))

    current = merged.places.get(outcome.place_id)
    if current is None:
        place = outcome.place
    else:
        place = replace(
            current,
            types=_union(current.types, outcome.place.types),
            reviews=current.reviews + outcome.place.reviews,
        )
    return merged._replace(places={**merged.places, outcome.place_id: place})


def compute_uniques(places: Iterable[Place]) -> Uniques:
    """Distinct types, users and cities across ``places``, sorted."""
    places = list(places)
    types = {place_type for place in places for place_type in place.types}
    # Blank users and cities have nothing to filter on, so they stay out of the indexes.
    users = {review.user for place in places for review in place.reviews if review.user}
    cities = {place.location.city for place in places if place.location.city}
    return Uniques(types=tuple(sorted(types)), users=tuple(sorted(users)), cities=tuple(sorted(cities)))


def merge_outcomes(outcomes: Iterable[RowOutcome], place_types: Tuple[str, ...] = ()) -> Dataset:
    """Fold outcomes in row order into places, errors and uniqueness indexes."""
    merged = reduce(merge_step, outcomes, _EMPTY)
    places = tuple(merged.places.values())
    logger.info("Merged %d places with %d row errors", len(places), len(merged.errors))
    return Dataset(
        places=places,
        errors=merged.errors,
        uniques=compute_uniques(places),
        place_types=place_types,
    )
