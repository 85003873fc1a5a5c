"""Core data models shared by the sheet reconciliation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Column(str, Enum):
    """Column names recognised in the source table."""

    TIPO = "Tipo"
    CIDADE = "Cidade"
    GOOGLE_MAPS = "Google Maps"
    USER = "User"
    RANK = "Rank"
    NOTAS = "Notas"


@dataclass(frozen=True)
class Cell:
    """A raw grid cell paired with the metadata of its column."""

    value: Dict[str, Any]
    column: Dict[str, Any]

    @property
    def formatted(self) -> Optional[str]:
        return self.value.get("formattedValue")

    @property
    def number(self) -> Optional[float]:
        number = (self.value.get("effectiveValue") or {}).get("numberValue")
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            return None
        return number


@dataclass(frozen=True)
class FieldRecord:
    tipo: Cell
    cidade: Cell
    google_maps: Cell
    user: Cell
    rank: Cell
    notas: Cell


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class EnrichedLocation:
    city: str
    name: str
    coordinates: Coordinates
    display_name: str
    url: str
    place_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "city": self.city,
            "name": self.name,
            "coordinates": {"latitude": self.coordinates.latitude, "longitude": self.coordinates.longitude},
            "displayName": self.display_name,
            "url": self.url,
            "placeId": self.place_id,
        }


@dataclass(frozen=True)
class Review:
    user: str
    ranking: float = 0
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"user": self.user, "ranking": self.ranking, "notes": self.notes}


def average(values: List[float]) -> float:
    """Incremental mean; 0 for an empty list."""
    mean = 0.0
    for i, value in enumerate(values):
        mean += (value - mean) / (i + 1)
    return mean


@dataclass(frozen=True)
class Place:
    types: Tuple[str, ...]
    location: EnrichedLocation
    reviews: Tuple[Review, ...]

    @property
    def average_ranking(self) -> float:
        """Mean of the rankings that were actually given (0 means unranked)."""
        return average([review.ranking for review in self.reviews if review.ranking])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": list(self.types),
            "location": self.location.to_dict(),
            "reviews": [review.to_dict() for review in self.reviews],
            "averageRanking": self.average_ranking,
        }


@dataclass(frozen=True)
class RowError:
    error: str
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "meta": self.meta}


@dataclass(frozen=True)
class RowSuccess:
    place_id: str
    place: Place


RowOutcome = Union[RowSuccess, RowError]


@dataclass(frozen=True)
class Uniques:
    types: Tuple[str, ...] = ()
    users: Tuple[str, ...] = ()
    cities: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {"types": list(self.types), "users": list(self.users), "cities": list(self.cities)}


@dataclass(frozen=True)
class Dataset:
    """The terminal artifact handed to the map front-end."""

    places: Tuple[Place, ...] = ()
    errors: Tuple[RowError, ...] = ()
    uniques: Uniques = field(default_factory=Uniques)
    place_types: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "places": [place.to_dict() for place in self.places],
            "errors": [error.to_dict() for error in self.errors],
            "uniques": self.uniques.to_dict(),
            "placeTypes": list(self.place_types),
        }
