from roteiro.etl import merge
from roteiro.models import Coordinates, EnrichedLocation, Place, Review, RowError, RowSuccess, Uniques


def _success(place_id, types, user, ranking=0, city="Lisboa"):
    location = EnrichedLocation(
        city=city,
        name=f"Name {place_id}",
        coordinates=Coordinates(latitude=1.0, longitude=2.0),
        display_name=f"Display {place_id}",
        url=f"https://example.com/{place_id}",
        place_id=place_id,
    )
    place = Place(types=tuple(types), location=location, reviews=(Review(user=user, ranking=ranking),))
    return RowSuccess(place_id=place_id, place=place)


def test_merge_same_identity():
    dataset = merge.merge_outcomes([
        _success("abc123", ["Bar"], "x", 4),
        _success("abc123", ["Café"], "y", 0),
    ])

    assert len(dataset.places) == 1
    place = dataset.places[0]
    assert place.types == ("Bar", "Café")
    assert [(r.user, r.ranking) for r in place.reviews] == [("x", 4), ("y", 0)]


def test_merge_keeps_first_location_and_dedups_types():
    first = _success("p1", ["Bar", "Café"], "a", city="Porto")
    second = _success("p1", ["Café", "Restaurante", "Bar"], "b", city="Lisboa")
    third = _success("p1", ["Padaria"], "c")

    dataset = merge.merge_outcomes([first, second, third])

    place = dataset.places[0]
    assert place.location.city == "Porto"
    assert place.types == ("Bar", "Café", "Restaurante", "Padaria")
    assert [r.user for r in place.reviews] == ["a", "b", "c"]


def test_merge_does_not_mutate_inputs():
    first = _success("p1", ["Bar"], "a")
    merge.merge_outcomes([first, _success("p1", ["Café"], "b")])

    assert first.place.types == ("Bar",)
    assert len(first.place.reviews) == 1


def test_merge_collects_errors_in_order():
    errors = [RowError(error="Missing Google Maps link", meta={"row": 1}), RowError(error="boom", meta={"row": 3})]

    dataset = merge.merge_outcomes([_success("p1", ["Bar"], "a"), errors[0], _success("p2", ["Café"], "b"), errors[1]])

    assert dataset.errors == tuple(errors)
    assert [p.location.place_id for p in dataset.places] == ["p1", "p2"]
    assert dataset.uniques == Uniques(types=("Bar", "Café"), users=("a", "b"), cities=("Lisboa",))


def test_merge_empty():
    dataset = merge.merge_outcomes([])

    assert dataset.to_dict() == {
        "places": [],
        "errors": [],
        "uniques": {"types": [], "users": [], "cities": []},
        "placeTypes": [],
    }


def test_compute_uniques_is_idempotent_and_order_independent():
    dataset = merge.merge_outcomes([
        _success("p1", ["Bar"], "x", city="Porto"),
        _success("p2", ["Café", "Bar"], "y"),
        _success("p1", ["Padaria"], "z"),
    ])

    once = merge.compute_uniques(dataset.places)
    twice = merge.compute_uniques(dataset.places)
    reversed_ = merge.compute_uniques(reversed(dataset.places))

    assert once == twice == reversed_ == dataset.uniques
    assert once.types == ("Bar", "Café", "Padaria")
    assert once.users == ("x", "y", "z")
    assert once.cities == ("Lisboa", "Porto")


def test_average_ranking_ignores_unranked():
    dataset = merge.merge_outcomes([
        _success("p1", ["Bar"], "x", 4),
        _success("p1", ["Bar"], "y", 0),
        _success("p1", ["Bar"], "z", 5),
    ])

    assert dataset.places[0].average_ranking == 4.5
    assert dataset.places[0].to_dict()["averageRanking"] == 4.5


def test_compute_uniques_skips_blank_users_and_cities():
    dataset = merge.merge_outcomes([_success("p1", ["Bar"], "", city=""), _success("p2", ["Café"], "y")])

    assert dataset.uniques.users == ("y",)
    assert dataset.uniques.cities == ("Lisboa",)
