import random

import pytest

from delivery_routes.models.domain import Coordinate
from delivery_routes.services.routing.heuristics import nearest_neighbor, route_distance, two_opt
from delivery_routes.services.routing.matrix import haversine_matrix
from delivery_routes.services.routing.models import DistanceMatrix


def _matrix(rows: list[list[float]]) -> DistanceMatrix:
    return DistanceMatrix(distances=tuple(tuple(row) for row in rows))


def _random_matrix(count: int, seed: int) -> DistanceMatrix:
    rng = random.Random(seed)
    coordinates = [Coordinate(lat=rng.uniform(21.4, 21.7), lng=rng.uniform(39.1, 39.3)) for _ in range(count)]
    return haversine_matrix(coordinates)


def test_nearest_neighbor_follows_closest_unvisited():
    matrix = _matrix(
        [
            [0, 5, 1, 9],
            [5, 0, 3, 2],
            [1, 3, 0, 8],
            [9, 2, 8, 0],
        ]
    )
    assert nearest_neighbor(matrix, 0) == [0, 2, 1, 3]
    assert nearest_neighbor(matrix, 3) == [3, 1, 2, 0]


def test_nearest_neighbor_breaks_ties_by_lowest_index():
    matrix = _matrix(
        [
            [0, 4, 4, 4],
            [4, 0, 1, 1],
            [4, 1, 0, 1],
            [4, 1, 1, 0],
        ]
    )
    assert nearest_neighbor(matrix, 0) == [0, 1, 2, 3]


def test_nearest_neighbor_rejects_bad_start_and_handles_empty():
    assert nearest_neighbor(_matrix([]), 0) == []
    with pytest.raises(ValueError):
        nearest_neighbor(_matrix([[0, 1], [1, 0]]), 2)


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_routes_are_permutations(seed: int):
    matrix = _random_matrix(12, seed)
    initial = nearest_neighbor(matrix, 0)
    improved = two_opt(initial, matrix)

    assert sorted(initial) == list(range(12))
    assert sorted(improved) == list(range(12))
    assert improved[0] == 0


@pytest.mark.parametrize("seed", [3, 11, 2024])
def test_two_opt_never_lengthens_and_reaches_fixed_point(seed: int):
    matrix = _random_matrix(10, seed)
    route = list(range(10))
    random.Random(seed).shuffle(route)

    improved = two_opt(route, matrix)

    assert route_distance(improved, matrix) <= route_distance(route, matrix)
    assert two_opt(improved, matrix) == improved
    assert improved[0] == route[0]
    assert improved[-1] == route[-1]


def test_two_opt_uncrosses_a_crossed_path():
    # Square corners visited 0 -> 2 -> 1 -> 3 crosses itself; reversing [2, 1] fixes it.
    coordinates = [
        Coordinate(lat=0.0, lng=0.0),
        Coordinate(lat=0.0, lng=0.01),
        Coordinate(lat=0.01, lng=0.0),
        Coordinate(lat=0.01, lng=0.01),
    ]
    matrix = haversine_matrix(coordinates)
    crossed = [0, 3, 1, 2]

    improved = two_opt(crossed, matrix)

    assert route_distance(improved, matrix) < route_distance(crossed, matrix)


def test_two_opt_leaves_short_routes_unchanged():
    matrix = _matrix([[0, 1, 9], [1, 0, 1], [9, 1, 0]])
    route = [0, 2, 1]
    result = two_opt(route, matrix)

    assert result == [0, 2, 1]
    assert result is not route


def test_two_opt_does_not_mutate_input():
    matrix = _random_matrix(8, 5)
    route = [0, 7, 1, 6, 2, 5, 3, 4]
    snapshot = list(route)
    two_opt(route, matrix)
    assert route == snapshot
