"""Tour construction and local search over a distance matrix."""

from __future__ import annotations

from typing import Sequence

from .models import DistanceMatrix


def route_distance(route: Sequence[int], matrix: DistanceMatrix) -> float:
    """Total length of an open path visiting ``route`` in order (no return leg)."""
    return matrix.route_distance(route)


def nearest_neighbor(matrix: DistanceMatrix, start: int = 0) -> list[int]:
    """Greedy tour: from the current index always move to the closest unvisited one.

    Ties go to the lowest index.
    """
    n = len(matrix)
    if n == 0:
        return []
    if not 0 <= start < n:
        raise ValueError(f"Start index {start} is out of range for {n} stops.")

    visited = [False] * n
    visited[start] = True
    route = [start]
    current = start

    while len(route) < n:
        row = matrix.distances[current]
        nearest = -1
        min_distance = float("inf")
        for candidate in range(n):
            if not visited[candidate] and (nearest == -1 or row[candidate] < min_distance):
                min_distance = row[candidate]
                nearest = candidate
        visited[nearest] = True
        route.append(nearest)
        current = nearest

    return route


def _reverse_segment(route: list[int], i: int, j: int) -> list[int]:
    return route[:i] + route[i : j + 1][::-1] + route[j + 1 :]


def two_opt(route: Sequence[int], matrix: DistanceMatrix) -> list[int]:
    """Improve a route by reversing segments while that shortens it.

    The first and last positions stay fixed. After every accepted reversal the
    scan starts again from the top; the loop ends on a pass with no improvement.
    """
    best_route = list(route)
    if len(best_route) < 4:
        return best_route

    best_distance = route_distance(best_route, matrix)
    last = len(best_route) - 2
    improved = True

    while improved:
        improved = False
        for i in range(1, last):
            for j in range(i + 1, last + 1):
                candidate = _reverse_segment(best_route, i, j)
                candidate_distance = route_distance(candidate, matrix)
                if candidate_distance < best_distance:
                    best_route = candidate
                    best_distance = candidate_distance
                    improved = True
                    break
            if improved:
                break

    return best_route
