# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Path Utilities

Helpers over planned paths, i.e. lists of configuration arrays ordered from
start to goal. Nothing here keeps state, so any planner or caller can use them.

## Functions

- compute_path_length(): Sum of waypoint-to-waypoint distances
- max_segment_length(): Longest jump between consecutive waypoints
- is_path_within_limits(): Whether every waypoint respects the DOF bounds
- concatenate_paths(): Join paths, merging equal junction waypoints
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from numpy.typing import ArrayLike, NDArray

    from jointplan.planning.spec import ConfigPath

    Metric = Callable[[NDArray[np.float64], NDArray[np.float64]], float]

JUNCTION_TOLERANCE = 1e-9


def _euclidean(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)))


def _segment_lengths(path: ConfigPath, metric: Metric | None) -> Iterator[float]:
    distance = metric or _euclidean
    for a, b in zip(path[:-1], path[1:]):
        yield distance(a, b)


def compute_path_length(path: ConfigPath, metric: Metric | None = None) -> float:
    """Length of a path under ``metric``.

    Args:
        path: Waypoints from start to goal
        metric: Distance between two configurations. Euclidean when omitted;
            pass ``tree.gap`` to measure with the planner's weighted metric.

    Returns:
        The summed segment lengths, 0.0 when there is no segment

    Example:
        ok, path = planner.plan_path(robot, dofs, q_start, q_goal)
        print(f"{len(path)} waypoints, length {compute_path_length(path):.3f}")
    """
    return float(sum(_segment_lengths(path, metric), 0.0))


def max_segment_length(path: ConfigPath, metric: Metric | None = None) -> float:
    """Longest distance between two consecutive waypoints (0.0 for short paths)."""
    return max(_segment_lengths(path, metric), default=0.0)


def is_path_within_limits(path: ConfigPath, lower: ArrayLike, upper: ArrayLike) -> bool:
    """True when ``lower <= q <= upper`` holds for every waypoint ``q``."""
    if not path:
        return True
    waypoints = np.asarray(path, dtype=np.float64)
    return bool(np.all((waypoints >= np.asarray(lower)) & (waypoints <= np.asarray(upper))))


def concatenate_paths(*paths: ConfigPath, remove_duplicates: bool = True) -> ConfigPath:
    """Chain paths end to end.

    When ``remove_duplicates`` is set, a path whose first waypoint equals the
    last waypoint collected so far contributes only its remaining waypoints.
    Empty paths are skipped.
    """
    joined: ConfigPath = []
    for path in paths:
        if not path:
            continue
        skip = (
            remove_duplicates
            and bool(joined)
            and np.allclose(joined[-1], path[0], atol=JUNCTION_TOLERANCE, rtol=0)
        )
        joined.extend(path[1:] if skip else path)
    return joined
