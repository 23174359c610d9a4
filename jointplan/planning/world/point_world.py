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

"""Point World Implementation - a free point moving among axis-aligned boxes.

The simplest stand-in for an articulated model and its environment: every
DOF is one coordinate of a point, and the world reports a collision when the
point lies inside (or on the boundary of) any box obstacle. Useful for
demos, benchmarks and tests of the planners.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from jointplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from jointplan.planning.spec import DofIndices

logger = setup_logger()


class PointRobot:
    """Articulated-model stand-in whose DOFs are independent coordinates.

    Args:
        lower: Lower position limit of every DOF
        upper: Upper position limit of every DOF
        positions: Initial positions (defaults to the middle of the limits)
    """

    def __init__(
        self,
        lower: ArrayLike,
        upper: ArrayLike,
        positions: ArrayLike | None = None,
    ):
        self._lower = np.asarray(lower, dtype=np.float64).reshape(-1)
        self._upper = np.asarray(upper, dtype=np.float64).reshape(-1)
        if self._lower.shape != self._upper.shape:
            raise ValueError("Lower and upper limits must have the same size")

        if positions is None:
            self._positions = 0.5 * (self._lower + self._upper)
        else:
            self._positions = np.asarray(positions, dtype=np.float64).reshape(-1).copy()
            if self._positions.shape != self._lower.shape:
                raise ValueError("Initial positions must match the number of DOFs")

    @property
    def num_dofs(self) -> int:
        return int(self._lower.size)

    @property
    def positions(self) -> NDArray[np.float64]:
        return self._positions.copy()

    def get_positions(self, dofs: DofIndices) -> NDArray[np.float64]:
        return self._positions[list(dofs)].copy()

    def set_positions(self, dofs: DofIndices, positions: ArrayLike) -> None:
        self._positions[list(dofs)] = np.asarray(positions, dtype=np.float64)

    def get_position_limits(
        self, dofs: DofIndices
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        index = list(dofs)
        return self._lower[index].copy(), self._upper[index].copy()


@dataclass
class BoxObstacle:
    """Axis-aligned box given by its lower and upper corners.

    Attributes:
        name: Unique name for the obstacle
        lower: Lower corner, one value per robot DOF
        upper: Upper corner, one value per robot DOF
    """

    name: str
    lower: tuple[float, ...]
    upper: tuple[float, ...]

    def contains(self, point: NDArray[np.float64]) -> bool:
        return bool(np.all(point >= self.lower) and np.all(point <= self.upper))


class BoxWorld:
    """Collision world of box obstacles around a PointRobot.

    Args:
        robot: The point whose current positions are checked
        obstacles: Obstacles present from the start
    """

    def __init__(self, robot: PointRobot, obstacles: list[BoxObstacle] | None = None):
        self.robot = robot
        self._obstacles: dict[str, BoxObstacle] = {}
        self.num_collision_checks = 0

        for obstacle in obstacles or []:
            self.add_obstacle(obstacle)

    # Obstacle Management

    def add_obstacle(self, obstacle: BoxObstacle) -> str:
        """Add an obstacle. Returns its name, which is also its ID."""
        if len(obstacle.lower) != self.robot.num_dofs or len(obstacle.upper) != self.robot.num_dofs:
            raise ValueError(
                f"Obstacle '{obstacle.name}' has corners of size "
                f"{len(obstacle.lower)}/{len(obstacle.upper)}, robot has {self.robot.num_dofs} DOFs"
            )
        if obstacle.name in self._obstacles:
            logger.debug("Obstacle already exists, replacing", obstacle=obstacle.name)
        self._obstacles[obstacle.name] = obstacle
        return obstacle.name

    def remove_obstacle(self, obstacle_id: str) -> bool:
        """Remove an obstacle. Returns True if removed."""
        if obstacle_id not in self._obstacles:
            logger.warning("Obstacle not found", obstacle=obstacle_id)
            return False
        del self._obstacles[obstacle_id]
        return True

    def clear_obstacles(self) -> None:
        self._obstacles.clear()

    @property
    def obstacles(self) -> list[BoxObstacle]:
        return list(self._obstacles.values())

    # Collision Checking

    def check_collision(self) -> bool:
        self.num_collision_checks += 1
        point = self.robot.positions
        return any(obstacle.contains(point) for obstacle in self._obstacles.values())
