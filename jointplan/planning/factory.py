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

"""Factory functions for joint-space planning components."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jointplan.planning.spec import CollisionWorldSpec, PlannerSpec
    from jointplan.planning.world.point_world import BoxWorld, PointRobot

# name -> (bidirectional, connect)
_PLANNER_VARIANTS: dict[str, tuple[bool, bool]] = {
    "rrt": (False, False),
    "goal_biased_rrt": (False, True),
    "birrt": (True, False),
    "rrt_connect": (True, True),
}


def create_world(
    backend: str = "point",
    **kwargs: Any,
) -> tuple[PointRobot, BoxWorld]:
    """Create a model and the world it moves in. backend='point'.

    Keyword arguments go to ``PointRobot`` (``lower``, ``upper``,
    ``positions``) except ``obstacles``, which goes to ``BoxWorld``.
    """
    if backend == "point":
        from jointplan.planning.world.point_world import BoxWorld, PointRobot

        obstacles = kwargs.pop("obstacles", None)
        robot = PointRobot(**kwargs)
        return robot, BoxWorld(robot, obstacles)
    else:
        raise ValueError(f"Unknown backend: {backend}. Available: ['point']")


def create_planner(
    name: str = "rrt_connect",
    world: CollisionWorldSpec | None = None,
    **kwargs: Any,
) -> PlannerSpec:
    """Create motion planner. name='rrt'|'goal_biased_rrt'|'birrt'|'rrt_connect'."""
    if name not in _PLANNER_VARIANTS:
        raise ValueError(f"Unknown planner: {name}. Available: {sorted(_PLANNER_VARIANTS)}")
    if world is None:
        raise ValueError("A world is required to create a planner")

    from jointplan.planning.planners.path_planner import PathPlanner

    bidirectional, connect = _PLANNER_VARIANTS[name]
    return PathPlanner(world, bidirectional=bidirectional, connect=connect, **kwargs)
