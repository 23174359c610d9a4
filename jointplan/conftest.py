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

"""Shared fixtures: point robots in box worlds."""

from __future__ import annotations

import numpy as np
import pytest

from jointplan.planning.sampler import ConfigSampler
from jointplan.planning.tree import RRTree
from jointplan.planning.validity import ValidityChecker
from jointplan.planning.world.point_world import BoxObstacle, BoxWorld, PointRobot


@pytest.fixture
def free_space():
    """2-DOF point in an empty 10x10 box."""
    robot = PointRobot(lower=[0.0, 0.0], upper=[10.0, 10.0])
    return robot, BoxWorld(robot)


@pytest.fixture
def wall_space():
    """2-DOF point with a wall at x in [4, 6] that leaves a gap above y = 8."""
    robot = PointRobot(lower=[0.0, 0.0], upper=[10.0, 10.0])
    world = BoxWorld(robot, [BoxObstacle("wall", (4.0, 0.0), (6.0, 8.0))])
    return robot, world


@pytest.fixture
def make_tree():
    """Build an RRTree over a robot/world pair with a seeded sampler."""

    def _make(robot, world, roots=((0.0, 0.0),), step_size=1.0, seed=0, **kwargs):
        dofs = list(range(robot.num_dofs))
        validity = ValidityChecker(world, robot, dofs)
        lower, upper = robot.get_position_limits(dofs)
        sampler = ConfigSampler(lower, upper, seed=seed)
        roots = [np.asarray(q, dtype=np.float64) for q in roots]
        return RRTree(validity, sampler, step_size, roots=roots, **kwargs)

    return _make
