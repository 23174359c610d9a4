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
Joint-Space Planning Module

Sampling-based motion planning for articulated systems using Protocol-based
architecture.

## Architecture

- ArticulatedModelSpec: Joint positions and limits of the robot (PointRobot)
- CollisionWorldSpec: Collision queries against the model's positions (BoxWorld)
- TreeSpec: Tree-growth algorithm
  - RRTree: Nearest-neighbor RRT with bounded straight-line steps
- PlannerSpec: Path planning between sets of configurations
  - PathPlanner: Goal-biased RRT or bidirectional RRT-Connect

## Factory Functions

```python
from jointplan.planning.factory import create_planner, create_world

robot, world = create_world(backend="point", lower=[0, 0], upper=[10, 10])
planner = create_planner(name="rrt_connect", world=world, step_size=0.2, seed=3)
ok, path = planner.plan_path(robot, [0, 1], [1.0, 1.0], [9.0, 9.0])
```
"""

from jointplan.planning.factory import create_planner, create_world
from jointplan.planning.planners.path_planner import PathPlanner
from jointplan.planning.sampler import ConfigSampler
from jointplan.planning.spec import (
    NO_PARENT,
    ArticulatedModelSpec,
    CollisionWorldSpec,
    ConfigPath,
    Configuration,
    Extension,
    ExtensionMode,
    LocalSolverSpec,
    PlannerConfig,
    PlannerSpec,
    PlannerState,
    PlanningResult,
    PlanningStatus,
    StepResult,
    TreeSpec,
    TreeTopology,
)
from jointplan.planning.tree import RRTree
from jointplan.planning.validity import ValidityChecker

__all__ = [
    "NO_PARENT",
    "ArticulatedModelSpec",
    "CollisionWorldSpec",
    "ConfigPath",
    "ConfigSampler",
    "Configuration",
    "Extension",
    "ExtensionMode",
    "LocalSolverSpec",
    "PathPlanner",
    "PlannerConfig",
    "PlannerSpec",
    "PlannerState",
    "PlanningResult",
    "PlanningStatus",
    "RRTree",
    "StepResult",
    "TreeSpec",
    "TreeTopology",
    "ValidityChecker",
    "create_planner",
    "create_world",
]
