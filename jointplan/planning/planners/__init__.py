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
Motion Planners Module

All planners are backend-agnostic - they only use the model and world
Protocols and work with any collision backend.

## Implementations

- PathPlanner: goal-biased single-tree RRT or bidirectional RRT-Connect

## Usage

Use factory functions to create planners:

```python
from jointplan.planning.factory import create_planner

planner = create_planner(name="rrt_connect", world=world)  # Returns PlannerSpec
ok, path = planner.plan_path(robot, dofs, q_start, q_goal)
```
"""

from jointplan.planning.planners.path_planner import PathPlanner

__all__ = ["PathPlanner"]
