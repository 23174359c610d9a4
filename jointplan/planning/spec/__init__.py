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

"""Joint-space planning specifications."""

from jointplan.planning.spec.config import PlannerConfig
from jointplan.planning.spec.enums import (
    ExtensionMode,
    PlannerState,
    PlanningStatus,
    StepResult,
    TreeTopology,
)
from jointplan.planning.spec.protocols import (
    ArticulatedModelSpec,
    CollisionWorldSpec,
    LocalSolverSpec,
    PlannerSpec,
    TreeSpec,
)
from jointplan.planning.spec.types import (
    NO_PARENT,
    ConfigPath,
    Configuration,
    DofIndices,
    Extension,
    NodeIndex,
    PlanningResult,
)

__all__ = [
    "NO_PARENT",
    "ArticulatedModelSpec",
    "CollisionWorldSpec",
    "ConfigPath",
    "Configuration",
    "DofIndices",
    "Extension",
    "ExtensionMode",
    "LocalSolverSpec",
    "NodeIndex",
    "PlannerConfig",
    "PlannerSpec",
    "PlannerState",
    "PlanningResult",
    "PlanningStatus",
    "StepResult",
    "TreeSpec",
    "TreeTopology",
]
