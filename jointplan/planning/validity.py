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

"""Collision-based validity checking of configurations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from jointplan.planning.spec import ArticulatedModelSpec, CollisionWorldSpec, DofIndices


class ValidityChecker:
    """Answers "is this configuration collision-free?" for one model in one world.

    Each query moves the model to the configuration and asks the world for a
    collision, so the model's positions change as a side effect. Callers that
    care about the model's state (the planner does) save and restore it.
    Not safe to share with other users of the same model concurrently.
    """

    def __init__(
        self,
        world: CollisionWorldSpec,
        model: ArticulatedModelSpec,
        dofs: DofIndices,
    ):
        self.world = world
        self.model = model
        self.dofs = list(dofs)
        self.num_checks = 0

    def is_valid(self, config: NDArray[np.float64]) -> bool:
        self.num_checks += 1
        self.model.set_positions(self.dofs, np.asarray(config, dtype=np.float64))
        return not self.world.check_collision()

    def filter_valid(self, configs: list[NDArray[np.float64]]) -> list[NDArray[np.float64]]:
        """Keep the configurations that pass ``is_valid``, in order."""
        return [q for q in configs if self.is_valid(q)]
