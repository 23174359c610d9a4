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

"""Uniform configuration sampling within DOF limits."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


class ConfigSampler:
    """Draws configurations uniformly from a box of joint limits.

    The sampler owns its random generator. Pass an int seed for reproducible
    runs, or an existing ``numpy.random.Generator`` to share its state with
    other consumers (the planner does this so one seed fixes a whole run).
    Samples are not checked for validity.
    """

    def __init__(
        self,
        lower: ArrayLike,
        upper: ArrayLike,
        seed: int | np.random.Generator | None = None,
    ):
        self.lower = np.asarray(lower, dtype=np.float64).reshape(-1)
        self.upper = np.asarray(upper, dtype=np.float64).reshape(-1)

        if self.lower.shape != self.upper.shape:
            raise ValueError(
                f"Limit size mismatch: {self.lower.size} lower vs {self.upper.size} upper"
            )
        if np.any(self.lower > self.upper):
            raise ValueError("Lower joint limits must not exceed upper joint limits")

        # Unbounded DOFs are fine until a sample is requested
        self.bounded = bool(np.all(np.isfinite(self.lower)) and np.all(np.isfinite(self.upper)))
        self.rng = np.random.default_rng(seed)

    @property
    def num_dofs(self) -> int:
        return int(self.lower.size)

    def reseed(self, seed: int | np.random.Generator | None = None) -> None:
        self.rng = np.random.default_rng(seed)

    def get_random_config(self) -> NDArray[np.float64]:
        """Sample one configuration, each DOF independently uniform in its limits."""
        if not self.bounded:
            raise ValueError("Joint limits must be finite to sample from them")
        return self.rng.uniform(self.lower, self.upper)
