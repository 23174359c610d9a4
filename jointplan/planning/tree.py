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

"""Rapidly-exploring random tree over joint configurations.

Nodes live in a growable numpy arena: row ``i`` of the configuration array
is node ``i`` and ``parents[i]`` is the index of its parent, or ``NO_PARENT``
for a root. A tree may hold several roots (one per start or goal), and a
node's parent is always inserted before it, so every parent chain ends at a
root after fewer than ``size`` hops.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from jointplan.planning.spec import NO_PARENT, Extension, StepResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import ArrayLike, NDArray

    from jointplan.planning.sampler import ConfigSampler
    from jointplan.planning.spec import ConfigPath, LocalSolverSpec, NodeIndex
    from jointplan.planning.validity import ValidityChecker


class RRTree:
    """RRT with straight-line steps of bounded length.

    Args:
        validity: Oracle every grown node must pass
        sampler: Source of random configurations (defines the DOF count)
        step_size: Longest step taken from a node toward a target
        roots: Initial root configurations, assumed already valid
        solver: Optional local solver; stored for subclasses, not called here
        weights: Per-DOF weights of the Euclidean metric (None for plain Euclidean)
    """

    # Distance under which a step is considered to have hit its target
    REACHED_TOLERANCE = 1e-9

    _INITIAL_CAPACITY = 64

    def __init__(
        self,
        validity: ValidityChecker,
        sampler: ConfigSampler,
        step_size: float,
        roots: Sequence[NDArray[np.float64]] = (),
        solver: LocalSolverSpec | None = None,
        weights: ArrayLike | None = None,
    ):
        if step_size <= 0.0:
            raise ValueError(f"step_size must be positive, got {step_size}")

        self.validity = validity
        self.sampler = sampler
        self.step_size = float(step_size)
        self.solver = solver

        self._num_dofs = sampler.num_dofs
        self._weights: NDArray[np.float64] | None = None
        if weights is not None:
            self._weights = np.asarray(weights, dtype=np.float64).reshape(-1)
            if self._weights.size != self._num_dofs:
                raise ValueError(
                    f"Expected {self._num_dofs} metric weights, got {self._weights.size}"
                )

        self._configs = np.empty((self._INITIAL_CAPACITY, self._num_dofs), dtype=np.float64)
        self._parents = np.full(self._INITIAL_CAPACITY, NO_PARENT, dtype=np.int64)
        self._size = 0
        self._active: NodeIndex | None = None

        self.reset(roots)

    # ============= Tree State =============

    def reset(self, roots: Sequence[NDArray[np.float64]]) -> None:
        self._size = 0
        self._active = None
        for root in roots:
            self._add_node(self._as_config(root), NO_PARENT)

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    @property
    def num_dofs(self) -> int:
        return self._num_dofs

    @property
    def active_node(self) -> NodeIndex | None:
        return self._active

    @property
    def configs(self) -> NDArray[np.float64]:
        """Read-only view of all node configurations, one row per node."""
        view = self._configs[: self._size]
        view.flags.writeable = False
        return view

    def config(self, node: NodeIndex) -> NDArray[np.float64]:
        self._check_node(node)
        return self._configs[node].copy()

    def parent(self, node: NodeIndex) -> NodeIndex:
        self._check_node(node)
        return int(self._parents[node])

    def roots(self) -> list[NodeIndex]:
        return [int(i) for i in np.flatnonzero(self._parents[: self._size] == NO_PARENT)]

    def depth(self, node: NodeIndex) -> int:
        """Number of parent hops from node to its root."""
        hops = 0
        node = self.parent(node)
        while node != NO_PARENT:
            hops += 1
            node = int(self._parents[node])
        return hops

    def get_random_config(self) -> NDArray[np.float64]:
        return self.sampler.get_random_config()

    # ============= Metric =============

    def gap(self, a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
        diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
        if self._weights is None:
            return float(np.linalg.norm(diff))
        return float(np.sqrt(np.dot(self._weights, diff * diff)))

    def nearest(self, target: NDArray[np.float64]) -> NodeIndex:
        """Index of the node closest to target (linear scan)."""
        if self._size == 0:
            raise RuntimeError("Nearest-neighbor query on an empty tree")
        diff = self._configs[: self._size] - target
        sq = diff * diff
        sq_dist = sq @ self._weights if self._weights is not None else sq.sum(axis=1)
        return int(np.argmin(sq_dist))

    # ============= Extension =============

    def try_step(self, target: NDArray[np.float64]) -> Extension:
        target = self._as_config(target)
        return self._step_from(self.nearest(target), target)

    def connect(self, target: NDArray[np.float64]) -> Extension:
        """Step toward target repeatedly, each step from the node just added.

        Returns REACHED with the node at target, or TRAPPED with the last
        node inserted along the way (None if the first step was blocked).
        """
        target = self._as_config(target)
        near = self.nearest(target)
        last: NodeIndex | None = None

        while True:
            extension = self._step_from(near, target)
            if extension.node is None:
                return Extension(StepResult.TRAPPED, last)
            if extension.reached:
                return extension
            last = near = extension.node

    def _step_from(self, near: NodeIndex, target: NDArray[np.float64]) -> Extension:
        q_near = self._configs[near]
        dist = self.gap(q_near, target)

        if dist <= self.step_size:
            candidate = target.copy()
        else:
            candidate = q_near + (target - q_near) * (self.step_size / dist)

        if not self.validity.is_valid(candidate):
            return Extension(StepResult.TRAPPED)

        node = self._add_node(candidate, near)
        if self.gap(candidate, target) <= self.REACHED_TOLERANCE:
            return Extension(StepResult.REACHED, node)
        return Extension(StepResult.ADVANCED, node)

    # ============= Path Extraction =============

    def trace_path(self, node: NodeIndex, reverse: bool = False) -> ConfigPath:
        """Configurations along the parent chain of node.

        Root-to-node order by default; node-to-root when ``reverse`` is set,
        which is the order the goal side of a bidirectional path needs.
        """
        self._check_node(node)
        chain: ConfigPath = []
        current = node
        while current != NO_PARENT:
            chain.append(self._configs[current].copy())
            current = int(self._parents[current])

        if not reverse:
            chain.reverse()
        return chain

    # ============= Internals =============

    def _add_node(self, config: NDArray[np.float64], parent: NodeIndex) -> NodeIndex:
        if self._size == len(self._parents):
            self._grow()
        node = self._size
        self._configs[node] = config
        self._parents[node] = parent
        self._size += 1
        self._active = node
        return node

    def _grow(self) -> None:
        capacity = 2 * len(self._parents)
        configs = np.empty((capacity, self._num_dofs), dtype=np.float64)
        configs[: self._size] = self._configs[: self._size]
        parents = np.full(capacity, NO_PARENT, dtype=np.int64)
        parents[: self._size] = self._parents[: self._size]
        self._configs = configs
        self._parents = parents

    def _as_config(self, config: ArrayLike) -> NDArray[np.float64]:
        q = np.asarray(config, dtype=np.float64).reshape(-1)
        if q.size != self._num_dofs:
            raise ValueError(f"Expected a configuration of {self._num_dofs} DOFs, got {q.size}")
        return q

    def _check_node(self, node: NodeIndex) -> None:
        if not 0 <= node < self._size:
            raise IndexError(f"Node {node} not in tree of size {self._size}")
