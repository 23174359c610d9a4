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

"""Goal-biased RRT and bidirectional RRT-Connect path planning.

``PathPlanner`` is a common front end to both strategies:

- single tree: one tree rooted at the feasible starts grows toward random
  samples or, with probability ``goal_bias``, toward the goal, until a new
  node lands within ``step_size`` of the goal (a start already that close
  succeeds on the first iteration).
- bidirectional: a start tree and a goal tree take turns. The growing tree
  extends toward a sample (or, with probability ``goal_bias``, the first goal)
  and the other tree then extends toward the node just created. The trees
  meet when that second extension reaches it.

NOTE: this differs from the LaValle and Kuffner formulation, where both trees
extend toward a common random configuration.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import numpy as np

from jointplan.planning.sampler import ConfigSampler
from jointplan.planning.spec import (
    ExtensionMode,
    PlannerConfig,
    PlannerState,
    PlanningResult,
    PlanningStatus,
    TreeTopology,
)
from jointplan.planning.tree import RRTree
from jointplan.planning.utils.path_utils import compute_path_length, concatenate_paths
from jointplan.planning.validity import ValidityChecker
from jointplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from numpy.typing import ArrayLike, NDArray

    from jointplan.planning.spec import (
        ArticulatedModelSpec,
        CollisionWorldSpec,
        ConfigPath,
        DofIndices,
        Extension,
        LocalSolverSpec,
        TreeSpec,
    )

    TreeFactory = Callable[..., TreeSpec]

logger = setup_logger()


class PathPlanner:
    """Plans collision-free joint-space paths between sets of configurations.

    The world is only asked about collisions; the model is moved through
    candidate configurations during planning and put back where it was before
    ``plan_path`` returns.

    Trees are kept on the planner after each call (``start_tree`` and, for
    bidirectional planning, ``goal_tree``) for inspection or reuse.

    Args:
        world: Collision environment the model lives in
        bidirectional: Grow a start tree and a goal tree that meet in the middle
        connect: Extend greedily until blocked instead of one step per iteration
        step_size: Distance between a node and the node grown from it
        max_nodes: Node budget across all trees
        goal_bias: Probability of extending toward the goal instead of a random sample
        solver: Optional local solver handed to every tree
        seed: Seed of the planner's random generator (None draws fresh entropy)
        metric_weights: Per-DOF weights of the distance metric
        tree_factory: Builds the trees; called as
            ``tree_factory(validity, sampler, step_size, solver=..., weights=...)``
        config: Full configuration, used instead of the individual options

    Example:
        planner = PathPlanner(world, bidirectional=True, connect=True, step_size=0.05, seed=7)
        ok, path = planner.plan_path(robot, [0, 1, 2], q_start, q_goal)
    """

    def __init__(
        self,
        world: CollisionWorldSpec,
        bidirectional: bool | None = None,
        connect: bool | None = None,
        step_size: float | None = None,
        max_nodes: int | None = None,
        goal_bias: float | None = None,
        solver: LocalSolverSpec | None = None,
        seed: int | None = None,
        metric_weights: Sequence[float] | None = None,
        tree_factory: TreeFactory | None = None,
        config: PlannerConfig | None = None,
    ):
        if config is None:
            options = _to_config_fields(
                bidirectional=bidirectional,
                connect=connect,
                step_size=step_size,
                max_nodes=max_nodes,
                goal_bias=goal_bias,
                seed=seed,
                metric_weights=metric_weights,
            )
            # Unset options fall back to PlannerConfig defaults (and the environment)
            config = PlannerConfig(**{k: v for k, v in options.items() if v is not None})

        self.world = world
        self.solver = solver
        self.config = config
        self.tree_factory: TreeFactory = tree_factory or RRTree
        self.state = PlannerState.INITIALIZED

        self.start_tree: TreeSpec | None = None
        self.goal_tree: TreeSpec | None = None

        self._rng = np.random.default_rng(config.seed)

    # ============= Configuration =============

    def configure(self, config: PlannerConfig | None = None, **overrides: Any) -> PlannerConfig:
        """Replace the configuration between planning calls.

        Either pass a full ``PlannerConfig`` or override options of the
        current one (same names as the constructor). The random generator is
        only reseeded when the seed changes.
        """
        if config is None:
            fields = {**self.config.model_dump(), **_to_config_fields(**overrides)}
            config = PlannerConfig(**fields)
        if config.seed != self.config.seed:
            self.reseed(config.seed)
        self.config = config
        return config

    def reseed(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def get_name(self) -> str:
        prefix = "Bidirectional" if self.config.bidirectional else "GoalBiased"
        suffix = "Connect" if self.config.connect else ""
        return f"{prefix}RRT{suffix}"

    # ============= Planning =============

    def plan_path(
        self,
        model: ArticulatedModelSpec,
        dofs: DofIndices,
        start: ArrayLike | Sequence[ArrayLike],
        goal: ArrayLike | Sequence[ArrayLike],
    ) -> PlanningResult:
        """Plan a path from any of the start configurations to any of the goals.

        ``start`` and ``goal`` are either a single configuration (one value
        per DOF in ``dofs``) or a collection of them. Configurations in
        collision are discarded before any tree is grown.

        Returns:
            A PlanningResult; unpack it as ``(success, path)`` if that is all
            you need. ``path`` is empty unless planning succeeded.
        """
        start_time = time.time()

        dofs = list(dofs)
        if not dofs:
            raise ValueError("At least one DOF must be planned")
        starts = _as_config_set(start, len(dofs), "start")
        goals = _as_config_set(goal, len(dofs), "goal")

        saved_positions = np.array(model.get_positions(dofs), dtype=np.float64)
        try:
            result = self._plan(model, dofs, starts, goals)
        finally:
            model.set_positions(dofs, saved_positions)

        result.planning_time = time.time() - start_time
        if result.is_success():
            logger.info(
                "Path found",
                planner=self.get_name(),
                waypoints=len(result.path),
                iterations=result.iterations,
                nodes=result.num_nodes,
                seconds=round(result.planning_time, 4),
            )
        return result

    def _plan(
        self,
        model: ArticulatedModelSpec,
        dofs: DofIndices,
        starts: ConfigPath,
        goals: ConfigPath,
    ) -> PlanningResult:
        self.state = PlannerState.INITIALIZED

        validity = ValidityChecker(self.world, model, dofs)
        lower, upper = model.get_position_limits(dofs)
        # Trees draw samples from the planner's generator so one seed fixes the run
        sampler = ConfigSampler(lower, upper, seed=self._rng)

        self.start_tree = self._make_tree(validity, sampler)
        self.goal_tree = self._make_tree(validity, sampler) if self.config.bidirectional else None

        feasible_start = validity.filter_valid(starts)
        if not feasible_start:
            logger.warning("Feasible start points are empty", num_starts=len(starts))
            self.state = PlannerState.FAILED
            return _create_failure_result(
                PlanningStatus.INFEASIBLE_START,
                f"All {len(starts)} start configurations are in collision",
            )

        feasible_goal = validity.filter_valid(goals)
        if not feasible_goal:
            logger.warning("Feasible goal points are empty", num_goals=len(goals))
            self.state = PlannerState.FAILED
            return _create_failure_result(
                PlanningStatus.INFEASIBLE_GOAL,
                f"All {len(goals)} goal configurations are in collision",
            )

        if self.config.bidirectional:
            return self._plan_bidirectional(feasible_start, feasible_goal)

        if len(feasible_goal) > 1:
            logger.warning(
                "Single-tree planning uses only the first feasible goal",
                num_goals=len(feasible_goal),
            )
        return self._plan_single_tree(feasible_start, feasible_goal[0])

    def _plan_single_tree(
        self,
        starts: ConfigPath,
        goal: NDArray[np.float64],
    ) -> PlanningResult:
        """Grow one tree from the starts until its newest node is within a step of the goal."""
        tree = self.start_tree
        if tree is None:
            raise RuntimeError("Start tree must be created before planning")
        tree.reset(starts)

        step_size = self.config.step_size
        max_nodes = self.config.max_nodes
        self.state = PlannerState.GROWING

        # Iterations that insert nothing still use up budget
        iterations = stalled = 0
        while tree.size + stalled <= max_nodes:
            iterations += 1

            if self._rng.random() < self.config.goal_bias:
                target = goal
            else:
                target = tree.get_random_config()

            if self._extend(tree, target).node is None:
                stalled += 1

            # A trapped extension leaves the previous node (a root at first) active
            node = tree.active_node
            if node is not None and tree.gap(tree.config(node), goal) < step_size:
                path = concatenate_paths(tree.trace_path(node), [goal.copy()])
                self.state = PlannerState.SUCCEEDED
                return _create_success_result(path, tree.gap, iterations, tree.size)

        self.state = PlannerState.FAILED
        logger.warning("No path found within node budget", max_nodes=max_nodes, nodes=tree.size)
        return _create_failure_result(
            PlanningStatus.PLANNING_EXHAUSTED,
            f"No path found after {iterations} iterations ({tree.size} nodes)",
            iterations,
            tree.size,
        )

    def _plan_bidirectional(
        self,
        starts: ConfigPath,
        goals: ConfigPath,
    ) -> PlanningResult:
        """Alternate growth of the start and goal trees until they meet."""
        start_tree, goal_tree = self.start_tree, self.goal_tree
        if start_tree is None or goal_tree is None:
            raise RuntimeError("Start and goal trees must be created before planning")
        start_tree.reset(starts)
        goal_tree.reset(goals)

        max_nodes = self.config.max_nodes
        self.state = PlannerState.GROWING

        # Both trees are biased toward the first goal
        goal = goals[0]

        # Roles swap at the top of the loop, so the start tree grows first
        tree, other = goal_tree, start_tree

        smallest_gap = float("inf")
        iterations = stalled = 0
        while start_tree.size + goal_tree.size + stalled <= max_nodes:
            iterations += 1
            tree, other = other, tree

            if self._rng.random() < self.config.goal_bias:
                target = goal
            else:
                target = tree.get_random_config()

            grown = self._extend(tree, target)
            if grown.node is None:
                stalled += 1
                continue

            # The other tree reaches for the node just added
            bridge = tree.config(grown.node)
            met = self._extend(other, bridge)

            if met.reached:
                if met.node is None:
                    raise RuntimeError("Extension reached its target without adding a node")
                if tree is start_tree:
                    start_node, goal_node = grown.node, met.node
                else:
                    start_node, goal_node = met.node, grown.node
                path = concatenate_paths(
                    start_tree.trace_path(start_node),
                    goal_tree.trace_path(goal_node, reverse=True),
                )
                self.state = PlannerState.SUCCEEDED
                return _create_success_result(
                    path, start_tree.gap, iterations, start_tree.size + goal_tree.size
                )

            if met.node is not None:
                gap = other.gap(other.config(met.node), bridge)
                if gap < smallest_gap:
                    smallest_gap = gap
                    logger.debug(
                        "Trees closing in",
                        gap=round(gap, 6),
                        start_size=start_tree.size,
                        goal_size=goal_tree.size,
                    )

        total = start_tree.size + goal_tree.size
        self.state = PlannerState.FAILED
        logger.warning(
            "No path found within node budget",
            max_nodes=max_nodes,
            nodes=total,
            smallest_gap=smallest_gap,
        )
        return _create_failure_result(
            PlanningStatus.PLANNING_EXHAUSTED,
            f"Trees did not meet after {iterations} iterations ({total} nodes)",
            iterations,
            total,
        )

    # ============= Helpers =============

    def _make_tree(self, validity: ValidityChecker, sampler: ConfigSampler) -> TreeSpec:
        return self.tree_factory(
            validity,
            sampler,
            self.config.step_size,
            solver=self.solver,
            weights=self.config.metric_weights,
        )

    def _extend(self, tree: TreeSpec, target: NDArray[np.float64]) -> Extension:
        if self.config.connect:
            return tree.connect(target)
        return tree.try_step(target)


def _to_config_fields(**options: Any) -> dict[str, Any]:
    """Translate constructor-style options into PlannerConfig fields."""
    bidirectional = options.pop("bidirectional", None)
    if bidirectional is not None:
        options["topology"] = TreeTopology.BIDIRECTIONAL if bidirectional else TreeTopology.SINGLE
    connect = options.pop("connect", None)
    if connect is not None:
        options["extension_mode"] = ExtensionMode.CONNECT if connect else ExtensionMode.STEP
    if options.get("metric_weights") is not None:
        options["metric_weights"] = tuple(options["metric_weights"])
    return options


def _as_config_set(
    configs: ArrayLike | Sequence[ArrayLike],
    num_dofs: int,
    label: str,
) -> ConfigPath:
    """Normalize one configuration or a collection of them to a list of arrays."""
    array = np.asarray(configs, dtype=np.float64)
    if array.size == 0:
        return []
    if array.ndim == 1:
        array = array[np.newaxis, :]
    if array.ndim != 2 or array.shape[1] != num_dofs:
        raise ValueError(
            f"Each {label} configuration must have {num_dofs} values, got shape {array.shape}"
        )
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{label.capitalize()} configurations must be finite")
    return [row.copy() for row in array]


# ============= Result Helpers =============


def _create_success_result(
    path: ConfigPath,
    metric: Callable[[NDArray[np.float64], NDArray[np.float64]], float],
    iterations: int,
    num_nodes: int,
) -> PlanningResult:
    """Create a successful planning result."""
    return PlanningResult(
        status=PlanningStatus.SUCCESS,
        path=path,
        path_length=compute_path_length(path, metric),
        iterations=iterations,
        num_nodes=num_nodes,
        message="Path found",
    )


def _create_failure_result(
    status: PlanningStatus,
    message: str,
    iterations: int = 0,
    num_nodes: int = 0,
) -> PlanningResult:
    """Create a failed planning result."""
    return PlanningResult(
        status=status,
        path=[],
        iterations=iterations,
        num_nodes=num_nodes,
        message=message,
    )
