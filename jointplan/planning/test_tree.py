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

import numpy as np
import pytest

from jointplan.planning.spec import NO_PARENT, StepResult
from jointplan.planning.world.point_world import BoxObstacle, BoxWorld, PointRobot


def _blocked_space(lower_x: float, upper_x: float):
    robot = PointRobot(lower=[0.0, 0.0], upper=[10.0, 10.0])
    world = BoxWorld(robot, [BoxObstacle("block", (lower_x, 0.0), (upper_x, 10.0))])
    return robot, world


# =============================================================================
# Tree State
# =============================================================================


def test_reset_inserts_one_root_per_config(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, roots=[(0.0, 0.0), (10.0, 10.0)])

    assert tree.size == 2
    assert len(tree) == 2
    assert tree.roots() == [0, 1]
    assert tree.parent(0) == NO_PARENT
    assert tree.parent(1) == NO_PARENT
    assert tree.active_node == 1


def test_reset_clears_previous_nodes(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world)
    tree.connect(np.array([5.0, 0.0]))
    assert tree.size > 1

    tree.reset([np.array([2.0, 2.0])])
    assert tree.size == 1
    assert np.array_equal(tree.config(0), [2.0, 2.0])


def test_empty_tree(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, roots=())

    assert tree.size == 0
    assert tree.active_node is None
    with pytest.raises(RuntimeError):
        tree.try_step(np.array([1.0, 1.0]))


def test_invalid_arguments(free_space, make_tree):
    robot, world = free_space

    with pytest.raises(ValueError):
        make_tree(robot, world, step_size=0.0)
    with pytest.raises(ValueError):
        make_tree(robot, world, roots=[(0.0, 0.0, 0.0)])
    with pytest.raises(ValueError):
        make_tree(robot, world, weights=[1.0, 1.0, 1.0])


def test_configs_view_is_read_only(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world)

    with pytest.raises(ValueError):
        tree.configs[0, 0] = 3.0


def test_node_lookup_out_of_range(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world)

    with pytest.raises(IndexError):
        tree.config(5)
    with pytest.raises(IndexError):
        tree.trace_path(-2)


# =============================================================================
# Metric and Nearest Neighbor
# =============================================================================


def test_gap_is_euclidean_by_default(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world)

    assert tree.gap(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(5.0)
    assert tree.gap(np.array([3.0, 4.0]), np.array([0.0, 0.0])) == pytest.approx(5.0)
    assert tree.gap(np.array([1.0, 1.0]), np.array([1.0, 1.0])) == 0.0


def test_weighted_gap(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, weights=[1.0, 4.0])

    assert tree.gap(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(np.sqrt(73.0))


def test_nearest_uses_metric(free_space, make_tree):
    robot, world = free_space
    roots = [(0.0, 0.0), (3.0, 0.0), (0.0, 2.0)]

    plain = make_tree(robot, world, roots=roots)
    assert plain.nearest(np.array([0.0, 2.5])) == 2

    # Moving along y costs a lot more than along x
    weighted = make_tree(robot, world, roots=roots, weights=[1.0, 100.0])
    assert weighted.nearest(np.array([2.0, 0.5])) == 1
    assert weighted.nearest(np.array([0.0, 1.9])) == 2


# =============================================================================
# Extension
# =============================================================================


def test_try_step_advances_by_step_size(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, step_size=1.0)

    extension = tree.try_step(np.array([5.0, 0.0]))

    assert extension.result == StepResult.ADVANCED
    assert not extension.reached
    assert extension.node == 1
    assert np.allclose(tree.config(1), [1.0, 0.0])
    assert tree.parent(1) == 0
    assert tree.active_node == 1


def test_try_step_reaches_close_target(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, step_size=1.0)

    extension = tree.try_step(np.array([0.6, 0.0]))

    assert extension.result == StepResult.REACHED
    assert extension.reached
    assert np.array_equal(tree.config(extension.node), [0.6, 0.0])


def test_try_step_trapped_inserts_nothing(make_tree):
    robot, world = _blocked_space(0.5, 1.5)
    tree = make_tree(robot, world, step_size=1.0)

    extension = tree.try_step(np.array([5.0, 0.0]))

    assert extension.result == StepResult.TRAPPED
    assert extension.node is None
    assert tree.size == 1
    assert tree.active_node == 0


def test_connect_reaches_target_in_free_space(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, step_size=1.0)

    extension = tree.connect(np.array([5.0, 0.0]))

    assert extension.reached
    assert tree.size == 6
    path = tree.trace_path(extension.node)
    assert np.allclose(path, [[x, 0.0] for x in range(6)])


def test_connect_stops_at_obstacle(make_tree):
    robot, world = _blocked_space(2.5, 3.5)
    tree = make_tree(robot, world, step_size=1.0)

    extension = tree.connect(np.array([5.0, 0.0]))

    assert extension.result == StepResult.TRAPPED
    assert extension.node == 2
    assert tree.size == 3
    assert np.allclose(tree.config(extension.node), [2.0, 0.0])


def test_connect_blocked_on_first_step(make_tree):
    robot, world = _blocked_space(0.5, 1.5)
    tree = make_tree(robot, world, step_size=1.0)

    extension = tree.connect(np.array([5.0, 0.0]))

    assert extension.result == StepResult.TRAPPED
    assert extension.node is None
    assert tree.size == 1


def test_tree_grows_past_initial_capacity(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, step_size=0.1)

    extension = tree.connect(np.array([10.0, 0.0]))

    assert extension.reached
    assert tree.size > 64
    assert np.array_equal(tree.config(extension.node), [10.0, 0.0])
    assert tree.depth(extension.node) == tree.size - 1
    assert all(tree.parent(i) < i for i in range(1, tree.size))


def test_grown_nodes_avoid_obstacles(wall_space, make_tree):
    robot, world = wall_space
    tree = make_tree(robot, world, roots=[(1.0, 1.0)], step_size=0.5, seed=3)
    wall = world.obstacles[0]

    for _ in range(300):
        tree.connect(tree.get_random_config())

    assert tree.size > 1
    assert not any(wall.contains(q) for q in tree.configs)


# =============================================================================
# Path Extraction
# =============================================================================


def test_trace_path_orders(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, step_size=1.0)
    extension = tree.connect(np.array([3.0, 0.0]))

    forward = tree.trace_path(extension.node)
    backward = tree.trace_path(extension.node, reverse=True)

    assert np.allclose(forward[0], [0.0, 0.0])
    assert np.allclose(forward[-1], [3.0, 0.0])
    assert np.allclose(backward, forward[::-1])


def test_trace_path_of_root(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, roots=[(0.0, 0.0), (9.0, 9.0)])

    assert np.array_equal(tree.trace_path(1), [[9.0, 9.0]])


def test_trace_path_ends_at_own_root_with_many_roots(free_space, make_tree):
    robot, world = free_space
    tree = make_tree(robot, world, roots=[(0.0, 0.0), (9.0, 0.0)], step_size=1.0)

    extension = tree.connect(np.array([9.0, 3.0]))
    path = tree.trace_path(extension.node)

    assert np.array_equal(path[0], [9.0, 0.0])
    assert len(path) == 4


def test_parent_chains_are_acyclic(wall_space, make_tree):
    robot, world = wall_space
    tree = make_tree(robot, world, roots=[(1.0, 1.0), (9.0, 1.0)], step_size=0.7, seed=11)
    for _ in range(200):
        tree.try_step(tree.get_random_config())

    for node in range(tree.size):
        seen = set()
        current = node
        while current != NO_PARENT:
            assert current not in seen
            seen.add(current)
            current = tree.parent(current)
        assert len(seen) <= tree.size
        assert tree.depth(node) < tree.size
