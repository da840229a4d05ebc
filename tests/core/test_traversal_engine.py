"""
Test suite for the batched breadth-first traversal engine.

Covers:
- Visiting every reachable node exactly once
- Bounded in-flight oracle calls per batch
- Breadth-first ordering
- Cycle and duplicate-child tolerance
- Oracle failures, timeouts and unavailability
- Node caps, early exit, deadlines and cancellation
"""

import asyncio

import pytest

from elementfinder.core.traversal import (
    BatchTraversal,
    TraversalLimits,
    traverse,
)
from elementfinder.exceptions import SearchUnavailableError
from elementfinder.scene import SceneGraph


def never(attrs):
    return False


def depth_of(scene, node_id):
    depth = 0
    while scene.get_parent_id(node_id):
        node_id = scene.get_parent_id(node_id)
        depth += 1
    return depth


class TestTraversalCoverage:
    """Every reachable node is resolved exactly once."""

    @pytest.mark.asyncio
    async def test_false_predicate_visits_every_node_once(self, building_scene):
        """A predicate that never matches still walks the whole tree."""
        scene = building_scene
        result = await traverse(scene, scene, scene.get_root_id(), never)

        assert len(result.matches) == 0
        assert result.visited == len(scene.reachable_ids())
        assert sorted(result.trail) == sorted(scene.reachable_ids())
        assert sorted(scene.property_calls) == sorted(scene.reachable_ids())
        assert result.stop_reason == "exhausted"
        assert result.exhausted

    @pytest.mark.asyncio
    async def test_root_visited_exactly_once(self, building_scene):
        """The root is resolved once even when a child links back to it."""
        scene = building_scene
        scene.link(12, 1)

        result = await traverse(scene, scene, 1, never)

        assert scene.property_calls.count(1) == 1
        assert result.visited == len(scene.reachable_ids())

    @pytest.mark.asyncio
    async def test_cycle_in_malformed_tree_terminates(self):
        """A child pointing back at its ancestor does not loop forever."""
        scene = SceneGraph()
        root = scene.add_root("Model")
        a = scene.add_node(root, "A")
        b = scene.add_node(a, "B")
        scene.link(b, a)
        scene.link(b, root)

        result = await traverse(scene, scene, root, never)

        assert sorted(result.trail) == [root, a, b]

    @pytest.mark.asyncio
    async def test_shared_child_matched_once(self):
        """A node listed under two parents appears once in the match set."""
        scene = SceneGraph()
        root = scene.add_root("Model")
        a = scene.add_node(root, "Group A")
        b = scene.add_node(root, "Group B")
        shared = scene.add_node(a, "Shared Beam")
        scene.link(b, shared)

        result = await traverse(scene, scene, root, lambda attrs: "beam" in attrs.name.lower())

        assert result.matches.to_list() == [shared]
        assert scene.property_calls.count(shared) == 1


class TestBatching:
    """Batches bound concurrency and preserve breadth-first order."""

    @pytest.mark.asyncio
    async def test_in_flight_calls_bounded_by_batch_size(self, wide_scene):
        """No more than batch_size oracle calls run at once."""
        scene = wide_scene(40, latency=0.001)

        await traverse(scene, scene, scene.get_root_id(), never, batch_size=7)

        assert scene.max_in_flight == 7

    @pytest.mark.asyncio
    async def test_batch_is_issued_concurrently(self, wide_scene):
        """All calls of a batch are in flight together (fan-out)."""
        scene = wide_scene(5, latency=0.001)

        await traverse(scene, scene, scene.get_root_id(), never, batch_size=20)

        assert scene.max_in_flight == 5

    @pytest.mark.asyncio
    async def test_visit_order_is_breadth_first(self, wide_scene):
        """Depth never decreases along the trail, even with jittered latency."""
        scene = wide_scene(6, leaves_per_child=3, jitter=0.002, seed=7)

        result = await traverse(scene, scene, scene.get_root_id(), never, batch_size=4)

        depths = [depth_of(scene, node_id) for node_id in result.trail]
        assert depths == sorted(depths)

    def test_batch_size_must_be_positive(self, beam_scene):
        with pytest.raises(ValueError):
            BatchTraversal(beam_scene, beam_scene, batch_size=0)


class TestMatching:
    """Predicate handling."""

    @pytest.mark.asyncio
    async def test_non_matching_nodes_are_still_expanded(self, building_scene):
        """Matches below a non-matching parent are found."""
        scene = building_scene
        is_door = lambda attrs: attrs.name in ("Door A", "Door B")  # noqa: E731

        result = await traverse(scene, scene, 1, is_door)

        assert set(result.matches) == {9, 10}

    @pytest.mark.asyncio
    async def test_async_predicate(self, beam_scene):
        """Predicates may be coroutines."""

        async def is_beam(attrs):
            await asyncio.sleep(0)
            return "beam" in attrs.name.lower()

        result = await traverse(beam_scene, beam_scene, 1, is_beam)

        assert set(result.matches) == {2, 3}

    @pytest.mark.asyncio
    async def test_predicate_error_counts_as_no_match(self, beam_scene):
        """A raising predicate does not abort the traversal."""

        def picky(attrs):
            if attrs.dbid == 2:
                raise RuntimeError("bad attributes")
            return attrs.dbid == 3

        result = await traverse(beam_scene, beam_scene, 1, picky)

        assert result.matches.to_list() == [3]

    @pytest.mark.asyncio
    async def test_exclude_root(self, beam_scene):
        """include_root=False tests only strict descendants."""
        result = await traverse(beam_scene, beam_scene, 1, lambda attrs: True, include_root=False)

        assert set(result.matches) == {2, 3}
        assert 1 not in beam_scene.property_calls

    @pytest.mark.asyncio
    async def test_node_filter_skips_oracle_but_expands(self, building_scene):
        """Filtered nodes are not fetched but their children are."""
        scene = building_scene
        leaves_only = lambda node_id: scene.get_child_count(node_id) == 0  # noqa: E731

        result = await traverse(scene, scene, 1, lambda attrs: True, node_filter=leaves_only)

        assert set(result.matches) == {4, 6, 9, 10, 12}
        assert set(scene.property_calls) == {4, 6, 9, 10, 12}


class TestOracleFailures:
    """Failed, slow and unavailable oracles."""

    @pytest.mark.asyncio
    async def test_failed_fetch_is_unknown_not_fatal(self, beam_scene):
        """A node whose fetch fails is treated as a non-match."""
        beam_scene.failing.add(2)

        result = await traverse(beam_scene, beam_scene, 1, lambda a: "beam" in a.name.lower())

        assert result.matches.to_list() == [3]
        assert result.visited == 3

    @pytest.mark.asyncio
    async def test_unexpected_oracle_exception_is_unknown_not_fatal(self):
        """Any non-availability error from one fetch only drops that node."""

        class FlakyScene(SceneGraph):
            async def get_properties(self, node_id):
                if node_id == 2:
                    raise RuntimeError("host failed for one node")
                return await super().get_properties(node_id)

        scene = FlakyScene()
        root = scene.add_root("Model")
        scene.add_node(root, "Beam-1", dbid=2)
        scene.add_node(root, "Beam-2", dbid=3)

        result = await traverse(scene, scene, root, lambda a: "beam" in a.name.lower())

        assert result.matches.to_list() == [3]
        assert result.visited == 3

    @pytest.mark.asyncio
    async def test_hanging_fetch_times_out(self, beam_scene):
        """A node that never answers is skipped after the oracle timeout."""
        beam_scene.hanging.add(3)
        limits = TraversalLimits(oracle_timeout=0.05)

        result = await traverse(
            beam_scene, beam_scene, 1, lambda a: "beam" in a.name.lower(), limits=limits
        )

        assert result.matches.to_list() == [2]

    @pytest.mark.asyncio
    async def test_unavailable_oracle_raises(self, beam_scene):
        """Losing the host runtime surfaces as SearchUnavailableError."""
        beam_scene.available = False

        with pytest.raises(SearchUnavailableError):
            await traverse(beam_scene, beam_scene, 1, never)

    @pytest.mark.asyncio
    async def test_missing_root_returns_empty(self, beam_scene):
        """No model loaded is a normal empty result."""
        result = await traverse(beam_scene, beam_scene, None, never)
        assert len(result.matches) == 0
        assert result.stop_reason == "unavailable"
        assert beam_scene.property_calls == []

    @pytest.mark.asyncio
    async def test_missing_tree_returns_empty(self, beam_scene):
        result = await traverse(None, beam_scene, 1, never)
        assert result.stop_reason == "unavailable"


class TestLimits:
    """Caps, early exit, deadlines and cancellation."""

    @pytest.mark.asyncio
    async def test_max_nodes_bounds_oracle_calls(self, wide_scene):
        """max_nodes caps oracle dispatches exactly."""
        scene = wide_scene(30)

        result = await traverse(
            scene, scene, scene.get_root_id(), never, batch_size=4,
            limits=TraversalLimits(max_nodes=10),
        )

        assert len(scene.property_calls) == 10
        assert result.oracle_calls == 10
        assert result.stop_reason == "max_nodes"

    @pytest.mark.asyncio
    async def test_early_exit_needs_matches_and_floor(self, wide_scene):
        """Early exit fires only once matches exist and the floor is reached."""
        scene = wide_scene(20)
        limits = TraversalLimits(early_exit_min_visited=5)

        result = await traverse(
            scene, scene, scene.get_root_id(), lambda a: a.name.startswith("Item"),
            batch_size=2, limits=limits,
        )

        assert result.stop_reason == "early_exit"
        assert 5 <= result.visited < 21
        assert len(result.matches) == result.visited - 1

    @pytest.mark.asyncio
    async def test_early_exit_without_matches_scans_everything(self, wide_scene):
        scene = wide_scene(12)

        result = await traverse(
            scene, scene, scene.get_root_id(), never, batch_size=2,
            limits=TraversalLimits(early_exit_min_visited=3),
        )

        assert result.stop_reason == "exhausted"
        assert result.visited == 13

    @pytest.mark.asyncio
    async def test_cancel_event_stops_at_batch_boundary(self, wide_scene):
        """Setting the cancel event stops the walk before the next batch."""
        scene = wide_scene(30, latency=0.001)
        cancel = asyncio.Event()

        def cancel_after_first(attrs):
            cancel.set()
            return False

        result = await traverse(
            scene, scene, scene.get_root_id(), cancel_after_first, batch_size=5,
            cancel_event=cancel,
        )

        assert result.stop_reason == "cancelled"
        assert result.visited == 1

    @pytest.mark.asyncio
    async def test_deadline(self, wide_scene):
        """max_execution_time stops a slow traversal."""
        scene = wide_scene(50, latency=0.02)

        result = await traverse(
            scene, scene, scene.get_root_id(), never, batch_size=2,
            limits=TraversalLimits(max_execution_time=0.05),
        )

        assert result.stop_reason == "deadline"
        assert result.visited < 51


class TestTrail:
    """Visit trail reported on the result."""

    @pytest.mark.asyncio
    async def test_depths_follow_trail(self, building_scene):
        """Each resolved node is reported with its depth below the root."""
        scene = building_scene

        result = await traverse(scene, scene, 1, never, batch_size=3)

        assert len(result.depths) == len(result.trail) == result.visited
        assert dict(zip(result.trail, result.depths)) == {
            node_id: depth_of(scene, node_id) for node_id in scene.reachable_ids()
        }
        assert result.depths == sorted(result.depths)

    @pytest.mark.asyncio
    async def test_filtered_nodes_are_not_on_trail(self, building_scene):
        """Only nodes sent to the oracle appear on the trail."""
        scene = building_scene
        leaves_only = lambda node_id: scene.get_child_count(node_id) == 0  # noqa: E731

        result = await traverse(scene, scene, 1, never, node_filter=leaves_only)

        assert sorted(result.trail) == [4, 6, 9, 10, 12]
        assert sorted(result.depths) == [2, 2, 3, 3, 3]
