"""
Test suite for hierarchical path resolution and element path rendering.
"""

import pytest

from elementfinder.core.path_resolver import get_element_path, resolve_path, split_path
from elementfinder.scene import SceneGraph


class TestSplitPath:
    def test_trims_and_drops_empty_segments(self):
        assert split_path(" Generic Models / /FloorSystem/ ") == ["Generic Models", "FloorSystem"]
        assert split_path("///") == []


class TestResolvePath:
    """Per-segment fan-out resolution."""

    @pytest.mark.asyncio
    async def test_generic_models_floor_system(self, building_scene, context_for):
        """Both floor systems under Generic Models are returned."""
        resolution = await resolve_path(
            context_for(building_scene), "Generic Models/FloorSystem"
        )

        assert set(resolution.matches) == {3, 4}
        assert resolution.complete
        assert resolution.resolved_depth == 2
        assert resolution.failed_segment is None

    @pytest.mark.asyncio
    async def test_fans_out_over_ambiguous_candidates(self, building_scene, context_for):
        """Every "Level" candidate is searched for the next segment."""
        resolution = await resolve_path(context_for(building_scene), "Levels/Level/Door")

        assert set(resolution.matches) == {9, 10}
        assert resolution.complete

    @pytest.mark.asyncio
    async def test_results_are_descendants_of_previous_segment(
        self, building_scene, context_for
    ):
        """Doors outside the Levels subtree are not included."""
        scene = building_scene
        ctx = context_for(scene)

        parents = set((await resolve_path(ctx, "Levels")).matches)
        children = (await resolve_path(ctx, "Levels/Door")).matches

        assert 12 not in children
        for node_id in children:
            ancestors = set()
            current = scene.get_parent_id(node_id)
            while current:
                ancestors.add(current)
                current = scene.get_parent_id(current)
            assert ancestors & parents

    @pytest.mark.asyncio
    async def test_single_segment_is_name_search_from_root(self, building_scene, context_for):
        resolution = await resolve_path(context_for(building_scene), "door")
        assert set(resolution.matches) == {9, 10, 11, 12}

    @pytest.mark.asyncio
    async def test_partial_resolution(self, building_scene, context_for):
        """A dead-end segment returns the candidates found so far."""
        resolution = await resolve_path(
            context_for(building_scene), "Generic Models/Nope/Slab"
        )

        assert resolution.matches.to_list() == [2]
        assert not resolution.complete
        assert resolution.resolved_depth == 1
        assert resolution.failed_segment == "Nope"

    @pytest.mark.asyncio
    async def test_unmatched_first_segment(self, building_scene, context_for):
        resolution = await resolve_path(context_for(building_scene), "Roof/Slab")
        assert len(resolution.matches) == 0
        assert resolution.failed_segment == "Roof"

    @pytest.mark.asyncio
    async def test_empty_path(self, building_scene, context_for):
        resolution = await resolve_path(context_for(building_scene), " / ")
        assert resolution.segments == []
        assert not resolution.complete

    @pytest.mark.asyncio
    async def test_no_model(self, context_for):
        resolution = await resolve_path(context_for(SceneGraph()), "Generic Models")
        assert len(resolution.matches) == 0


class TestGetElementPath:
    """Ancestor chain rendering."""

    @pytest.mark.asyncio
    async def test_three_level_chain(self, context_for):
        scene = SceneGraph()
        root = scene.add_root("Model")
        mid = scene.add_node(root, "Assembly")
        leaf = scene.add_node(mid, "Part")

        assert await get_element_path(context_for(scene), leaf) == "Model / Assembly / Part"

    @pytest.mark.asyncio
    async def test_unnamed_nodes_use_bracketed_id(self, context_for):
        scene = SceneGraph()
        root = scene.add_root("Model")
        mid = scene.add_node(root, "", dbid=40)
        leaf = scene.add_node(mid, "Part")

        assert await get_element_path(context_for(scene), leaf) == "Model / [40] / Part"

    @pytest.mark.asyncio
    async def test_root_path(self, building_scene, context_for):
        assert await get_element_path(context_for(building_scene), 1) == "Model"

    @pytest.mark.asyncio
    async def test_parent_cycle_terminates(self, context_for):
        scene = SceneGraph()
        root = scene.add_root("Model")
        a = scene.add_node(root, "A")
        b = scene.add_node(a, "B")
        scene.node(a).parent = b

        assert await get_element_path(context_for(scene), b) == "A / B"

    @pytest.mark.asyncio
    async def test_no_model(self, context_for):
        assert await get_element_path(context_for(SceneGraph()), 5) is None
