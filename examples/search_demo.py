"""
Element search demo.

Builds a small model in memory, then looks elements up by name, by
custom property and by hierarchical path, highlighting the results.

Run with:
    python examples/search_demo.py
"""

import asyncio
import logging

from elementfinder import SceneGraph, SearchConfig, configure_logging, create_element_finder


def build_model() -> SceneGraph:
    """A model with a few structural assemblies."""
    scene = SceneGraph(latency=0.005, jitter=0.005, seed=1)
    root = scene.add_root("Tower")
    generic = scene.add_node(root, "Generic Models")
    floor = scene.add_node(generic, "FloorSystem [717446]")
    scene.add_node(
        floor,
        "QWEB_STR_LVL-LSL [717447]",
        properties={"PTP_Assembly_Name": "L1-EAST", "Mark": "LSL-1"},
    )
    scene.add_node(
        floor,
        "QWEB_STR_LVL-LSL [717448]",
        properties={"PTP Assembly Name": "L1-EAST", "Mark": "LSL-2"},
    )
    framing = scene.add_node(root, "Structural Framing")
    for i in range(1, 6):
        scene.add_node(framing, f"Beam-{i}", properties={"Length": 1200 * i})
    return scene


async def main() -> None:
    configure_logging(logging.INFO)
    scene = build_model()
    finder = create_element_finder(scene, scene, scene, SearchConfig(batch_size=4))

    outcome = await finder.search_and_highlight("beam-3")
    print(f"By name: {outcome.matches.to_list()} via {outcome.strategy}")

    ids = await finder.find_elements_by_property("PTP_Assembly_Name", "L1-EAST")
    print(f"By property: {ids}")

    resolution = await finder.resolve_path_detailed("Generic Models/FloorSystem/LSL")
    print(f"By path: {resolution.matches.to_list()} (complete={resolution.complete})")

    for node_id in resolution.matches:
        print(f"  {await finder.get_element_path(node_id)}")


if __name__ == "__main__":
    asyncio.run(main())
