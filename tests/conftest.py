"""Shared fixtures: small scene graphs and a tuned search configuration."""

import pytest

from elementfinder.config import SearchConfig
from elementfinder.core.strategies import SearchContext
from elementfinder.scene import SceneGraph


@pytest.fixture
def config():
    """Configuration with short timeouts so failing tests do not hang."""
    return SearchConfig(oracle_timeout=2.0)


@pytest.fixture
def beam_scene():
    """root -> {Beam-1, Beam-2}"""
    scene = SceneGraph()
    root = scene.add_root("Model", dbid=1)
    scene.add_node(root, "Beam-1", dbid=2, category="Structural Framing")
    scene.add_node(root, "Beam-2", dbid=3, category="Structural Framing")
    return scene


@pytest.fixture
def building_scene():
    """A three-level model with ambiguous names at several depths.

    Model(1)
      Generic Models(2)
        FloorSystem_1(3)
          Slab(6)
        FloorSystem_2(4)
      Levels(5)
        Level 1(7)
          Door A(9)
        Level 2(8)
          Door B(10)
      Doors(11)
        Door Schedule(12)
    """
    scene = SceneGraph()
    root = scene.add_root("Model", dbid=1)
    generic = scene.add_node(root, "Generic Models", dbid=2)
    fs1 = scene.add_node(generic, "FloorSystem_1", dbid=3, external_id="fs-1")
    scene.add_node(generic, "FloorSystem_2", dbid=4, external_id="fs-2")
    levels = scene.add_node(root, "Levels", dbid=5)
    scene.add_node(fs1, "Slab", dbid=6, properties={"Mark": "S-01"})
    level1 = scene.add_node(levels, "Level 1", dbid=7)
    level2 = scene.add_node(levels, "Level 2", dbid=8)
    scene.add_node(level1, "Door A", dbid=9, properties={"Fire Rating": "60 min"})
    scene.add_node(level2, "Door B", dbid=10, properties={"Fire Rating": "30 min"})
    doors = scene.add_node(root, "Doors", dbid=11)
    scene.add_node(doors, "Door Schedule", dbid=12)
    return scene


@pytest.fixture
def context_for(config):
    """Factory building a SearchContext over a scene."""

    def build(scene, **overrides):
        cfg = config.model_copy(update=overrides) if overrides else config
        return SearchContext(scene, scene, cfg)

    return build


@pytest.fixture
def wide_scene():
    """Factory: root -> N children, each with M leaves."""

    def build(children: int, leaves_per_child: int = 0, name: str = "Item", **kwargs):
        scene = SceneGraph(**kwargs)
        root = scene.add_root("Model")
        for i in range(children):
            child = scene.add_node(root, f"{name} {i}")
            for j in range(leaves_per_child):
                scene.add_node(child, f"{name} {i}.{j}")
        return scene

    return build
