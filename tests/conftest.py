"""Pytest configuration and shared fixtures for Make Way tests."""

import pytest

from make_way.models import SECTION, SHAPE, SceneGraph, SceneNode


@pytest.fixture
def shape():
    """Factory for leaf nodes."""
    def _shape(node_id, x=0.0, y=0.0, width=100.0, height=100.0, **fields):
        return SceneNode(id=node_id, type=SHAPE, x=x, y=y, width=width, height=height, **fields)
    return _shape


@pytest.fixture
def section():
    """Factory for section containers."""
    def _section(node_id, x=0.0, y=0.0, width=300.0, height=200.0, children=(), **fields):
        return SceneNode(
            id=node_id,
            type=SECTION,
            x=x,
            y=y,
            width=width,
            height=height,
            children=list(children),
            **fields,
        )
    return _section


@pytest.fixture
def scene():
    """Factory placing nodes on the page of a fresh SceneGraph."""
    def _scene(*nodes, selection=None):
        graph = SceneGraph(title="Test Scene")
        for node in nodes:
            graph.current_page.append_child(node)
        if selection:
            graph.select(selection)
        return graph
    return _scene


@pytest.fixture
def section_scene(shape, section, scene):
    """Scenario A/B layout: 'a' (x=0, w=100) and 'b' (x=150, w=50) in section 's'."""
    def _build(section_width=300.0):
        a = shape("a", x=0, y=0, width=100, height=100)
        b = shape("b", x=150, y=0, width=50, height=100)
        s = section("s", x=0, y=0, width=section_width, height=200, children=[a, b])
        return scene(s, selection="a")
    return _build


SIMPLE_YAML = """
title: Board
selection: a
nodes:
  - id: a
    width: 100
    height: 80
  - id: b
    x: 150
    width: 50
    height: 80
"""

FULL_YAML = """
scene:
  title: Lanes
  selection: [card-a]
  pages:
    - id: page-1
      name: Page 1
      children:
        - id: lane
          type: section
          name: Lane
          x: 0
          y: 0
          width: 250
          height: 200
          children:
            - id: card-a
              x: 0
              y: 0
              width: 100
              height: 100
            - id: card-b
              x: 150
              y: 0
              width: 50
              height: 100
        - id: outside
          x: 260
          y: 0
          width: 80
          height: 100
"""


@pytest.fixture
def simple_yaml():
    return SIMPLE_YAML


@pytest.fixture
def full_yaml():
    return FULL_YAML
