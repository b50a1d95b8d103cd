"""YAML scene parser for Make Way.

Supports two formats:
1. Full scene YAML (document with pages, nested nodes)
2. Simplified format (flat list of top-level nodes on a single page)
"""

from __future__ import annotations
from pathlib import Path

import yaml

from .models import PAGE, ROOT_TYPES, SHAPE, SceneGraph, SceneNode

# Size given to geometric nodes that do not declare one.
DEFAULT_NODE_SIZE = 100.0


def parse_yaml(yaml_str: str) -> SceneGraph:
    """Parse a YAML string into a SceneGraph."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError("Scene YAML must be a mapping")

    # Check if it's a full-format scene
    if "scene" in data:
        graph = _parse_full_format(data["scene"])
    else:
        graph = _parse_simple_format(data)

    _check_unique_ids(graph)
    return graph


def parse_file(path: str) -> SceneGraph:
    """Parse a YAML file into a SceneGraph."""
    content = Path(path).read_text()
    return parse_yaml(content)


def _parse_selection(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _parse_full_format(data: dict) -> SceneGraph:
    """Parse the full scene format (pages with nested nodes).

    Example:
        scene:
          title: Board
          selection: [card-a]
          pages:
            - id: page-1
              children:
                - id: lane
                  type: section
                  width: 600
                  height: 300
                  children:
                    - id: card-a
                      x: 20
                      y: 40
    """
    graph = SceneGraph(title=data.get("title", "Untitled Scene"))
    # Drop the default page; the recipe declares its own.
    graph.document.children = []

    for index, page_data in enumerate(data.get("pages") or []):
        page = SceneNode(
            id=page_data.get("id", f"page-{index + 1}"),
            type=PAGE,
            name=page_data.get("name", ""),
        )
        for child_data in page_data.get("children") or []:
            page.append_child(_parse_node(child_data))
        graph.document.append_child(page)

    if not graph.pages():
        graph.document.append_child(SceneNode(id="page-1", type=PAGE, name="Page 1"))

    graph.current_page_id = data.get("current_page") or graph.pages()[0].id
    graph.selection = _parse_selection(data.get("selection"))
    return graph


def _parse_simple_format(data: dict) -> SceneGraph:
    """Parse simplified format.

    Example:
        title: My Board
        selection: a
        nodes:
          - id: a
            width: 100
          - id: b
            x: 150
            width: 50
    """
    graph = SceneGraph(
        title=data.get("title", "Untitled Scene"),
        selection=_parse_selection(data.get("selection")),
    )
    page = graph.current_page
    for node_data in data.get("nodes") or []:
        page.append_child(_parse_node(node_data))
    return graph


def _parse_node(data: dict) -> SceneNode:
    """Parse a single node (and its children) from YAML data."""
    if data.get("id") is None:
        raise ValueError(f"Node is missing an id: {data!r}")
    node_type = str(data.get("type", SHAPE)).lower()
    if node_type in ROOT_TYPES:
        raise ValueError(f"Node {data.get('id')!r}: {node_type} nodes cannot be nested")

    node = SceneNode(
        id=str(data["id"]),
        name=data.get("name", ""),
        type=node_type,
        x=float(data.get("x", 0)),
        y=float(data.get("y", 0)),
        width=float(data.get("width", DEFAULT_NODE_SIZE)),
        height=float(data.get("height", DEFAULT_NODE_SIZE)),
        locked=bool(data.get("locked", False)),
        visible=bool(data.get("visible", True)),
        opacity=float(data.get("opacity", 1.0)),
        fill=data.get("fill"),
        max_width=float(data["max_width"]) if data.get("max_width") is not None else None,
    )
    for child_data in data.get("children") or []:
        node.append_child(_parse_node(child_data))
    return node


def _check_unique_ids(graph: SceneGraph) -> None:
    seen: set[str] = set()
    for node in graph.document.walk():
        if node.id in seen:
            raise ValueError(f"Duplicate node id: {node.id!r}")
        seen.add(node.id)


def _node_to_dict(node: SceneNode) -> dict:
    data = {
        "id": node.id,
        "type": node.type,
        "x": node.x,
        "y": node.y,
    }
    if node.name:
        data["name"] = node.name
    if node.width is not None:
        data["width"] = node.width
    if node.height is not None:
        data["height"] = node.height
    if node.locked:
        data["locked"] = True
    if not node.visible:
        data["visible"] = False
    if node.opacity != 1.0:
        data["opacity"] = node.opacity
    if node.fill:
        data["fill"] = node.fill
    if node.max_width is not None:
        data["max_width"] = node.max_width
    if node.children:
        data["children"] = [_node_to_dict(child) for child in node.children]
    return data


def scene_to_yaml(graph: SceneGraph) -> str:
    """Serialize a SceneGraph back to the full YAML format."""
    data = {
        "scene": {
            "title": graph.title,
            "current_page": graph.current_page_id,
            "selection": list(graph.selection),
            "pages": [],
        }
    }

    for page in graph.pages():
        page_data = {"id": page.id, "children": []}
        if page.name:
            page_data["name"] = page.name
        page_data["children"] = [_node_to_dict(child) for child in page.children]
        data["scene"]["pages"].append(page_data)

    return yaml.dump(data, default_flow_style=False, sort_keys=False)
