"""Tests for the MCP tool handlers."""

import asyncio
import json

import pytest

from make_way import server
from make_way.parser import parse_yaml


def _call(name, arguments):
    result = asyncio.run(server.call_tool(name, arguments))
    return result[0].text


def _call_json(name, arguments):
    return json.loads(_call(name, arguments))


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "OUTPUT_DIR", tmp_path)
    return tmp_path


class TestListTools:
    def test_tool_names(self):
        tools = asyncio.run(server.list_tools())
        assert [t.name for t in tools] == ["make_way", "suggest_gap", "render_scene"]


class TestMakeWayTool:
    """Tests for the make_way tool."""

    def test_pushes_neighbour(self, simple_yaml):
        payload = _call_json("make_way", {"yaml_scene": simple_yaml, "pixels": 80})

        assert payload["status"] == "success"
        assert payload["moved"] == ["b"]
        assert payload["amount"] == 80
        assert "Pushing items on the right..." in payload["notifications"]
        assert parse_yaml(payload["yaml"]).get_node("b").x == 230

    def test_suggested_amount_when_missing(self, simple_yaml):
        payload = _call_json("make_way", {"yaml_scene": simple_yaml})

        assert payload["status"] == "success"
        assert payload["amount"] == 150
        assert parse_yaml(payload["yaml"]).get_node("b").x == 300

    def test_selection_override(self, simple_yaml):
        payload = _call_json("make_way", {"yaml_scene": simple_yaml, "selection": "b", "pixels": 10})
        assert payload["selected_id"] == "b"
        assert payload["moved"] == []

    def test_invalid_pixels(self, simple_yaml):
        payload = _call_json("make_way", {"yaml_scene": simple_yaml, "pixels": -5})
        assert payload["status"] == "error"
        assert payload["error_kind"] == "input"

    def test_unknown_selection(self, simple_yaml):
        payload = _call_json("make_way", {"yaml_scene": simple_yaml, "selection": "nope"})
        assert payload["status"] == "error"
        assert payload["error_kind"] == "selection"

    def test_unknown_strategy(self, simple_yaml):
        payload = _call_json(
            "make_way", {"yaml_scene": simple_yaml, "pixels": 10, "strategy": "teleport"},
        )
        assert payload["status"] == "error"

    def test_traversal_strategy(self, full_yaml):
        payload = _call_json(
            "make_way", {"yaml_scene": full_yaml, "pixels": 80, "strategy": "traversal"},
        )
        assert payload["status"] == "success"
        assert payload["strategy"] == "traversal"
        assert "lane" in payload["resized"]

    def test_render(self, simple_yaml, output_dir):
        payload = _call_json(
            "make_way", {"yaml_scene": simple_yaml, "pixels": 80, "render": True},
        )
        assert payload["png_path"].startswith(str(output_dir))

    def test_bad_yaml(self):
        assert _call("make_way", {"yaml_scene": ""}).startswith("Failed to parse YAML scene")


class TestOtherTools:
    """Tests for suggest_gap and render_scene."""

    def test_suggest_gap(self, simple_yaml):
        payload = _call_json("suggest_gap", {"yaml_scene": simple_yaml})
        assert payload["value"] == 150
        assert payload["label"] == "150px (100px + 50px for gap)"

    def test_suggest_gap_without_selection(self, simple_yaml):
        payload = _call_json("suggest_gap", {"yaml_scene": simple_yaml, "selection": "missing"})
        assert payload["status"] == "error"

    def test_render_scene(self, full_yaml, output_dir):
        payload = _call_json("render_scene", {"yaml_scene": full_yaml, "filename": "preview"})

        assert payload["path"] == str(output_dir / "preview.png")
        assert (output_dir / "preview.png").exists()
        assert payload["nodes"] == 5

    def test_unknown_tool(self):
        assert _call("explode", {}) == "Unknown tool: explode"
