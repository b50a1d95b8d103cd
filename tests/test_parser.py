"""Tests for the YAML scene parser."""

import pytest

from make_way.models import PAGE, SECTION
from make_way.parser import parse_file, parse_yaml, scene_to_yaml


class TestSimpleFormat:
    """Tests for the flat 'nodes:' format."""

    def test_nodes_on_single_page(self, simple_yaml):
        graph = parse_yaml(simple_yaml)

        assert graph.title == "Board"
        assert graph.selection == ["a"]
        page = graph.current_page
        assert page.type == PAGE
        assert [n.id for n in page.children] == ["a", "b"]
        b = graph.get_node("b")
        assert (b.x, b.width, b.height) == (150, 50, 80)
        assert b.parent is page

    def test_scalar_selection(self):
        graph = parse_yaml("selection: 5\nnodes:\n  - id: 5\n")
        assert graph.selection == ["5"]
        assert [n.id for n in graph.selected_nodes()] == ["5"]

    def test_default_size(self):
        graph = parse_yaml("nodes:\n  - id: a\n")
        a = graph.get_node("a")
        assert (a.x, a.y, a.width, a.height) == (0, 0, 100, 100)
        assert graph.selection == []


class TestFullFormat:
    """Tests for the 'scene:' format with pages and nested children."""

    def test_nested_parents(self, full_yaml):
        graph = parse_yaml(full_yaml)

        assert graph.title == "Lanes"
        assert graph.current_page_id == "page-1"
        assert [p.id for p in graph.pages()] == ["page-1"]
        lane = graph.get_node("lane")
        assert lane.type == SECTION
        assert graph.get_node("card-a").parent is lane
        assert graph.get_node("outside").parent is graph.current_page
        assert graph.selection == ["card-a"]

    def test_multiple_pages(self):
        graph = parse_yaml(
            "scene:\n"
            "  current_page: p2\n"
            "  pages:\n"
            "    - id: p1\n"
            "    - id: p2\n"
            "      children:\n"
            "        - id: a\n"
        )
        assert [p.id for p in graph.pages()] == ["p1", "p2"]
        assert graph.current_page.id == "p2"
        assert graph.get_node("a").parent.id == "p2"

    def test_round_trip(self, full_yaml):
        graph = parse_yaml(full_yaml)
        graph.get_node("card-b").translate(30)

        again = parse_yaml(scene_to_yaml(graph))

        assert again.get_node("card-b").x == 180
        assert again.get_node("card-b").parent.id == "lane"
        assert again.selection == ["card-a"]


class TestErrors:
    """Tests for rejected input."""

    def test_empty_input(self):
        with pytest.raises(ValueError, match="Empty"):
            parse_yaml("")

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            parse_yaml("- a\n- b\n")

    def test_duplicate_ids(self):
        with pytest.raises(ValueError, match="Duplicate node id"):
            parse_yaml("nodes:\n  - id: a\n  - id: a\n")

    def test_nested_page(self):
        with pytest.raises(ValueError, match="cannot be nested"):
            parse_yaml("nodes:\n  - id: p\n    type: page\n")

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            parse_yaml("nodes:\n  - id: a\n    type: blob\n")

    def test_missing_id(self):
        with pytest.raises(ValueError, match="missing an id"):
            parse_yaml("nodes:\n  - x: 10\n")


def test_parse_file(tmp_path, simple_yaml):
    path = tmp_path / "board.yaml"
    path.write_text(simple_yaml)
    assert parse_file(str(path)).get_node("a").width == 100
