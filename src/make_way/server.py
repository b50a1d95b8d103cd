"""Make Way MCP server — tools for opening space next to a node in a scene."""

from __future__ import annotations

import json
import logging
import uuid

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import load_settings
from .exceptions import InputError
from .notifications import RecordingNotifier
from .operation import STRATEGIES, make_way, validate_amount
from .parser import parse_yaml, scene_to_yaml
from .renderer import SceneRenderer
from .suggestion import suggest_gap


# --- Constants ---
SETTINGS = load_settings()
OUTPUT_DIR = SETTINGS.output_dir
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

server = Server("make-way")


def _ensure_output_dir():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


def _error(message: str, **extra) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps({"status": "error", "message": message, **extra}))]


SCENE_DESCRIPTION = (
    "YAML string defining the scene. Simplified format example:\n"
    "selection: card-a\n"
    "nodes:\n"
    "  - id: card-a\n"
    "    width: 100\n"
    "    height: 80\n"
    "  - id: card-b\n"
    "    x: 150\n"
    "    width: 50\n"
    "    height: 80\n"
    "\n"
    "Full format: 'scene:' with 'pages:', each page holding nested 'children'.\n"
    "Node types: shape, frame, section"
)


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="make_way",
            description=(
                "Open horizontal space immediately to the right of the selected node. "
                "Every element that would overlap the new space is pushed right, and "
                "sections that no longer contain their content grow. "
                "Returns a JSON summary and the updated YAML scene."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_scene": {"type": "string", "description": SCENE_DESCRIPTION},
                    "selection": {
                        "type": "string",
                        "description": "Id of the node to make way for (overrides the scene's selection).",
                    },
                    "pixels": {
                        "type": "number",
                        "description": (
                            "Space to create in pixels. Must be a finite number > 0. "
                            "Default: selection width + its current gap to the right."
                        ),
                    },
                    "strategy": {
                        "type": "string",
                        "enum": sorted(STRATEGIES),
                        "description": (
                            "'ripple' (local sweep, grows sections only when needed, default) "
                            "or 'traversal' (whole-page pass with proximity filter)."
                        ),
                        "default": SETTINGS.strategy,
                    },
                    "render": {
                        "type": "boolean",
                        "description": "Also render a PNG preview of the result. Default: false.",
                        "default": False,
                    },
                },
                "required": ["yaml_scene"],
            },
        ),
        Tool(
            name="suggest_gap",
            description=(
                "Suggest how much space to create for the selected node: its width "
                "plus the gap to its nearest right-hand neighbour."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_scene": {"type": "string", "description": SCENE_DESCRIPTION},
                    "selection": {"type": "string", "description": "Id of the selected node."},
                },
                "required": ["yaml_scene"],
            },
        ),
        Tool(
            name="render_scene",
            description="Render the current page of a YAML scene to PNG. Returns the file path.",
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_scene": {"type": "string", "description": SCENE_DESCRIPTION},
                    "scale": {
                        "type": "number",
                        "description": "Render scale factor (default 1.0)",
                        "default": 1.0,
                    },
                    "filename": {
                        "type": "string",
                        "description": "Output filename (without extension). Default: auto-generated UUID.",
                    },
                },
                "required": ["yaml_scene"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    if name == "make_way":
        return await _make_way(arguments)
    elif name == "suggest_gap":
        return await _suggest_gap(arguments)
    elif name == "render_scene":
        return await _render_scene(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def _make_way(args: dict) -> list[TextContent]:
    """Apply a make-way edit to a YAML scene."""
    try:
        graph = parse_yaml(args["yaml_scene"])
    except Exception as e:
        return [TextContent(type="text", text=f"Failed to parse YAML scene: {e}")]

    if args.get("selection"):
        graph.select(args["selection"])

    pixels = args.get("pixels")
    if pixels is None:
        suggestion = suggest_gap(graph, SETTINGS)
        if suggestion is None:
            return _error("Please select exactly one top level item", error_kind="selection")
        pixels = suggestion.value

    try:
        amount = validate_amount(pixels)
    except InputError as e:
        return _error(str(e), error_kind=e.kind)

    strategy = args.get("strategy") or SETTINGS.strategy
    if strategy not in STRATEGIES:
        return _error(f"Unknown strategy: {strategy}")

    notifier = RecordingNotifier()
    result = make_way(graph, amount, strategy=strategy, notifier=notifier, settings=SETTINGS)

    payload = {"status": "success" if result.success else "error", **result.model_dump()}
    payload["notifications"] = notifier.messages
    payload["yaml"] = scene_to_yaml(graph)

    if result.success and args.get("render"):
        _ensure_output_dir()
        output_path = str(OUTPUT_DIR / f"make-way-{str(uuid.uuid4())[:8]}.png")
        try:
            SceneRenderer().render(graph, output_path=output_path)
            payload["png_path"] = output_path
        except Exception as e:
            logger.error(f"Render error: {e}")
            payload["warnings"].append(f"Rendering failed: {e}")

    return [TextContent(type="text", text=json.dumps(payload))]


async def _suggest_gap(args: dict) -> list[TextContent]:
    """Suggest a gap for the scene's selection."""
    try:
        graph = parse_yaml(args["yaml_scene"])
    except Exception as e:
        return [TextContent(type="text", text=f"Failed to parse YAML scene: {e}")]

    if args.get("selection"):
        graph.select(args["selection"])

    suggestion = suggest_gap(graph, SETTINGS)
    if suggestion is None:
        return _error("Please select a top level item", error_kind="selection")

    return [TextContent(
        type="text",
        text=json.dumps({
            "status": "success",
            "value": suggestion.value,
            "width": suggestion.width,
            "gap": suggestion.gap,
            "label": suggestion.label,
        }),
    )]


async def _render_scene(args: dict) -> list[TextContent]:
    """Render a YAML scene to PNG."""
    _ensure_output_dir()

    try:
        graph = parse_yaml(args["yaml_scene"])
    except Exception as e:
        return [TextContent(type="text", text=f"Failed to parse YAML scene: {e}")]

    scale = args.get("scale", 1.0)
    filename = args.get("filename", str(uuid.uuid4())[:8])
    output_path = str(OUTPUT_DIR / f"{filename}.png")

    try:
        SceneRenderer(scale=scale).render(graph, output_path=output_path)
    except Exception as e:
        return [TextContent(type="text", text=f"Rendering failed: {e}")]

    return [TextContent(
        type="text",
        text=json.dumps({
            "status": "success",
            "path": output_path,
            "title": graph.title,
            "nodes": len(graph.all_nodes()),
        }),
    )]


def main():
    """Entry point for the MCP server."""
    import asyncio

    logging.basicConfig(level=SETTINGS.log_level, format=LOG_FORMAT)
    logger.info(f"Make Way MCP server starting (strategy: {SETTINGS.strategy})")
    asyncio.run(_run())


async def _run():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
