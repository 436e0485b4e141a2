"""
Tool Documentation Resources

Generates scrivener://tools/* resources from the registered tool definitions.
Single source of truth: the executor docstring and the input model ARE the
documentation, so the docs cannot drift from what the dispatcher validates.
"""

from typing import Any

from logging_config import logger
from registry import ToolDefinition, ToolRegistry

URI_PREFIX = "scrivener://tools/"


def _type_label(prop: dict[str, Any], defs: dict[str, Any]) -> str:
    """Short human label for a JSON-schema property."""
    if "$ref" in prop:
        return prop["$ref"].rsplit("/", 1)[-1]
    if "enum" in prop:
        return " | ".join(repr(v) for v in prop["enum"])
    if "const" in prop:
        return repr(prop["const"])
    if "anyOf" in prop:
        labels = [_type_label(p, defs) for p in prop["anyOf"] if p.get("type") != "null"]
        return " | ".join(labels) or "null"
    if prop.get("type") == "array":
        return f"list[{_type_label(prop.get('items', {}), defs)}]"
    return prop.get("type", "any")


def _bounds(prop: dict[str, Any]) -> str:
    parts = []
    for key, label in (
        ("minimum", ">="),
        ("maximum", "<="),
        ("exclusiveMinimum", ">"),
        ("exclusiveMaximum", "<"),
        ("minLength", "min length"),
        ("minItems", "min items"),
    ):
        if key in prop:
            parts.append(f"{label} {prop[key]}")
    return ", ".join(parts)


def tool_to_markdown(definition: ToolDefinition[Any]) -> str:
    """
    Render one tool as markdown.

    Title, category, the executor docstring, then a parameter table built
    from the advertised (camelCase) JSON schema.
    """
    schema = definition.input_schema()
    properties: dict[str, Any] = schema.get("properties", {})
    required = set(schema.get("required", []))
    defs = schema.get("$defs", {})

    lines = [
        f"# {definition.name}()",
        "",
        f"*{definition.category}*",
        "",
        definition.description,
        "",
        "## Parameters",
        "",
    ]

    if not properties:
        lines.append("None.")
    else:
        lines.append("| Name | Type | Required | Default | Notes |")
        lines.append("|------|------|----------|---------|-------|")
        for name, prop in properties.items():
            default = repr(prop["default"]) if "default" in prop else ""
            notes = " ".join(
                part for part in (prop.get("description", ""), _bounds(prop)) if part
            )
            lines.append(
                f"| `{name}` | {_type_label(prop, defs)} | "
                f"{'yes' if name in required else 'no'} | {default} | {notes} |"
            )

    return "\n".join(lines) + "\n"


class ToolResourceRegistry:
    """
    Registry for auto-generated tool documentation resources.

    Rendering is lazy and cached per URI.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry
        self._cache: dict[str, dict[str, str]] = {}

        empty = [d.name for d in registry.list_tools() if d.description == d.name]
        if empty:
            logger.warning(
                f"Tools with empty docstrings ({len(empty)}): {', '.join(sorted(empty))}. "
                f"Their {URI_PREFIX}* pages will carry the parameter table only."
            )

    def get_tool_names(self) -> set[str]:
        return set(self._registry.names())

    def get_resource(self, uri: str) -> dict[str, str]:
        """
        Get resource by URI.

        Args:
            uri: Resource URI (e.g., "scrivener://tools/list_script_projects")

        Returns:
            Resource dict with uri, mimeType, text

        Raises:
            KeyError: If tool not found
        """
        if uri in self._cache:
            return self._cache[uri]

        if not uri.startswith(URI_PREFIX):
            raise KeyError(f"Not a tool resource: {uri}")

        tool_name = uri[len(URI_PREFIX):]
        definition = self._registry.get(tool_name)
        if definition is None:
            raise KeyError(f"Tool not found: {tool_name}")

        resource = {
            "uri": uri,
            "mimeType": "text/markdown",
            "text": tool_to_markdown(definition),
        }
        self._cache[uri] = resource
        return resource

    def list_resources(self) -> list[dict[str, str]]:
        """List all available tool resources, sorted by name."""
        return [
            {
                "uri": f"{URI_PREFIX}{definition.name}",
                "name": definition.name,
                "description": definition.summary[:100],
            }
            for definition in sorted(self._registry.list_tools(), key=lambda d: d.name)
        ]
