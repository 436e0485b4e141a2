"""
Tool registry: named operations, each with an input schema and an executor.

Each tool module owns a ToolSet and declares its operations with
@toolset.tool(...). The executor's docstring IS the tool description, so the
MCP tool list, the CLI and the scrivener://tools/* resources never drift apart.

Registration happens once at startup (tools.build_registry()); the registry is
read-only afterwards.
"""

import inspect
import string
from dataclasses import dataclass, field
from typing import Annotated, Any, Awaitable, Callable, Generic, Iterator, TypeVar

from googleapiclient.discovery import Resource
from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

from adapters.services import ServiceName
from logging_config import ToolLogger, logger
from models import ClientNotInitializedError

__all__ = [
    "ToolInput",
    "NonEmptyStr",
    "HexColor",
    "ToolContext",
    "ToolDefinition",
    "ToolSet",
    "ToolRegistry",
]


# Identifiers and titles: trimmed, at least one character
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# "#RRGGBB" or "#RGB", hash optional
HexColor = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"),
]


class ToolInput(BaseModel):
    """
    Base for every tool's input schema.

    Agents send camelCase (documentId, pageSize); snake_case is accepted too.
    Unknown fields are rejected rather than silently dropped.
    Scalar fields are declared StrictInt/StrictFloat/StrictBool so "10" or
    true never pass for a number.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


P = TypeVar("P", bound=ToolInput)

Executor = Callable[[P, "ToolContext"], Awaitable[str]]


@dataclass
class ToolContext:
    """What an executor gets besides its validated input."""
    services: dict[ServiceName, Resource]
    log: ToolLogger

    def service(self, name: ServiceName) -> Resource:
        handle = self.services.get(name)
        if handle is None:
            raise ClientNotInitializedError(
                f"{name.label} client was not resolved for this tool. "
                "Declare it in the tool's services."
            )
        return handle

    @property
    def docs(self) -> Resource:
        return self.service(ServiceName.DOCS)

    @property
    def sheets(self) -> Resource:
        return self.service(ServiceName.SHEETS)

    @property
    def drive(self) -> Resource:
        return self.service(ServiceName.DRIVE)

    @property
    def script(self) -> Resource:
        return self.service(ServiceName.SCRIPT)


@dataclass(frozen=True)
class ToolDefinition(Generic[P]):
    """
    One registered operation.

    `failure` is a message template formatted with the validated input's
    field names (snake_case); the dispatcher appends the remote reason.
    """
    name: str
    description: str
    params: type[P]
    execute: Executor[P]
    services: tuple[ServiceName, ...]
    failure: str
    category: str = ""

    def input_schema(self) -> dict[str, Any]:
        """JSON schema as advertised to agents (camelCase property names)."""
        schema = self.params.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return schema

    def describe_failure(self, params: P) -> str:
        return self.failure.format(**params.model_dump())

    @property
    def summary(self) -> str:
        """First line of the description."""
        return self.description.split("\n", 1)[0]


def _template_fields(template: str) -> set[str]:
    return {
        name.split(".")[0].split("[")[0]
        for _, name, _, _ in string.Formatter().parse(template)
        if name
    }


@dataclass
class ToolSet:
    """Collects the tools of one category, in declaration order."""
    category: str
    definitions: list[ToolDefinition[Any]] = field(default_factory=list)

    def tool(
        self,
        name: str,
        params: type[P],
        *,
        services: tuple[ServiceName, ...],
        failure: str,
    ) -> Callable[[Executor[P]], ToolDefinition[P]]:
        def decorator(func: Executor[P]) -> ToolDefinition[P]:
            definition = ToolDefinition(
                name=name,
                description=inspect.cleandoc(func.__doc__ or name),
                params=params,
                execute=func,
                services=services,
                failure=failure,
                category=self.category,
            )
            self.definitions.append(definition)
            return definition
        return decorator

    def __iter__(self) -> Iterator[ToolDefinition[Any]]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)


class ToolRegistry:
    """Registry for tools. Lookup by name, listing by category."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition[Any]] = {}

    def register(self, definition: ToolDefinition[Any]) -> None:
        """
        Register a tool.

        Schema and executor are checked together here so a mismatch fails at
        startup, not on the first call.

        Raises:
            ValueError: duplicate name, or a definition that can't be dispatched
        """
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        if not (isinstance(definition.params, type) and issubclass(definition.params, ToolInput)):
            raise ValueError(f"{definition.name}: params must be a ToolInput model")
        if not inspect.iscoroutinefunction(definition.execute):
            raise ValueError(f"{definition.name}: execute must be an async function")
        if not definition.services:
            raise ValueError(f"{definition.name}: declares no services")

        unknown = _template_fields(definition.failure) - set(definition.params.model_fields)
        if unknown:
            raise ValueError(
                f"{definition.name}: failure message references unknown fields {sorted(unknown)}"
            )

        self._tools[definition.name] = definition
        logger.debug(f"Tool registered: {definition.name}")

    def register_all(self, definitions: Any) -> None:
        for definition in definitions:
            self.register(definition)

    def get(self, name: str) -> ToolDefinition[Any] | None:
        """Get a tool by name. Returns None if not found."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[ToolDefinition[Any]]:
        return list(self._tools.values())

    def categories(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for definition in self._tools.values():
            grouped.setdefault(definition.category, []).append(definition.name)
        return grouped

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
