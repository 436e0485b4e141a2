"""
Dispatcher: the single boundary every tool invocation crosses.

    lookup → validate → resolve services → execute → wrap

Leaf operations assume validated input and simply raise on failure; this is
the one place failures become a ToolFailure. Two things are NOT wrapped:
an unregistered name (UnknownToolError) and a session that could not be
acquired (InitializationError / ClientNotInitializedError). Both propagate
so the caller can tell them apart from an ordinary failed call.
"""

from typing import Any

from pydantic import ValidationError

from adapters.services import SessionManager
from errors import classify_error, describe_error
from logging_config import ToolLogger
from models import (
    ErrorKind,
    ToolError,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    UnknownToolError,
)
from registry import ToolContext, ToolDefinition, ToolRegistry


def format_validation_error(tool_name: str, error: ValidationError) -> str:
    """
    One line per offending field, named as the caller sent it.

    Example:
        Invalid arguments for list_script_projects:
        - pageSize: Input should be less than or equal to 50
    """
    lines = [f"Invalid arguments for {tool_name}:"]
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "(input)"
        lines.append(f"- {loc}: {err.get('msg', 'invalid value')}")
    return "\n".join(lines)


class Dispatcher:
    """Routes tool calls by name through validation, session resolution and execution."""

    def __init__(self, registry: ToolRegistry, sessions: SessionManager) -> None:
        self.registry = registry
        self.sessions = sessions

    def lookup(self, name: str) -> ToolDefinition[Any]:
        definition = self.registry.get(name)
        if definition is None:
            raise UnknownToolError(
                f"Unknown tool: {name}",
                details={"available": self.registry.names()},
            )
        return definition

    async def dispatch(
        self,
        name: str,
        raw_input: Any,
        log: ToolLogger | None = None,
    ) -> ToolResult:
        """
        Invoke one tool.

        Returns ToolSuccess with the tool's text unchanged, or ToolFailure for
        invalid input and execution failures.

        Raises:
            UnknownToolError: no tool registered under `name`
            InitializationError: the session could not be acquired
            ClientNotInitializedError: a required handle is missing after init
        """
        definition = self.lookup(name)
        log = log or ToolLogger(name)

        try:
            params = definition.params.model_validate(
                {} if raw_input is None else raw_input
            )
        except ValidationError as e:
            message = format_validation_error(name, e)
            log.warning(message.replace("\n", " "))
            return ToolFailure(ErrorKind.INVALID_INPUT, message)

        services = {
            service: await self.sessions.get_service(service)
            for service in definition.services
        }
        ctx = ToolContext(services=services, log=log)

        try:
            text = await definition.execute(params, ctx)
        except ToolError as e:
            log.error(e.message)
            return ToolFailure(e.kind, e.message)
        except Exception as e:
            kind = classify_error(e)
            message = f"{definition.describe_failure(params)}: {describe_error(e)}"
            log.error(f"{message} ({kind.value})")
            if kind is ErrorKind.AUTH_EXPIRED:
                # Revoked or unrefreshable token: next call starts a new session
                self.sessions.reset()
            return ToolFailure(kind, message)

        return ToolSuccess(text)
