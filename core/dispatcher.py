"""Tool registry and call dispatch.

Tool modules live in the `tools` package and expose `get_tools()`, returning
a mapping of tool name to ``{"func", "input_model", "title", "description"}``.
`func` is an async callable taking the `SessionContext` and the validated
input model instance.
"""
from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional
import logging
import pkgutil

from mcp import types
from pydantic import BaseModel, ValidationError

from core.errors import McpError, internal_error, invalid_params, method_not_found
from core.session import SessionContext
from utils.response_utils import to_text

logger = logging.getLogger(__name__)

TOOLS_PACKAGE = "tools"

Handler = Callable[[SessionContext, BaseModel], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    func: Handler
    input_model: type[BaseModel]
    title: Optional[str] = None
    description: Optional[str] = None

    def to_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(),
        )


def discover_tool_modules(package: str = TOOLS_PACKAGE) -> list:
    """Import every public module of `package` that defines `get_tools`."""
    pkg = import_module(package)
    tools_path = Path(pkg.__file__).resolve().parent
    modules = []
    for _finder, name, _ispkg in pkgutil.iter_modules([str(tools_path)]):
        if name.startswith("_"):
            continue
        module_name = f"{package}.{name}"
        mod = import_module(module_name)
        if hasattr(mod, "get_tools"):
            logger.info(f"Imported tools module: {module_name}")
            modules.append(mod)
    return modules


def load_descriptors(modules: Iterable) -> list[ToolDescriptor]:
    descriptors: list[ToolDescriptor] = []
    for mod in modules:
        for tool_name, meta in mod.get_tools().items():
            descriptors.append(
                ToolDescriptor(
                    name=tool_name,
                    func=meta["func"],
                    input_model=meta["input_model"],
                    title=meta.get("title"),
                    description=meta.get("description"),
                )
            )
    return descriptors


class ToolDispatcher:
    def __init__(self, context: SessionContext, descriptors: Optional[Iterable[ToolDescriptor]] = None):
        self.context = context
        if descriptors is None:
            descriptors = load_descriptors(discover_tool_modules())
        self._tools: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            self._tools[descriptor.name] = descriptor

    @property
    def descriptors(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def list_tools(self) -> list[types.Tool]:
        return [descriptor.to_tool() for descriptor in self._tools.values()]

    async def call(self, name: str, arguments: Optional[dict[str, Any]] = None) -> Any:
        """Validate `arguments` for tool `name` and run its handler.

        Raises McpError: METHOD_NOT_FOUND for an unknown name, INVALID_PARAMS
        when the arguments do not match the tool's input model, and whatever
        the handler raised otherwise (non-protocol exceptions become
        INTERNAL_ERROR).
        """
        descriptor = self._tools.get(name)
        if descriptor is None:
            raise method_not_found(f"Unknown tool: {name}")

        try:
            params = descriptor.input_model.model_validate(arguments or {})
        except ValidationError as e:
            raise invalid_params(f"Invalid arguments for {name}: {e}") from e

        logger.info("Calling tool %s", name)
        try:
            return await descriptor.func(self.context, params)
        except McpError as e:
            logger.warning("Tool %s failed: %s", name, e.error.message)
            raise
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            raise internal_error(f"Tool {name} failed: {e}") from e

    async def call_text(self, name: str, arguments: Optional[dict[str, Any]] = None) -> str:
        return to_text(await self.call(name, arguments))
