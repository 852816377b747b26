from core.config import get_config
from core.logging_config import setup_logging
from core.dispatcher import ToolDescriptor, ToolDispatcher
from core.session import SessionContext
from core.logging_config import get_logger
from mcp.server.fastmcp import FastMCP
from pydantic import Field
from typing import Annotated
import inspect
import sys

SERVER_NAME = "salesforce-postman"


def make_wrapper(dispatcher: ToolDispatcher, descriptor: ToolDescriptor):
    """Build the coroutine FastMCP registers for one tool.

    Its signature mirrors the tool's input model so FastMCP publishes the
    same parameters and per-field descriptions; the call itself goes
    through the dispatcher, which validates again against the model and renders the payload as JSON text.
    """
    params = []
    for field_name, field in descriptor.input_model.model_fields.items():
        default = inspect.Parameter.empty if field.is_required() else field.get_default(call_default_factory=True)
        params.append(
            inspect.Parameter(
                field_name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=Annotated[field.annotation, Field(description=field.description)],
            )
        )

    async def _wrapped(**call_kwargs) -> str:
        return await dispatcher.call_text(descriptor.name, call_kwargs)

    _wrapped.__signature__ = inspect.Signature(parameters=params, return_annotation=str)
    _wrapped.__name__ = descriptor.name
    _wrapped.__doc__ = descriptor.description
    return _wrapped


def create_server(context: SessionContext | None = None) -> FastMCP:
    """Create the FastMCP instance with every tool from the `tools` package registered."""
    logger = get_logger(__name__)
    if context is None:
        context = SessionContext(timeout=float(get_config()["http"]["timeout"]))
    dispatcher = ToolDispatcher(context)

    mcp = FastMCP(SERVER_NAME)
    registered_tool_names: list[str] = []
    for descriptor in dispatcher.descriptors:
        mcp.add_tool(
            make_wrapper(dispatcher, descriptor),
            name=descriptor.name,
            title=descriptor.title,
            description=descriptor.description,
        )
        registered_tool_names.append(descriptor.name)
    logger.info(f"Total tools registered: {len(registered_tool_names)} , tool names: {registered_tool_names}")
    return mcp


def main() -> None:
    _cfg = get_config()["logging"]
    logger = setup_logging(_cfg.get("logs_dir"), _cfg.get("file_name", "server.log"), _cfg.get("level", "INFO"))
    mcp = create_server()
    logger.info("Salesforce/Postman MCP server running on stdio")
    try:
        mcp.run(transport="stdio")
        logger.info("MCP server shut down.")
    except KeyboardInterrupt:
        logger.info("Interrupted, MCP server shut down.")
    except Exception:
        logger.exception("Unhandled exception running MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
