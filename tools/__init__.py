# tools package for MCP server tools
# Modules in this package expose `get_tools() -> dict[str, dict]` mapping tool name to
# {"func", "input_model", "title", "description"}; `func(context, params)` is awaited by the dispatcher.
# core.dispatcher imports every public module here and registers what it returns.
__all__ = []
