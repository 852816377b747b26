import json

import httpx
import pytest
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND
from pydantic import BaseModel

from core.dispatcher import ToolDescriptor, ToolDispatcher
from core.errors import McpError, error_code
from tests.conftest import ACCESS_TOKEN, INSTANCE_URL

TOOL_NAMES = {
    "authenticate_salesforce",
    "set_postman_api_key",
    "get_postman_collection",
    "execute_postman_request",
    "salesforce_query",
    "salesforce_create_record",
    "salesforce_update_record",
    "salesforce_delete_record",
    "describe_salesforce_object",
}


def test_lists_nine_tools(dispatcher):
    tools = dispatcher.list_tools()
    assert {tool.name for tool in tools} == TOOL_NAMES
    assert all(tool.description for tool in tools)


def test_input_schemas(dispatcher):
    schemas = {tool.name: tool.inputSchema for tool in dispatcher.list_tools()}
    auth = schemas["authenticate_salesforce"]
    assert auth["type"] == "object"
    assert set(auth["required"]) == {"client_id", "client_secret", "username", "password"}
    assert "login_url" in auth["properties"]
    assert set(schemas["execute_postman_request"]["required"]) == {"collection_id", "request_name"}
    assert set(schemas["salesforce_update_record"]["required"]) == {"sobject", "id", "data"}


@pytest.mark.asyncio
async def test_unknown_tool_invokes_nothing(context):
    called = []

    class Empty(BaseModel):
        pass

    async def handler(ctx, params):
        called.append(params)

    dispatcher = ToolDispatcher(context, [ToolDescriptor(name="known", func=handler, input_model=Empty)])
    with pytest.raises(McpError) as excinfo:
        await dispatcher.call("salesforce_nuke", {})
    assert error_code(excinfo.value) == METHOD_NOT_FOUND
    assert str(excinfo.value) == "Unknown tool: salesforce_nuke"
    assert called == []


@pytest.mark.asyncio
async def test_invalid_arguments_rejected_before_handler(dispatcher, upstream):
    with pytest.raises(McpError) as excinfo:
        await dispatcher.call("salesforce_create_record", {"sobject": "Account", "data": "not-an-object"})
    assert error_code(excinfo.value) == INVALID_PARAMS
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_missing_required_argument(dispatcher):
    with pytest.raises(McpError) as excinfo:
        await dispatcher.call("authenticate_salesforce", {"client_id": "x"})
    assert error_code(excinfo.value) == INVALID_PARAMS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, arguments",
    [
        ("salesforce_query", {"query": "SELECT Id FROM Account"}),
        ("salesforce_create_record", {"sobject": "Account", "data": {"Name": "x"}}),
        ("salesforce_update_record", {"sobject": "Account", "id": "001", "data": {}}),
        ("salesforce_delete_record", {"sobject": "Account", "id": "001"}),
        ("describe_salesforce_object", {"sobject": "Account"}),
        ("get_postman_collection", {"collection_id": "c1"}),
        ("execute_postman_request", {"collection_id": "c1", "request_name": "x"}),
    ],
)
async def test_credentialed_tools_fail_before_setup(dispatcher, upstream, name, arguments):
    with pytest.raises(McpError) as excinfo:
        await dispatcher.call(name, arguments)
    assert error_code(excinfo.value) == INVALID_REQUEST
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_unexpected_handler_error_becomes_internal(context):
    class Empty(BaseModel):
        pass

    async def handler(ctx, params):
        raise RuntimeError("boom")

    dispatcher = ToolDispatcher(context, [ToolDescriptor(name="explode", func=handler, input_model=Empty)])
    with pytest.raises(McpError) as excinfo:
        await dispatcher.call("explode")
    assert error_code(excinfo.value) == INTERNAL_ERROR
    assert "boom" in str(excinfo.value)


def test_duplicate_tool_names_rejected(context):
    class Empty(BaseModel):
        pass

    async def handler(ctx, params):
        return None

    descriptor = ToolDescriptor(name="dup", func=handler, input_model=Empty)
    with pytest.raises(ValueError):
        ToolDispatcher(context, [descriptor, descriptor])


@pytest.mark.asyncio
async def test_authenticate_then_query(dispatcher, context, upstream):
    def responder(request):
        if request.url.path == "/services/oauth2/token":
            return httpx.Response(
                200, json={"access_token": ACCESS_TOKEN, "instance_url": INSTANCE_URL, "token_type": "Bearer"}
            )
        return httpx.Response(200, json={"totalSize": 0, "done": True, "records": []})

    upstream.responder = responder

    auth = json.loads(
        await dispatcher.call_text(
            "authenticate_salesforce",
            {"client_id": "c", "client_secret": "s", "username": "u", "password": "p"},
        )
    )
    assert auth["instance_url"] == INSTANCE_URL
    assert context.get_session().instance_url == INSTANCE_URL

    result = await dispatcher.call("salesforce_query", {"query": "SELECT Id FROM Account"})
    assert result["records"] == []

    query_request = upstream.requests[-1]
    assert query_request.method == "GET"
    assert query_request.url.params["q"] == "SELECT Id FROM Account"
    assert query_request.headers["Authorization"] == "Bearer " + ACCESS_TOKEN


@pytest.mark.asyncio
async def test_delete_scenario(dispatcher, authed_context, upstream):
    upstream.reply(204)
    result = await dispatcher.call("salesforce_delete_record", {"sobject": "Contact", "id": "003xx"})

    assert result == {"success": True, "message": "Record deleted successfully", "id": "003xx"}
    [request] = upstream.requests
    assert request.method == "DELETE"
    assert request.content == b""


@pytest.mark.asyncio
async def test_set_api_key_through_dispatcher(dispatcher, context):
    text = await dispatcher.call_text("set_postman_api_key", {"api_key": "PMAK-9"})
    assert json.loads(text)["success"] is True
    assert context.get_api_key() == "PMAK-9"
