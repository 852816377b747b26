from typing import Any, Optional
import logging

import httpx
from pydantic import BaseModel, Field

from core.config import get_config  # type: ignore
from core.errors import McpError, internal_error, invalid_request
from core.session import SessionContext
from utils import decode_body, get_endpoint  # type: ignore
from utils.collection_tree import find_request, parse_items
from utils.response_utils import postman_error_message
from utils.templates import apply_access_token, apply_instance_url, substitute

logger = logging.getLogger(__name__)

# Body is only forwarded for these verbs; other methods drop it silently
BODY_METHODS = ("post", "put", "patch")


class SetApiKeyInput(BaseModel):
    api_key: str = Field(..., description="Postman API key")


class GetCollectionInput(BaseModel):
    collection_id: str = Field(..., description="Postman collection ID")


class ExecuteRequestInput(BaseModel):
    collection_id: str = Field(..., description="Postman collection ID")
    request_name: str = Field(..., description="Name of the request to execute")
    variables: Optional[dict[str, str]] = Field(None, description="Variables to substitute in the request")


async def _fetch_collection(context: SessionContext, api_key: str, collection_id: str) -> httpx.Response:
    _cfg = get_config()["postman"]
    url = get_endpoint(_cfg["api_url"], "collection", collection_id=collection_id)
    async with context.http_client() as client:
        resp = await client.get(url, headers={_cfg["api_key_header"]: api_key})
        resp.raise_for_status()
        return resp


async def set_postman_api_key(context: SessionContext, params: SetApiKeyInput) -> dict[str, Any]:
    context.set_api_key(params.api_key)
    return {"success": True, "message": "Postman API key set successfully"}


async def get_postman_collection(context: SessionContext, params: GetCollectionInput) -> Any:
    """Return the collection document exactly as the Postman API sends it."""
    api_key = context.require_api_key()
    try:
        resp = await _fetch_collection(context, api_key, params.collection_id)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise internal_error(f"Failed to fetch Postman collection: {postman_error_message(e)}") from e
    return decode_body(resp)


async def execute_postman_request(context: SessionContext, params: ExecuteRequestInput) -> dict[str, Any]:
    """Look up a request by name in a collection, fill in its placeholders and send it.

    `{{instance_url}}` in the URL and `{{access_token}}` in header values come
    from the Salesforce session; every other placeholder comes from
    `variables`. Headers stored in the collection are sent as they are.
    """
    api_key = context.require_api_key()
    session = context.require_session()

    try:
        collection_resp = await _fetch_collection(context, api_key, params.collection_id)
        document = decode_body(collection_resp)
        collection = document.get("collection", {}) if isinstance(document, dict) else {}
        items = parse_items(collection.get("item") or [])

        request = find_request(items, params.request_name)
        if request is None:
            raise invalid_request(f'Request "{params.request_name}" not found in collection')

        url = apply_instance_url(request.url, session.instance_url)
        variables = params.variables or {}
        url = substitute(url, variables)
        body = substitute(request.body or "", variables)
        headers = [(h.key, apply_access_token(h.value, session.access_token)) for h in request.headers]
        method = request.method.lower()

        content = body if body and method in BODY_METHODS else None
        logger.info("Executing collection request %r (%s)", request.name, method.upper())
        async with context.http_client() as client:
            resp = await client.request(method.upper(), url, headers=headers, content=content)
            resp.raise_for_status()
    except McpError:
        raise
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise internal_error(f"Failed to execute Postman request: {postman_error_message(e)}") from e

    return {
        "success": True,
        "status": resp.status_code,
        "statusText": resp.reason_phrase,
        "headers": dict(resp.headers),
        "data": decode_body(resp),
    }


def get_tools() -> dict[str, Any]:
    return {
        "set_postman_api_key": {
            "func": set_postman_api_key,
            "input_model": SetApiKeyInput,
            "title": "Set Postman API key",
            "description": "Set Postman API key for collection management",
        },
        "get_postman_collection": {
            "func": get_postman_collection,
            "input_model": GetCollectionInput,
            "title": "Get Postman collection",
            "description": "Retrieve a Postman collection by ID",
        },
        "execute_postman_request": {
            "func": execute_postman_request,
            "input_model": ExecuteRequestInput,
            "title": "Execute Postman request",
            "description": "Execute a request from a Postman collection",
        },
    }
