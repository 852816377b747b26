from typing import Any, Optional
import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

from core.config import get_config  # type: ignore
from core.errors import internal_error
from core.session import SalesforceSession, SessionContext
from utils import decode_body, get_endpoint  # type: ignore
from utils.response_utils import oauth_error_message, salesforce_error_message

logger = logging.getLogger(__name__)


class AuthenticateInput(BaseModel):
    client_id: str = Field(..., description="Salesforce connected app client ID")
    client_secret: str = Field(..., description="Salesforce connected app client secret")
    username: str = Field(..., description="Salesforce username")
    password: str = Field(..., description="Salesforce password + security token")
    login_url: Optional[str] = Field(
        None, description="Salesforce login URL (default: https://login.salesforce.com)"
    )


class QueryInput(BaseModel):
    query: str = Field(..., description="SOQL query string")


class CreateRecordInput(BaseModel):
    sobject: str = Field(..., description="Salesforce object type (e.g., Account, Contact)")
    data: dict[str, Any] = Field(..., description="Record data")


class UpdateRecordInput(BaseModel):
    sobject: str = Field(..., description="Salesforce object type")
    id: str = Field(..., description="Record ID")
    data: dict[str, Any] = Field(..., description="Updated record data")


class RecordInput(BaseModel):
    sobject: str = Field(..., description="Salesforce object type")
    id: str = Field(..., description="Record ID")


class DescribeInput(BaseModel):
    sobject: str = Field(..., description="Salesforce object type")


def _auth_headers(session: SalesforceSession) -> dict[str, str]:
    return {"Authorization": f"Bearer {session.access_token}"}


async def authenticate_salesforce(context: SessionContext, params: AuthenticateInput) -> dict[str, Any]:
    """Run the OAuth2 username-password flow and keep the resulting session.

    The stored session is only replaced once the token response parsed
    cleanly; a failed login leaves any previous session in place.
    """
    login_url = params.login_url or get_config()["salesforce"]["login_url"]
    url = get_endpoint(login_url, "oauth_token")
    form = {
        "grant_type": "password",
        "client_id": params.client_id,
        "client_secret": params.client_secret,
        "username": params.username,
        "password": params.password,
    }
    async with context.http_client() as client:
        try:
            resp = await client.post(url, data=form)
            resp.raise_for_status()
            session = SalesforceSession.model_validate(resp.json())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise internal_error(f"Salesforce authentication failed: {oauth_error_message(e)}") from e
        except (ValueError, ValidationError) as e:
            raise internal_error(f"Salesforce authentication failed: unexpected token response ({e})") from e

    context.set_session(session)
    logger.info("Authenticated with Salesforce instance %s", session.instance_url)
    return {
        "success": True,
        "message": "Successfully authenticated with Salesforce",
        "instance_url": session.instance_url,
    }


async def salesforce_query(context: SessionContext, params: QueryInput) -> Any:
    """Execute a SOQL query and return the raw query result."""
    session = context.require_session()
    url = get_endpoint(session.instance_url, "query")
    async with context.http_client() as client:
        try:
            resp = await client.get(url, params={"q": params.query}, headers=_auth_headers(session))
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise internal_error(f"Salesforce query failed: {salesforce_error_message(e)}") from e
    return decode_body(resp)


async def salesforce_create_record(context: SessionContext, params: CreateRecordInput) -> Any:
    session = context.require_session()
    url = get_endpoint(session.instance_url, "sobject", sobject=params.sobject)
    async with context.http_client() as client:
        try:
            # json= also sets Content-Type: application/json
            resp = await client.post(url, json=params.data, headers=_auth_headers(session))
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise internal_error(f"Failed to create Salesforce record: {salesforce_error_message(e)}") from e
    return decode_body(resp)


async def salesforce_update_record(context: SessionContext, params: UpdateRecordInput) -> dict[str, Any]:
    """PATCH the record; Salesforce answers 204 so a synthetic payload is returned."""
    session = context.require_session()
    url = get_endpoint(session.instance_url, "sobject_record", sobject=params.sobject, id=params.id)
    async with context.http_client() as client:
        try:
            resp = await client.patch(url, json=params.data, headers=_auth_headers(session))
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise internal_error(f"Failed to update Salesforce record: {salesforce_error_message(e)}") from e
    return {"success": True, "message": "Record updated successfully", "id": params.id}


async def salesforce_delete_record(context: SessionContext, params: RecordInput) -> dict[str, Any]:
    session = context.require_session()
    url = get_endpoint(session.instance_url, "sobject_record", sobject=params.sobject, id=params.id)
    async with context.http_client() as client:
        try:
            resp = await client.delete(url, headers=_auth_headers(session))
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise internal_error(f"Failed to delete Salesforce record: {salesforce_error_message(e)}") from e
    return {"success": True, "message": "Record deleted successfully", "id": params.id}


async def describe_salesforce_object(context: SessionContext, params: DescribeInput) -> Any:
    session = context.require_session()
    url = get_endpoint(session.instance_url, "sobject_describe", sobject=params.sobject)
    async with context.http_client() as client:
        try:
            resp = await client.get(url, headers=_auth_headers(session))
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise internal_error(f"Failed to describe Salesforce object: {salesforce_error_message(e)}") from e
    return decode_body(resp)


def get_tools() -> dict[str, Any]:
    return {
        "authenticate_salesforce": {
            "func": authenticate_salesforce,
            "input_model": AuthenticateInput,
            "title": "Authenticate Salesforce",
            "description": "Authenticate with Salesforce using OAuth2",
        },
        "salesforce_query": {
            "func": salesforce_query,
            "input_model": QueryInput,
            "title": "SOQL query",
            "description": "Execute a SOQL query against Salesforce",
        },
        "salesforce_create_record": {
            "func": salesforce_create_record,
            "input_model": CreateRecordInput,
            "title": "Create record",
            "description": "Create a record in Salesforce",
        },
        "salesforce_update_record": {
            "func": salesforce_update_record,
            "input_model": UpdateRecordInput,
            "title": "Update record",
            "description": "Update a record in Salesforce",
        },
        "salesforce_delete_record": {
            "func": salesforce_delete_record,
            "input_model": RecordInput,
            "title": "Delete record",
            "description": "Delete a record in Salesforce",
        },
        "describe_salesforce_object": {
            "func": describe_salesforce_object,
            "input_model": DescribeInput,
            "title": "Describe object",
            "description": "Get metadata for a Salesforce object",
        },
    }
