import httpx
import pytest

from core.config import ConfigLoader
from core.dispatcher import ToolDispatcher
from core.session import SalesforceSession, SessionContext

INSTANCE_URL = "https://a.my.salesforce.com"
ACCESS_TOKEN = "00Dxx!token"


class FakeUpstream:
    """httpx MockTransport handler that records requests and replies via `responder`."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(200, json={})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def reply(self, *args, **kwargs):
        self.responder = lambda request: httpx.Response(*args, **kwargs)

    def fail(self, exc: Exception):
        def _raise(request):
            raise exc

        self.responder = _raise


@pytest.fixture(autouse=True)
def default_config():
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def context(upstream):
    return SessionContext(timeout=5.0, transport=httpx.MockTransport(upstream))


@pytest.fixture
def session():
    return SalesforceSession(access_token=ACCESS_TOKEN, instance_url=INSTANCE_URL, token_type="Bearer")


@pytest.fixture
def authed_context(context, session):
    context.set_session(session)
    return context


@pytest.fixture
def dispatcher(context):
    return ToolDispatcher(context)
