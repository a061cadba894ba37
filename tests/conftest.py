"""
Shared pytest fixtures for Rate Desk tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rate_desk.utils.models import RateTable, RoleRecord  # noqa: E402


@pytest.fixture
def architect():
    """Costs used in the worked examples: 100 / 34 / 47, fixed rate 190."""
    return RoleRecord(role='Salesforce Solution Architect', onshore_cost=100.0,
                      offshore_cost=34.0, nearshore_cost=47.0, client_rate=190.0)


@pytest.fixture
def qa_role():
    """Offered offshore only."""
    return RoleRecord(role='QA -Quality Assurance', onshore_cost=0.0,
                      offshore_cost=6.75, nearshore_cost=0.0, client_rate=18.0)


@pytest.fixture
def rate_table(architect, qa_role):
    return RateTable((
        architect,
        RoleRecord(role='Commerce Cloud Administrator', onshore_cost=69.0,
                   offshore_cost=12.5, nearshore_cost=34.0, client_rate=160.0),
        RoleRecord(role='Junior Developer', onshore_cost=69.0,
                   offshore_cost=11.0, nearshore_cost=25.0, client_rate=140.0),
        qa_role,
    ))


class FakeResponse:
    """Just enough of requests.Response for the HTTP strategies."""

    def __init__(self, content=b'', status_code=200, content_type='text/plain'):
        self.content = content if isinstance(content, bytes) else content.encode('utf-8')
        self.status_code = status_code
        self.headers = {'content-type': content_type}

    @property
    def text(self):
        return self.content.decode('utf-8')

    def json(self):
        import json
        return json.loads(self.text)

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession
