"""Pytest configuration and fixtures."""

import json
import threading
from typing import Dict, List, Optional

import pytest
import requests

from gcptables.errors import NotFoundError, TransientError
from gcptables.models import CloudFunction, Policy
from gcptables.table import QueryContext


def function_name(short_name: str, project: str = "p1", location: str = "us-central1") -> str:
    return f"projects/{project}/locations/{location}/functions/{short_name}"


def make_function(short_name: str, **fields) -> CloudFunction:
    payload = {
        "name": function_name(short_name),
        "status": "ACTIVE",
        "runtime": "python311",
        "entryPoint": "handler",
        "availableMemoryMb": 256,
        "versionId": "3",
        "updateTime": "2024-01-15T12:00:00.123456789Z",
        "labels": {"team": "data"},
        "httpsTrigger": {"url": f"https://us-central1-p1.cloudfunctions.net/{short_name}"},
    }
    payload.update(fields)
    return CloudFunction.model_validate(payload)


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, raw: Optional[bytes] = None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    def json(self):
        return json.loads(self.content)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Returns queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, responses: List):
        self.responses = list(responses)
        self.calls: List[Dict] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeClient:
    """In-memory stand-in for CloudFunctionsClient."""

    def __init__(
        self,
        pages: List[List[CloudFunction]],
        *,
        fail_at_page: Optional[int] = None,
        policies: Optional[Dict[str, Optional[Policy]]] = None,
        policy_errors: Optional[Dict[str, Exception]] = None,
    ):
        self.pages = pages
        self.fail_at_page = fail_at_page
        self.policies = policies or {}
        self.policy_errors = policy_errors or {}
        self.pages_fetched = 0
        self.policy_calls: List[str] = []
        self.get_calls: List[str] = []
        self._lock = threading.Lock()

    def list_functions(self, parent, context):
        for index, page in enumerate(self.pages):
            context.raise_if_cancelled()
            if index == self.fail_at_page:
                raise TransientError(f"page {index} failed")
            self.pages_fetched += 1
            yield from page

    def get_function(self, name, context):
        self.get_calls.append(name)
        for page in self.pages:
            for function in page:
                if function.name == name:
                    return function
        raise NotFoundError(f"Resource not found: {name}")

    def get_iam_policy(self, name, context):
        with self._lock:
            self.policy_calls.append(name)
        if name in self.policy_errors:
            raise self.policy_errors[name]
        return self.policies.get(name)


@pytest.fixture
def context():
    return QueryContext(project="p1")
