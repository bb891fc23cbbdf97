"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 deploy_action 패키지가 존재할 때,
`pytest` 실행 시 site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.

테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.
컨트롤 플레인 호출은 FakeSession 으로 대체한다.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Dict, List, Optional

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


# CI 러너에서 테스트를 돌려도 실제 값이 섞이지 않도록 비운다.
_ISOLATED_ENV = [
    "GITHUB_SHA",
    "CI_COMMIT_SHA",
    "GITHUB_OUTPUT",
    "INPUT_DISTRIBUTIONDIRECTORY",
    "INPUT_APPLICATIONNAME",
    "INPUT_APIKEY",
    "DISTRIBUTION_DIRECTORY",
    "APPLICATION_NAME",
    "CONTROL_PLANE_API_KEY",
    "MAX_WAIT_SECONDS",
    "POLL_INTERVAL_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
    "VERIFY_UPLOAD",
    "CLEANUP_ARCHIVE",
]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._body


_GRAPHQL_FIELDS = ("initiateDeployment", "getApplication", "getDeployment")


class FakeSession:
    """
    requests.Session 대체. GraphQL 필드 이름별로 응답 목록을 순서대로 돌려준다.
    목록의 마지막 응답은 소진되지 않고 반복된다.
    """

    def __init__(self, responses: Optional[Dict[str, List[FakeResponse]]] = None, put_status: int = 200) -> None:
        self.responses = {k: list(v) for k, v in (responses or {}).items()}
        self.put_status = put_status
        self.posts: List[Dict[str, Any]] = []
        self.puts: List[Dict[str, Any]] = []
        self.closed = False

    def calls_for(self, field: str) -> List[Dict[str, Any]]:
        return [c for c in self.posts if c["field"] == field]

    def post(self, url: str, json: Any = None, headers: Any = None, timeout: Any = None) -> FakeResponse:
        query = json["query"]
        field = next(f for f in _GRAPHQL_FIELDS if f"{f}(input" in query)
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout, "field": field})
        queue = self.responses[field]
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    def put(self, url: str, data: Any = None, timeout: Any = None, **kwargs: Any) -> FakeResponse:
        self.puts.append({"url": url, "data": data, "timeout": timeout, "kwargs": kwargs})
        return FakeResponse(self.put_status, None)

    def close(self) -> None:
        self.closed = True


def graphql_ok(field: str, payload: Dict[str, Any]) -> FakeResponse:
    return FakeResponse(200, {"data": {field: payload}})


def graphql_error(*messages: str) -> FakeResponse:
    return FakeResponse(200, {"data": None, "errors": [{"message": m} for m in messages]})


@pytest.fixture
def fakes():
    """테스트 모듈에서 conftest 의 fake 헬퍼를 쓰기 위한 네임스페이스."""

    class _Fakes:
        Response = FakeResponse
        Session = FakeSession
        ok = staticmethod(graphql_ok)
        error = staticmethod(graphql_error)

    return _Fakes
