"""
control_plane
-------------

컨트롤 플레인 GraphQL API 클라이언트.

세 가지 오퍼레이션(배포 시작, 이름으로 애플리케이션 조회, 배포 조회)을 제공하며
요청/응답 envelope 처리(JSON 파싱, errors 확인, data.<field> 추출)는 `_execute` 하나로 공유한다.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT_SECONDS
from .errors import ControlPlaneError
from .logging_utils import get_logger


logger = get_logger(__name__)

CONTROL_PLANE_API = "https://vt2t2uctaf.execute-api.us-east-1.amazonaws.com"


INITIATE_DEPLOYMENT_MUTATION = """mutation InitiateDeployment($input: InitiateDeploymentInput!) {
  initiateDeployment(input: $input) {
    commitHash
    deploymentUploadLocation
    id
    status
  }
}"""

GET_APPLICATION_QUERY = """query getApplication($input: ApplicationQueryInput!) {
  getApplication(input: $input) {
    customerId
    id
    name
    region
  }
}"""

GET_DEPLOYMENT_QUERY = """query GetDeployment($input: GetDeploymentInput!) {
  getDeployment(input: $input) {
    commitHash
    id
    status
  }
}"""


@dataclass(frozen=True)
class Application:
    id: str
    name: Optional[str] = None
    customer_id: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class InitiatedDeployment:
    id: str
    upload_location: str
    commit_hash: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class Deployment:
    id: Optional[str]
    status: str
    commit_hash: Optional[str] = None


def _require(data: Dict[str, Any], key: str, operation: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ControlPlaneError(
            f"{operation} 응답에 {key} 필드가 없습니다.", operation=operation
        )
    return value


class ControlPlaneClient:
    """
    컨트롤 플레인 GraphQL 클라이언트.

    endpoint 는 고정값이며, 인증은 `Authorization: APIKEY <key>` 헤더로 한다.
    session 을 넘기지 않으면 내부에서 requests.Session 을 만들고 close() 시 닫는다.
    """

    def __init__(
        self,
        api_key: str,
        *,
        endpoint: str = CONTROL_PLANE_API,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key:
            raise ValueError("컨트롤 플레인 API 키가 필요합니다.")
        self.endpoint = endpoint
        self.timeout = timeout
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"APIKEY {api_key}",
        }
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "ControlPlaneClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def _execute(
        self,
        operation: str,
        query: str,
        variables: Dict[str, Any],
        field: str,
    ) -> Dict[str, Any]:
        """
        GraphQL 요청 공통 처리.

        - 응답 최상위에 비어있지 않은 errors 배열이 있으면 첫 번째 에러 message 로 ControlPlaneError
        - 그 외 HTTP/파싱 실패도 ControlPlaneError 로 래핑
        - 성공 시 data.<field> 를 반환
        """
        payload = {"query": query, "variables": variables}
        logger.debug("GraphQL %s 요청: %s", operation, json.dumps(variables))

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ControlPlaneError(
                f"{operation} 요청 실패: {e}", operation=operation
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ControlPlaneError(
                f"{operation} 응답이 JSON 이 아닙니다 (status={response.status_code})",
                operation=operation,
            ) from e

        logger.debug("GraphQL %s 응답 (status=%s): %s", operation, response.status_code, body)

        if not isinstance(body, dict):
            raise ControlPlaneError(
                f"{operation} 응답 형식이 올바르지 않습니다.", operation=operation
            )

        errors = body.get("errors")
        if errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else str(first)
            logger.error("GraphQL %s 에러: %s", operation, message)
            raise ControlPlaneError(message or f"{operation} 실패", operation=operation)

        if response.status_code >= 400:
            raise ControlPlaneError(
                f"{operation} 요청 실패: HTTP {response.status_code}", operation=operation
            )

        data = body.get("data") or {}
        result = data.get(field)
        if not isinstance(result, dict):
            raise ControlPlaneError(
                f"{operation} 응답에 data.{field} 가 없습니다.", operation=operation
            )
        return result

    def initiate_deployment(self, application_name: str, commit_hash: str) -> InitiatedDeployment:
        operation = "InitiateDeployment"
        result = self._execute(
            operation,
            INITIATE_DEPLOYMENT_MUTATION,
            {"input": {"applicationName": application_name, "commitHash": commit_hash}},
            "initiateDeployment",
        )
        deployment = InitiatedDeployment(
            id=_require(result, "id", operation),
            upload_location=_require(result, "deploymentUploadLocation", operation),
            commit_hash=result.get("commitHash"),
            status=result.get("status"),
        )
        logger.info("배포 시작됨: id=%s status=%s", deployment.id, deployment.status)
        return deployment

    def get_application_by_name(self, name: str) -> Application:
        operation = "getApplication"
        result = self._execute(
            operation,
            GET_APPLICATION_QUERY,
            {"input": {"name": name}},
            "getApplication",
        )
        return Application(
            id=_require(result, "id", operation),
            name=result.get("name"),
            customer_id=result.get("customerId"),
            region=result.get("region"),
        )

    def get_deployment(self, application_id: str, deployment_id: str) -> Deployment:
        operation = "GetDeployment"
        result = self._execute(
            operation,
            GET_DEPLOYMENT_QUERY,
            {"input": {"applicationId": application_id, "deploymentId": deployment_id}},
            "getDeployment",
        )
        return Deployment(
            id=result.get("id"),
            status=str(result.get("status") or ""),
            commit_hash=result.get("commitHash"),
        )
