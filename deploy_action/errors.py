"""
errors
------

배포 파이프라인에서 사용하는 예외 계층.
모든 예외는 DeployError(RuntimeError) 를 상속하며, CLI 에서 한 번에 잡아 exit 1 로 처리한다.
"""

from __future__ import annotations

from typing import Optional


class DeployError(RuntimeError):
    """배포 파이프라인 공통 예외."""


class ArchiveError(DeployError):
    """배포 디렉토리가 없거나 zip 생성에 실패한 경우."""


class ControlPlaneError(DeployError):
    """
    컨트롤 플레인 GraphQL 호출 실패.

    응답에 errors 배열이 있으면 첫 번째 에러의 message 가 그대로 메시지가 된다.
    """

    def __init__(self, message: str, *, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class UploadError(DeployError):
    """presigned URL 로의 PUT 업로드 실패."""


class DeploymentTimeoutError(DeployError):
    """대기 한도 안에 배포가 COMPLETE 상태가 되지 않은 경우."""

    def __init__(self, deployment_id: str, attempts: int, last_status: Optional[str] = None) -> None:
        super().__init__(f"Timeout reached: Unable to find status of {deployment_id}")
        self.deployment_id = deployment_id
        self.attempts = attempts
        self.last_status = last_status
