"""
poller
------

배포 상태를 고정 간격으로 조회하여 COMPLETE 가 되거나 대기 한도를 넘길 때까지 기다린다.

대기 한도는 벽시계 deadline 이 아니라 반복 횟수(max_wait // interval)로 계산한다.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .config import DEFAULT_MAX_WAIT_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS
from .control_plane import ControlPlaneClient
from .logging_utils import get_logger


logger = get_logger(__name__)

COMPLETE_STATUS = "COMPLETE"


class DeploymentState(enum.Enum):
    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    TIMED_OUT = "TIMED_OUT"

    @classmethod
    def from_status(cls, status: Optional[str]) -> "DeploymentState":
        # COMPLETE 외의 값(FAILED 등 포함)은 모두 진행 중으로 본다.
        if status == COMPLETE_STATUS:
            return cls.COMPLETE
        return cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self is not DeploymentState.PENDING


@dataclass(frozen=True)
class PollResult:
    deployment_id: str
    state: DeploymentState
    attempts: int
    last_status: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is DeploymentState.COMPLETE


def max_attempts_for(max_wait_seconds: float, poll_interval_seconds: float) -> int:
    if poll_interval_seconds <= 0:
        raise ValueError("poll_interval_seconds 는 0보다 커야 합니다.")
    return int(max_wait_seconds // poll_interval_seconds)


def wait_for_deployment(
    client: ControlPlaneClient,
    application_id: str,
    deployment_id: str,
    *,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """
    배포가 COMPLETE 가 될 때까지 상태를 조회한다.

    - COMPLETE 를 보면 즉시 반환하고 더 이상 조회하지 않는다.
    - 최대 max_wait_seconds // poll_interval_seconds 번 조회 후 TIMED_OUT 을 반환한다.
    - 상태 조회 중 ControlPlaneError 는 그대로 전파한다.
    """
    max_attempts = max_attempts_for(max_wait_seconds, poll_interval_seconds)
    logger.info(
        "배포 완료 대기: deployment=%s (최대 %d회, %.1f초 간격)",
        deployment_id,
        max_attempts,
        poll_interval_seconds,
    )

    last_status: Optional[str] = None
    for attempt in range(1, max_attempts + 1):
        deployment = client.get_deployment(application_id, deployment_id)
        last_status = deployment.status
        state = DeploymentState.from_status(last_status)

        if state is DeploymentState.COMPLETE:
            logger.info("배포 완료: deployment=%s (%d회 조회)", deployment_id, attempt)
            return PollResult(deployment_id, state, attempt, last_status)

        logger.info("배포 대기 중 (%d/%d): status=%s", attempt, max_attempts, last_status or "-")
        if attempt < max_attempts:
            sleep(poll_interval_seconds)

    logger.warning("대기 한도 초과: deployment=%s", deployment_id)
    return PollResult(deployment_id, DeploymentState.TIMED_OUT, max_attempts, last_status)
