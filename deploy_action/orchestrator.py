from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .archiver import archive_name_for, create_archive
from .config import DeployConfig
from .control_plane import CONTROL_PLANE_API, ControlPlaneClient
from .errors import DeploymentTimeoutError
from .logging_utils import get_logger
from .poller import PollResult, wait_for_deployment
from .uploader import upload_archive


logger = get_logger(__name__)

# plan 출력 및 로그에서 사용하는 단계 이름
PIPELINE_STEPS: List[str] = [
    "archive",
    "initiate",
    "upload",
    "application",
    "wait",
]


@dataclass(frozen=True)
class DeploySummary:
    commit_hash: str
    archive_path: Path
    deployment_id: str
    application_id: str
    poll: PollResult

    def render(self) -> str:
        lines: List[str] = []
        lines.append("# Deploy summary")
        lines.append(f"- commit: {self.commit_hash}")
        lines.append(f"- archive: {self.archive_path}")
        lines.append(f"- deployment: {self.deployment_id}")
        lines.append(f"- application: {self.application_id}")
        lines.append(f"- status: {self.poll.last_status or '-'} ({self.poll.state.value})")
        lines.append(f"- polls: {self.poll.attempts}")
        return "\n".join(lines)


def plan_all(cfg: DeployConfig, commit_hash: Optional[str], base_dir: str = ".") -> str:
    """
    실제 네트워크 호출 없이 설정 요약과 실행될 단계를 텍스트로 리턴한다.
    """
    lines: List[str] = []
    lines.append("# Deploy plan")
    lines.append(f"- endpoint: {CONTROL_PLANE_API}")
    lines.append(f"- commit: {commit_hash or '(unresolved)'}")
    if commit_hash:
        lines.append(f"- archive: {os.path.join(base_dir, archive_name_for(commit_hash))}")
    lines.append("")

    lines.append("## Config summary")
    for key, value in cfg.redacted().items():
        lines.append(f"- {key}: {value}")
    lines.append(f"- max_poll_attempts: {cfg.max_poll_attempts}")
    lines.append("")

    lines.append("## Steps")
    for step in PIPELINE_STEPS:
        lines.append(f"- {step}")

    return "\n".join(lines)


def run_deployment(
    cfg: DeployConfig,
    commit_hash: str,
    *,
    base_dir: str = ".",
    client: Optional[ControlPlaneClient] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> DeploySummary:
    """
    archive → initiate → upload → application 조회 → 완료 대기 순서로 배포를 수행한다.

    어느 단계든 실패하면 DeployError 계열 예외가 그대로 전파되며 이후 단계는 실행하지 않는다.
    대기 한도를 넘기면 DeploymentTimeoutError 를 던진다.
    """
    owns_client = client is None
    if client is None:
        client = ControlPlaneClient(cfg.api_key, timeout=cfg.request_timeout_seconds)

    try:
        logger.info("단계 실행: archive")
        dist_dir = Path(base_dir) / cfg.distribution_directory
        archive_path = create_archive(dist_dir, archive_name_for(commit_hash), base_dir)

        try:
            logger.info("단계 실행: initiate")
            initiated = client.initiate_deployment(cfg.application_name, commit_hash)
            logger.info("Deployment started")

            logger.info("단계 실행: upload")
            upload_archive(
                initiated.upload_location,
                archive_path,
                session=client.session,
                verify=cfg.verify_upload,
            )
        finally:
            if cfg.cleanup_archive:
                archive_path.unlink(missing_ok=True)
                logger.debug("아카이브 삭제: %s", archive_path)

        logger.info("단계 실행: application")
        application = client.get_application_by_name(cfg.application_name)
        logger.info("애플리케이션 확인: %s (id=%s)", cfg.application_name, application.id)

        logger.info("단계 실행: wait")
        poll = wait_for_deployment(
            client,
            application.id,
            initiated.id,
            max_wait_seconds=cfg.max_wait_seconds,
            poll_interval_seconds=cfg.poll_interval_seconds,
            sleep=sleep or time.sleep,
        )
    finally:
        if owns_client:
            client.close()

    if not poll.succeeded:
        raise DeploymentTimeoutError(initiated.id, poll.attempts, poll.last_status)

    return DeploySummary(
        commit_hash=commit_hash,
        archive_path=archive_path,
        deployment_id=initiated.id,
        application_id=application.id,
        poll=poll,
    )
