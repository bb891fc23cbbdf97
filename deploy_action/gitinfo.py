"""
gitinfo
-------

배포 대상 커밋 해시를 결정하는 모듈.
"""

from __future__ import annotations

import os
from typing import Optional

from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)

COMMIT_ENV_VARS = ("GITHUB_SHA", "CI_COMMIT_SHA")


def resolve_commit_hash(explicit: Optional[str] = None, cwd: str = ".") -> str:
    """
    우선순위: 명시값 > GITHUB_SHA > CI_COMMIT_SHA > `git rev-parse HEAD`.
    """
    if explicit and explicit.strip():
        return explicit.strip()

    for name in COMMIT_ENV_VARS:
        val = os.getenv(name)
        if val and val.strip():
            logger.debug("%s 에서 커밋 해시를 사용합니다.", name)
            return val.strip()

    try:
        result = run_command(["git", "rev-parse", "HEAD"], cwd=cwd, timeout=30.0)
    except RuntimeError as e:
        raise ValueError(
            "커밋 해시를 결정할 수 없습니다. --commit 옵션이나 GITHUB_SHA 환경변수를 지정하세요."
        ) from e

    sha = result.stdout.strip()
    if not sha:
        raise ValueError("git rev-parse HEAD 가 빈 값을 반환했습니다.")
    return sha
