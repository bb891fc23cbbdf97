from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env", ".env.deploy"]

DEFAULT_MAX_WAIT_SECONDS = 600
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _first_env(*names: str) -> Optional[str]:
    # GitHub Actions 는 action input 을 INPUT_<NAME> 으로 넘긴다.
    for name in names:
        val = os.getenv(name)
        if val:
            return val.strip()
    return None


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} 값이 숫자가 아닙니다: {raw!r}") from e
    if not math.isfinite(value):
        raise ValueError(f"{name} 값은 유한한 숫자여야 합니다: {raw!r}")
    return value


def _mask(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return "****" + secret[-4:]


@dataclass(frozen=True)
class DeployConfig:
    # 필수
    distribution_directory: str
    application_name: str
    api_key: str

    # 폴링/HTTP 튜닝
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    # 업로드 결과 검증 (false 면 기존 도구처럼 실패를 경고만 하고 진행)
    verify_upload: bool = True
    cleanup_archive: bool = False

    def __post_init__(self) -> None:
        for name in ("max_wait_seconds", "poll_interval_seconds", "request_timeout_seconds"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name.upper()} 값은 유한한 숫자여야 합니다.")
        if self.poll_interval_seconds <= 0:
            raise ValueError("POLL_INTERVAL_SECONDS 는 0보다 커야 합니다.")
        if self.max_wait_seconds < self.poll_interval_seconds:
            raise ValueError(
                "MAX_WAIT_SECONDS 는 POLL_INTERVAL_SECONDS 이상이어야 합니다."
            )

    @property
    def max_poll_attempts(self) -> int:
        return int(self.max_wait_seconds // self.poll_interval_seconds)

    def redacted(self) -> Dict[str, object]:
        """로그/plan 출력용. API 키는 마스킹한다."""
        return {
            "distribution_directory": self.distribution_directory,
            "application_name": self.application_name,
            "api_key": _mask(self.api_key),
            "max_wait_seconds": self.max_wait_seconds,
            "poll_interval_seconds": self.poll_interval_seconds,
            "request_timeout_seconds": self.request_timeout_seconds,
            "verify_upload": self.verify_upload,
            "cleanup_archive": self.cleanup_archive,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.redacted().items())
        return f"DeployConfig({fields})"

    @classmethod
    def from_env(cls) -> "DeployConfig":
        # 필수값
        missing: List[str] = []

        def req(*names: str) -> str:
            val = _first_env(*names)
            if not val:
                missing.append(names[-1])
            return val or ""

        distribution_directory = req("INPUT_DISTRIBUTIONDIRECTORY", "DISTRIBUTION_DIRECTORY")
        application_name = req("INPUT_APPLICATIONNAME", "APPLICATION_NAME")
        api_key = req("INPUT_APIKEY", "CONTROL_PLANE_API_KEY")

        if missing:
            raise ValueError(
                "필수 환경변수가 누락되었습니다: " + ", ".join(sorted(set(missing)))
            )

        return cls(
            distribution_directory=distribution_directory,
            application_name=application_name,
            api_key=api_key,
            max_wait_seconds=_get_float("MAX_WAIT_SECONDS", DEFAULT_MAX_WAIT_SECONDS),
            poll_interval_seconds=_get_float("POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS),
            request_timeout_seconds=_get_float("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS),
            verify_upload=_get_bool("VERIFY_UPLOAD", True),
            cleanup_archive=_get_bool("CLEANUP_ARCHIVE", False),
        )
