"""
ci_report
---------

CI(GitHub Actions) 호스트에 실패/결과를 알리는 모듈.

- set_failed: `::error::` 워크플로 커맨드 출력
- write_outputs: $GITHUB_OUTPUT 에 key=value 기록 (없으면 무시)
"""

from __future__ import annotations

import os
import sys
from typing import Optional, TextIO


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_failed(message: str, *, stream: Optional[TextIO] = None) -> None:
    out = stream if stream is not None else sys.stdout
    out.write(f"::error::{_escape_data(message)}\n")
    out.flush()


def write_outputs(**values: object) -> bool:
    """
    GITHUB_OUTPUT 파일이 설정되어 있으면 값을 추가한다.
    키의 밑줄은 하이픈으로 바꾼다 (deployment_id -> deployment-id).
    """
    path = os.getenv("GITHUB_OUTPUT")
    if not path:
        return False

    with open(path, "a", encoding="utf-8") as f:
        for key, value in values.items():
            if value is None:
                continue
            f.write(f"{key.replace('_', '-')}={value}\n")
    return True
