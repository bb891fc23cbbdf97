"""
uploader
--------

배포 시작 응답으로 받은 presigned URL 에 zip 파일을 그대로 PUT 하는 모듈.
재시도는 하지 않는다.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import requests

from .errors import UploadError
from .logging_utils import get_logger


logger = get_logger(__name__)

DEFAULT_UPLOAD_TIMEOUT_SECONDS = 300.0


def upload_archive(
    url: str,
    archive_path: Union[str, Path],
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    verify: bool = True,
) -> Optional[int]:
    """
    archive_path 의 바이트를 url 로 PUT 한다. 별도 헤더는 붙이지 않는다.

    verify=True 이면 전송 실패/2xx 가 아닌 응답에서 UploadError 를 던지고,
    verify=False 이면 경고 로그만 남기고 진행한다.

    Returns:
        응답 status code (전송 자체가 실패했고 verify=False 이면 None)
    """
    path = Path(archive_path)
    body = path.read_bytes()
    logger.info("아카이브 업로드: %s (%d bytes)", path.name, len(body))

    put = session.put if session is not None else requests.put
    try:
        response = put(url, data=body, timeout=timeout)
    except requests.RequestException as e:
        if verify:
            raise UploadError(f"아카이브 업로드 요청 실패: {e}") from e
        logger.warning("아카이브 업로드 요청 실패 (검증 생략): %s", e)
        return None

    status = response.status_code
    if not 200 <= status < 300:
        if verify:
            raise UploadError(f"아카이브 업로드 실패: HTTP {status}")
        logger.warning("아카이브 업로드 응답이 성공이 아닙니다 (검증 생략): HTTP %s", status)
    else:
        logger.info("아카이브 업로드 완료 (HTTP %s)", status)
    return status
