"""
archiver
--------

배포 디렉토리를 커밋 해시 이름의 zip 파일로 묶는 모듈.
디렉토리 자체가 아니라 디렉토리 "내용"이 zip 루트에 들어간다.
"""

from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Dict, FrozenSet, Union

from .errors import ArchiveError
from .logging_utils import get_logger


logger = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def archive_name_for(commit_hash: str) -> str:
    return f"{commit_hash}.zip"


def create_archive(source_dir: PathLike, name: str, output_dir: PathLike = ".") -> Path:
    """
    source_dir 의 전체 내용을 output_dir/name 으로 압축한다.

    Raises:
        ArchiveError: source_dir 이 없거나 디렉토리가 아닌 경우, 또는 쓰기에 실패한 경우
    """
    source = Path(source_dir)
    if not source.is_dir():
        raise ArchiveError(f"배포 디렉토리가 존재하지 않습니다: {source}")

    archive_path = Path(output_dir) / name
    # 결과 zip 이 source 안에 있으면 자기 자신을 넣지 않도록 제외
    resolved_archive = archive_path.resolve()

    logger.info("아카이브 생성: %s -> %s", source, archive_path)

    count = 0
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zipf:
            # 심볼릭 링크 디렉토리도 따라간다. 상위 경로와 같은 실제 디렉토리로 돌아오는 링크(순환)만 건너뛴다.
            ancestors: Dict[str, FrozenSet[str]] = {}
            for dirpath, dirnames, filenames in os.walk(source, followlinks=True):
                real_dir = os.path.realpath(dirpath)
                chain = ancestors.get(os.path.dirname(dirpath), frozenset())
                if real_dir in chain:
                    logger.warning("순환 심볼릭 링크를 건너뜁니다: %s", dirpath)
                    dirnames[:] = []
                    continue
                ancestors[dirpath] = chain | {real_dir}
                dirnames.sort()
                current = Path(dirpath)
                rel_dir = current.relative_to(source)
                if rel_dir != Path("."):
                    zipf.write(current, arcname=rel_dir.as_posix() + "/")
                for filename in sorted(filenames):
                    file_path = current / filename
                    if file_path.resolve() == resolved_archive:
                        continue
                    zipf.write(file_path, arcname=(rel_dir / filename).as_posix())
                    count += 1
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        archive_path.unlink(missing_ok=True)
        raise ArchiveError(f"아카이브 생성 실패: {archive_path} ({e})") from e

    logger.info("아카이브 생성 완료: %s (파일 %d개, %d bytes)", archive_path, count, archive_path.stat().st_size)
    return archive_path
