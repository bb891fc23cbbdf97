"""
deploy_action
-------------

CI 커밋마다 빌드 산출물 디렉토리를 zip 으로 묶어 컨트롤 플레인에 배포하는 CLI 패키지.
배포 시작(GraphQL) → presigned URL 업로드 → 애플리케이션 조회 → 배포 완료 대기 순서로 동작한다.
"""

__all__ = [
    "config",
    "orchestrator",
]
