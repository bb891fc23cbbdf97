import sys
from dataclasses import replace
from typing import NoReturn, Optional

import click

from .ci_report import set_failed, write_outputs
from .config import load_env_files, DeployConfig
from .control_plane import ControlPlaneClient
from .errors import DeployError, DeploymentTimeoutError
from .gitinfo import resolve_commit_hash
from .logging_utils import setup_logging, get_logger
from .orchestrator import plan_all, run_deployment


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리 (기본: 현재 디렉토리). 배포 디렉토리와 zip 경로의 기준이 됩니다.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다. (-vv 는 HTTP 커넥션 로그까지 출력)",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """컨트롤 플레인 배포용 CLI (CI 커밋마다 실행)"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_config_from_ctx(ctx: click.Context) -> DeployConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    cfg = DeployConfig.from_env()
    logger.debug("Config loaded: %r", cfg)
    return cfg


def _fail(message: str) -> NoReturn:
    click.echo(f"[ERROR] {message}", err=True)
    set_failed(message)
    sys.exit(1)


@main.command()
@click.option("--commit", "commit", type=str, default=None, help="배포할 커밋 해시 (기본: GITHUB_SHA)")
@click.pass_context
def plan(ctx: click.Context, commit: Optional[str]) -> None:
    """현재 설정과 실행될 단계를 출력 (네트워크 호출 없음)"""
    try:
        cfg = _load_config_from_ctx(ctx)
    except Exception as e:  # noqa: BLE001
        _fail(f"설정 로드 실패: {e}")

    base_dir: str = ctx.obj["chdir"]
    try:
        commit_hash: Optional[str] = resolve_commit_hash(commit, cwd=base_dir)
    except ValueError:
        commit_hash = None

    click.echo(plan_all(cfg, commit_hash, base_dir=base_dir))


@main.command(name="deploy")
@click.option("--commit", "commit", type=str, default=None, help="배포할 커밋 해시 (기본: GITHUB_SHA)")
@click.option(
    "--cleanup-archive",
    "cleanup_archive",
    is_flag=True,
    default=False,
    help="업로드 후 로컬 zip 파일을 삭제합니다.",
)
@click.pass_context
def deploy(ctx: click.Context, commit: Optional[str], cleanup_archive: bool) -> None:
    """빌드 산출물을 압축/업로드하고 배포 완료까지 대기"""
    try:
        cfg = _load_config_from_ctx(ctx)
        if cleanup_archive:
            cfg = replace(cfg, cleanup_archive=True)
    except Exception as e:  # noqa: BLE001
        _fail(f"설정 로드 실패: {e}")

    base_dir: str = ctx.obj["chdir"]

    try:
        commit_hash = resolve_commit_hash(commit, cwd=base_dir)
    except ValueError as e:
        _fail(str(e))

    try:
        summary = run_deployment(cfg, commit_hash, base_dir=base_dir)
    except DeploymentTimeoutError as e:
        write_outputs(deployment_id=e.deployment_id, status=e.last_status or "TIMED_OUT")
        _fail(str(e))
    except DeployError as e:
        logger.debug("배포 중 오류 발생", exc_info=True)
        _fail(f"배포 실패: {e}")

    write_outputs(
        deployment_id=summary.deployment_id,
        application_id=summary.application_id,
        archive_path=str(summary.archive_path),
        status=summary.poll.last_status,
    )
    click.echo(summary.render())
    click.echo("Deployment complete!")


@main.command()
@click.option("--deployment-id", "deployment_id", type=str, required=True, help="조회할 배포 ID")
@click.pass_context
def status(ctx: click.Context, deployment_id: str) -> None:
    """배포 상태를 한 번 조회하여 출력"""
    try:
        cfg = _load_config_from_ctx(ctx)
    except Exception as e:  # noqa: BLE001
        _fail(f"설정 로드 실패: {e}")

    try:
        with ControlPlaneClient(cfg.api_key, timeout=cfg.request_timeout_seconds) as client:
            application = client.get_application_by_name(cfg.application_name)
            deployment = client.get_deployment(application.id, deployment_id)
    except DeployError as e:
        _fail(f"상태 조회 실패: {e}")

    click.echo(f"- application: {cfg.application_name} ({application.id})")
    click.echo(f"- deployment: {deployment_id}")
    click.echo(f"- commit: {deployment.commit_hash or '-'}")
    click.echo(f"- status: {deployment.status or '-'}")
