"""
flattenf 包的命令行入口点，使用 Typer 实现命令行界面
"""
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from loguru import logger

from flattenf.core.catalog import CatalogError, load_catalog
from flattenf.core.migration_service import MigrationService
from flattenf.ui.interactive import InteractiveUI

# 创建 Typer 应用
app = typer.Typer(help="Dotfiles 展平迁移工具 - 将 <pkg>/.config/<pkg>/* 移动到 <pkg>/* 并保留代理链接", add_completion=False)

DEFAULT_LOG_ROOT = Path.home() / ".flattenf"


def setup_logger(app_name="app", project_root=None, console_output=True, level="INFO"):
    """配置 Loguru 日志系统

    Args:
        app_name: 应用名称，用于日志目录
        project_root: 日志根目录，默认为 ~/.flattenf
        console_output: 是否输出到控制台，默认为True
        level: 控制台日志级别

    Returns:
        tuple: (logger, config_info)
            - logger: 配置好的 logger 实例
            - config_info: 包含日志配置信息的字典
    """
    if project_root is None:
        project_root = DEFAULT_LOG_ROOT

    # 清除默认处理器
    logger.remove()

    # 有条件地添加控制台处理器（简洁版格式）
    if console_output:
        logger.add(
            sys.stdout,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level.icon} {level: <8}</level> | <level>{message}</level>"
        )

    # 使用 datetime 构建日志路径
    current_time = datetime.now()
    date_str = current_time.strftime("%Y-%m-%d")
    hour_str = current_time.strftime("%H")
    minute_str = current_time.strftime("%M%S")

    # 构建日志目录和文件路径
    log_dir = os.path.join(project_root, "logs", app_name, date_str, hour_str)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"{minute_str}.log")

    # 添加文件处理器
    logger.add(
        log_file,
        level="DEBUG",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        encoding="utf-8",
        format="{time:YYYY-MM-DD HH:mm:ss} | {elapsed} | {level.icon} {level: <8} | {name}:{function}:{line} - {message}",
    )

    config_info = {
        'log_file': log_file,
    }

    logger.info(f"日志系统已初始化，应用名称: {app_name}")
    return logger, config_info


@app.command()
def flatten(
    repo: Path = typer.Option(Path.home() / "dotfiles", "--repo", "-r", envvar="REPO_DIR", help="dotfiles 仓库根目录"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="预览模式，不实际执行操作"),
    package: Optional[str] = typer.Option(None, "--package", "-p", help="只迁移指定的包"),
    continue_from: Optional[str] = typer.Option(None, "--continue-from", help="跳过目录中该包之前的所有包"),
    verify_only: bool = typer.Option(False, "--verify", help="只验证符号链接"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="包目录 TOML 文件，默认使用内置目录"),
    yes: bool = typer.Option(False, "--yes", "-y", help="所有确认提示自动回答是"),
    stop_on_error: bool = typer.Option(False, "--stop-on-error", help="遇到目标冲突时停止后续包"),
    no_backup: bool = typer.Option(False, "--no-backup", help="不创建备份"),
    no_branch: bool = typer.Option(False, "--no-branch", help="不切换到迁移分支"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", envvar="FLATTENF_LOG_DIR", help="日志根目录"),
):
    """展平 dotfiles 仓库中的嵌套包，并在旧位置留下代理符号链接"""
    setup_logger(app_name="flattenf", project_root=log_dir, level="DEBUG" if verbose else "INFO")
    console = Console()

    try:
        catalog = load_catalog(config)
    except (CatalogError, OSError) as e:
        raise typer.BadParameter(str(e), param_hint="--config")

    ui = InteractiveUI(console, assume_yes=yes)
    repo = repo.expanduser().resolve()
    service = MigrationService(catalog, repo, console=console, confirm=ui.confirm)

    if verify_only:
        report = service.verify()
        ui.show_report(report)
        raise typer.Exit(code=0 if report.success else 1)

    if package and continue_from:
        raise typer.BadParameter("--package 和 --continue-from 不能同时使用", param_hint="--continue-from")
    try:
        packages = service.select_packages(package=package, continue_from=continue_from)
    except KeyError as e:
        hint = "--package" if package else "--continue-from"
        raise typer.BadParameter(f"目录中没有包: {e.args[0]}", param_hint=hint)

    ui.show_header(repo, dry_run)
    summary = service.run(
        packages,
        dry_run=dry_run,
        stop_on_error=stop_on_error,
        backup=not no_backup,
        branch=not no_branch,
    )

    if summary.report is not None:
        ui.show_report(summary.report)
    ui.show_summary(summary)
    if summary.ok:
        ui.show_next_steps(summary)
    raise typer.Exit(code=0 if summary.ok else 1)


if __name__ == "__main__":
    app()
