"""
迁移服务模块 - 整合所有组件的高级服务接口
"""
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from loguru import logger

from .catalog import Catalog
from .git import GitError, GitRepo
from .layout_migrator import LayoutMigrator
from .models import (
    ErrorKind,
    MigrationError,
    Package,
    RunSummary,
    VerificationReport,
)
from .safety import ConfirmCallback, SafetyGuard
from .verifier import verify


def _always_no(question: str) -> bool:
    return False


class MigrationService:
    """迁移服务类 - 按目录顺序逐个迁移包"""

    def __init__(
        self,
        catalog: Catalog,
        repo_root: Union[str, Path],
        console: Console = None,
        confirm: Optional[ConfirmCallback] = None,
        git: Optional[GitRepo] = None,
    ):
        self.catalog = catalog
        self.repo_root = Path(repo_root).resolve()
        self.console = console or Console()
        self.git = git or GitRepo(self.repo_root)
        self.migrator = LayoutMigrator(
            self.repo_root, self.git, self.console, proxy_style=catalog.proxy_style
        )
        self.guard = SafetyGuard(self.git, confirm or _always_no, self.console)

    def select_packages(self, package: Optional[str] = None, continue_from: Optional[str] = None) -> Tuple[Package, ...]:
        return self.catalog.select(package=package, continue_from=continue_from)

    def prepare(self, summary: RunSummary, backup: bool = True, branch: bool = True) -> None:
        """迁移开始前的安全检查、备份和分支"""
        if not self.git.available:
            logger.warning(f"{self.repo_root} 不是可用的 git 仓库，将直接移动文件且不会提交")
        self.guard.ensure_clean(summary.dry_run)
        if backup:
            summary.backup_path = self.guard.create_backup(self.catalog.backup_dir, summary.dry_run)
        if branch:
            summary.branch = self.catalog.branch
            summary.branch_created = self.guard.ensure_branch(self.catalog.branch, summary.dry_run)

    def run(
        self,
        packages: Optional[Iterable[Package]] = None,
        dry_run: bool = False,
        stop_on_error: bool = False,
        backup: bool = True,
        branch: bool = True,
    ) -> RunSummary:
        """执行迁移

        Args:
            packages: 要迁移的包，默认为目录中的全部包
            dry_run: 只预览，不修改文件系统和 git
            stop_on_error: 目标冲突时是否停止后续包
            backup: 是否先创建备份
            branch: 是否切换到迁移分支

        Returns:
            RunSummary: 每个包的结果和错误
        """
        packages = tuple(packages) if packages is not None else self.catalog.packages
        summary = RunSummary(dry_run=dry_run)

        if not self.repo_root.is_dir():
            summary.errors.append(MigrationError(
                ErrorKind.NOT_FOUND, f"仓库目录不存在: {self.repo_root}", path=self.repo_root
            ))
            summary.aborted = True
            logger.error(f"仓库目录不存在: {self.repo_root}")
            return summary

        try:
            self.prepare(summary, backup=backup, branch=branch)
        except MigrationError as e:
            logger.error(str(e))
            summary.errors.append(e)
            summary.aborted = True
            return summary
        except GitError as e:
            logger.error(str(e))
            summary.errors.append(MigrationError(ErrorKind.VERSION_CONTROL_UNAVAILABLE, str(e)))
            summary.aborted = True
            return summary

        for pkg in packages:
            self.console.print(Rule(f"[bold]{escape(pkg.name)}[/bold]", align="left"))
            try:
                outcome = self.migrator.migrate_package(pkg, dry_run=dry_run)
            except MigrationError as e:
                logger.error(f"{pkg.name}: {e}")
                summary.errors.append(e)
                if e.fatal or stop_on_error:
                    summary.aborted = True
                    logger.error(f"中止迁移，可在修复后使用 --continue-from {pkg.name} 继续")
                    break
                continue
            summary.outcomes.append(outcome)

        if not dry_run:
            summary.report = self.verify()
        return summary

    def verify(self) -> VerificationReport:
        """验证目录中列出的最终路径"""
        logger.info("验证符号链接...")
        return verify(self.catalog.verify_paths)
