"""
安全检查模块 - 迁移前检查工作树、创建备份、切换到迁移分支
"""
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from rich.console import Console
from rich.markup import escape
from loguru import logger

from .git import GitError, GitRepo
from .models import ErrorKind, MigrationError

# 确认回调：接收问题文本，返回是否继续
ConfirmCallback = Callable[[str], bool]


def backup_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"dotfiles-backup-{now.strftime('%Y-%m-%d-%H%M%S')}"


class SafetyGuard:
    """迁移前的安全检查"""

    def __init__(self, git: GitRepo, confirm: ConfirmCallback, console: Console = None):
        self.git = git
        self.confirm = confirm
        self.console = console or Console()

    def ensure_clean(self, dry_run: bool = False) -> None:
        """检查仓库是否有未提交的修改，有则询问是否继续

        Raises:
            MigrationError: 用户拒绝继续 (DIRTY_REPOSITORY)
        """
        if not self.git.available:
            logger.warning("git 不可用，跳过工作树检查")
            return
        if dry_run:
            return
        if not self.git.has_uncommitted_changes():
            return
        logger.warning("仓库有未提交的修改")
        if not self.confirm("仓库有未提交的修改，仍要继续吗？"):
            raise MigrationError(
                ErrorKind.DIRTY_REPOSITORY,
                "仓库有未提交的修改，请先提交或暂存",
                path=self.git.root,
            )

    def create_backup(self, backup_dir: Union[str, Path], dry_run: bool = False) -> Path:
        """创建仓库备份，已存在的备份不会被覆盖

        有 git 时打包 HEAD 的已提交内容，否则打包整个工作目录

        Returns:
            Path: 备份文件路径
        """
        backup_dir = Path(os.path.expanduser(str(backup_dir)))
        stem = backup_name()
        backup_file = backup_dir / f"{stem}.tar.gz"
        logger.info(f"创建备份: {backup_file}")

        if dry_run:
            if self.git.available:
                self.console.print(f"  [yellow]\\[DRY-RUN][/yellow] git archive HEAD > {escape(str(backup_file))}")
            else:
                self.console.print(f"  [yellow]\\[DRY-RUN][/yellow] tar {escape(str(self.git.root))} > {escape(str(backup_file))}")
            return backup_file

        if backup_file.exists():
            raise MigrationError(ErrorKind.BACKUP_FAILED, f"备份文件已存在: {backup_file}", path=backup_file)

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            if self.git.available:
                self.git.archive(backup_file)
            else:
                logger.warning("git 不可用，直接打包工作目录")
                shutil.make_archive(
                    str(backup_dir / stem), "gztar",
                    root_dir=str(self.git.root.parent),
                    base_dir=self.git.root.name,
                )
        except (OSError, GitError) as e:
            raise MigrationError(ErrorKind.BACKUP_FAILED, f"创建备份失败: {e}", path=backup_file) from e

        self.console.print(f"  [green]备份已创建:[/green] {escape(str(backup_file))}")
        return backup_file

    def ensure_branch(self, name: str, dry_run: bool = False) -> bool:
        """切换到迁移分支，不存在则创建

        Returns:
            bool: 是否新建了分支

        Raises:
            MigrationError: 分支已存在且用户拒绝切换 (BRANCH_ABORTED)
        """
        if not self.git.available:
            logger.warning("git 不可用，跳过创建迁移分支")
            return False
        if dry_run:
            logger.info(f"将创建或切换到分支: {name}")
            return False

        current = self.git.current_branch()
        if current == name:
            logger.info(f"已在分支: {name}")
            return False

        if self.git.branch_exists(name):
            logger.warning(f"分支 '{name}' 已存在")
            if not self.confirm(f"分支 '{name}' 已存在，切换过去并继续吗？"):
                raise MigrationError(ErrorKind.BRANCH_ABORTED, f"已取消。请删除分支 '{name}' 或使用其他名称")
            self.git.checkout(name)
            logger.info(f"已切换到分支: {name}")
            return False

        logger.info(f"创建分支: {name} (基于 {current or 'HEAD'})")
        self.git.checkout(name, create=True)
        return True
