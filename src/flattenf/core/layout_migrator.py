"""
布局迁移核心模块 - 将 <pkg>/.config/<pkg>/* 展平为 <pkg>/*，并在旧位置留下代理符号链接
"""
import os
import shutil
from pathlib import Path
from typing import List, Optional, Tuple, Union

from rich.console import Console
from rich.markup import escape
from loguru import logger

from .git import GitError, GitRepo
from .models import (
    ErrorKind,
    LayoutState,
    MigrationError,
    MigrationOutcome,
    OutcomeStatus,
    Package,
    PlannedAction,
)


class LayoutMigrator:
    """布局迁移器类"""

    def __init__(
        self,
        repo_root: Union[str, Path],
        git: Optional[GitRepo] = None,
        console: Console = None,
        proxy_style: str = "relative",
    ):
        self.repo_root = Path(repo_root).resolve()
        self.git = git
        self.console = console or Console()
        self.proxy_style = proxy_style

    @property
    def use_git(self) -> bool:
        return self.git is not None and self.git.available

    def package_dir(self, pkg: Package) -> Path:
        return self.repo_root / pkg.name

    def nested_path(self, pkg: Package) -> Path:
        return self.package_dir(pkg).joinpath(*pkg.target_parts)

    def find_proxy(self, pkg: Package) -> Optional[Path]:
        """沿嵌套路径逐级查找已存在的代理符号链接"""
        current = self.package_dir(pkg)
        for part in pkg.target_parts:
            current = current / part
            if current.is_symlink():
                return current
        return None

    def detect_state(self, pkg: Package) -> LayoutState:
        """检查文件系统，得到包当前的布局状态"""
        pkg_dir = self.package_dir(pkg)
        if not pkg_dir.is_dir():
            return LayoutState.ABSENT
        if self.find_proxy(pkg) is not None:
            return LayoutState.ALREADY_FLAT

        nested = self.nested_path(pkg)
        # 没有代理链接的包只看扁平位置，旧的嵌套副本保持不动
        if not pkg.proxy and os.path.lexists(pkg_dir / nested.name):
            return LayoutState.ALREADY_FLAT
        if nested.is_file():
            if nested.parent == pkg_dir:
                return LayoutState.ALREADY_FLAT
            return LayoutState.NESTED_SINGLE_FILE
        if nested.is_dir():
            if any(nested.iterdir()):
                return LayoutState.NESTED_DIRECTORY
        return LayoutState.ABSENT

    def source_dir(self, pkg: Package, state: LayoutState) -> Path:
        """需要被展平到包根目录的那一层目录"""
        nested = self.nested_path(pkg)
        return nested.parent if state == LayoutState.NESTED_SINGLE_FILE else nested

    def proxy_link_text(self, pkg: Package, link_path: Path) -> str:
        pkg_dir = self.package_dir(pkg)
        if self.proxy_style == "absolute":
            return str(pkg_dir.absolute())
        return os.path.relpath(pkg_dir, link_path.parent)

    def commit_message(self, pkg: Package, state: LayoutState) -> str:
        if state == LayoutState.NESTED_SINGLE_FILE:
            return f"flatten: {pkg.name}/{pkg.target_path} -> {pkg.name}/{self.nested_path(pkg).name}"
        return f"flatten: {pkg.name}/{pkg.target_path} -> {pkg.name}"

    def plan(self, pkg: Package, state: LayoutState) -> List[PlannedAction]:
        """计算迁移步骤，不修改任何东西

        Raises:
            MigrationError: 任一移动目标已存在 (DESTINATION_CONFLICT)
        """
        pkg_dir = self.package_dir(pkg)
        source_dir = self.source_dir(pkg, state)
        actions: List[PlannedAction] = []

        for entry in sorted(source_dir.iterdir()):
            # git 无法跟踪空目录，保留它没有意义
            if entry.is_dir() and not entry.is_symlink() and not any(entry.iterdir()):
                actions.append(PlannedAction("skip_empty", source=entry))
                continue
            target = pkg_dir / entry.name
            if os.path.lexists(target):
                raise MigrationError(
                    ErrorKind.DESTINATION_CONFLICT,
                    f"目标已存在: {target}",
                    package=pkg.name,
                    path=target,
                )
            actions.append(PlannedAction("move", source=entry, target=target))

        actions.append(PlannedAction("remove_dir", source=source_dir))
        if pkg.proxy:
            actions.append(PlannedAction(
                "symlink",
                source=source_dir,
                target=pkg_dir,
                detail=self.proxy_link_text(pkg, source_dir),
            ))
        actions.append(PlannedAction("commit", target=pkg_dir, detail=self.commit_message(pkg, state)))
        return actions

    def migrate_package(self, pkg: Package, dry_run: bool = False) -> MigrationOutcome:
        """迁移单个包

        Args:
            pkg: 包描述
            dry_run: 只回显计划中的步骤，不执行

        Returns:
            MigrationOutcome

        Raises:
            MigrationError: 目标冲突、移动失败或符号链接创建失败
        """
        logger.info(f"迁移: {pkg.name}")
        state = self.detect_state(pkg)

        if state == LayoutState.ABSENT:
            logger.warning(f"  跳过 {pkg.name}: 未找到 {pkg.name}/{pkg.target_path}")
            return MigrationOutcome(pkg.name, OutcomeStatus.SKIPPED, "source not found", state)
        if state == LayoutState.ALREADY_FLAT:
            logger.info(f"  {pkg.name} 已迁移（代理链接已存在）")
            return MigrationOutcome(pkg.name, OutcomeStatus.SKIPPED, "already migrated", state)

        actions = self.plan(pkg, state)
        shape = "文件" if state == LayoutState.NESTED_SINGLE_FILE else "目录"
        self.console.print(f"  结构: {escape(pkg.name)}/{escape(pkg.target_path)} ({shape})")
        for action in actions:
            self._echo(action, dry_run)

        if dry_run:
            return MigrationOutcome(pkg.name, OutcomeStatus.PLANNED, "dry run", state, actions)

        commit_action = actions[-1]
        for action in actions:
            if action.kind == "move":
                self._move(pkg, action.source, action.target)
            elif action.kind == "remove_dir":
                self._remove_emptied_dir(pkg, action.source)
            elif action.kind == "symlink":
                self._create_proxy(pkg, action.source, action.detail)

        sha, reason = self._commit(pkg, commit_action)
        if sha is None:
            # 文件已经移动，但没有形成检查点
            return MigrationOutcome(pkg.name, OutcomeStatus.SKIPPED, reason, state, actions)
        return MigrationOutcome(pkg.name, OutcomeStatus.MIGRATED, "migrated", state, actions, sha)

    def _echo(self, action: PlannedAction, dry_run: bool) -> None:
        message = escape(action.describe())
        if dry_run:
            self.console.print(f"    [yellow]\\[DRY-RUN][/yellow] {message}")
        else:
            self.console.print(f"    {message}")
        logger.debug(action.describe())

    def _move(self, pkg: Package, source: Path, target: Path) -> None:
        """优先使用 git mv 以保留重命名记录，未跟踪的路径直接移动"""
        try:
            if self.use_git and self.git.is_tracked(source):
                self.git.mv(source, target)
            else:
                shutil.move(str(source), str(target))
        except (OSError, GitError) as e:
            raise MigrationError(
                ErrorKind.MOVE_FAILED,
                f"移动 '{source}' 到 '{target}' 失败: {e}",
                package=pkg.name,
                path=source,
            ) from e

    def _remove_emptied_dir(self, pkg: Package, directory: Path) -> None:
        """删除已搬空的目录树；仍有文件残留时视为移动失败"""
        try:
            for root, dirs, files in os.walk(directory, topdown=False):
                if files:
                    raise OSError(f"目录中仍有文件: {Path(root) / files[0]}")
                for d in dirs:
                    sub = Path(root) / d
                    if sub.is_symlink():
                        raise OSError(f"目录中仍有符号链接: {sub}")
                    sub.rmdir()
            directory.rmdir()
        except OSError as e:
            raise MigrationError(
                ErrorKind.MOVE_FAILED,
                f"删除目录 '{directory}' 失败: {e}",
                package=pkg.name,
                path=directory,
            ) from e

        if not pkg.proxy:
            # 没有代理链接时，向上清理空的中间目录
            pkg_dir = self.package_dir(pkg)
            parent = directory.parent
            while parent != pkg_dir and not any(parent.iterdir()):
                parent.rmdir()
                parent = parent.parent

    def _create_proxy(self, pkg: Package, link_path: Path, link_text: str) -> None:
        try:
            link_path.parent.mkdir(parents=True, exist_ok=True)
            link_path.symlink_to(link_text, target_is_directory=True)
        except OSError as e:
            raise MigrationError(
                ErrorKind.SYMLINK_CREATION_FAILED,
                f"创建代理链接 '{link_path}' -> '{link_text}' 失败: {e}",
                package=pkg.name,
                path=link_path,
            ) from e
        logger.debug(f"代理链接: {link_path} -> {link_text}")

    def _commit(self, pkg: Package, action: PlannedAction) -> Tuple[Optional[str], str]:
        """暂存包目录并提交

        Returns:
            (sha, reason)，未能提交时 sha 为 None，reason 说明原因
        """
        if not self.use_git:
            logger.warning(f"  git 不可用，跳过提交: {pkg.name}")
            return None, "version control unavailable"
        try:
            self.git.add(action.target)
            if not self.git.has_staged_changes():
                logger.warning(f"  {pkg.name} 没有可提交的修改，跳过提交")
                return None, "nothing to commit"
            sha = self.git.commit(action.detail)
        except GitError as e:
            logger.warning(f"  提交 {pkg.name} 失败，跳过: {e}")
            return None, "commit failed"
        self.console.print(f"  [green]已提交[/green] {sha[:8]}")
        logger.info(f"  已提交 {pkg.name}: {sha}")
        return sha, "migrated"
