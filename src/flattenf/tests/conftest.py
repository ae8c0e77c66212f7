"""
测试公共夹具
"""
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, Iterable

import pytest
from loguru import logger

from flattenf.core.catalog import Catalog
from flattenf.core.git import GitRepo
from flattenf.core.models import Package

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="需要 git")


def make_files(root: Path, files: Dict[str, str]) -> None:
    """按 {相对路径: 内容} 创建文件"""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def snapshot(root: Path) -> Dict[str, str]:
    """记录目录树（不跟随符号链接），用于比较前后是否变化"""
    result = {}
    for dirpath, dirs, files in os.walk(root):
        dirs[:] = [d for d in dirs if d != ".git"]
        for name in dirs + files:
            path = Path(dirpath) / name
            rel = str(path.relative_to(root))
            if path.is_symlink():
                result[rel] = "link:" + os.readlink(path)
            elif path.is_dir():
                result[rel] = "dir"
            else:
                result[rel] = "file:" + path.read_text()
    return result


def catalog_from_names(names: Iterable[str], **settings) -> Catalog:
    """用包名列表直接构造目录（全部使用默认 target）"""
    return Catalog(packages=tuple(Package(name=n) for n in names), **settings)


def git(root: Path, *args: str) -> str:
    return subprocess.run(
        ["git", "-C", str(root), *args], check=True, capture_output=True, text=True
    ).stdout.strip()


def init_repo(root: Path) -> GitRepo:
    root.mkdir(parents=True, exist_ok=True)
    git(root, "init", "-q")
    git(root, "symbolic-ref", "HEAD", "refs/heads/main")
    git(root, "config", "user.email", "test@example.com")
    git(root, "config", "user.name", "Test")
    git(root, "config", "commit.gpgsign", "false")
    return GitRepo(root)


def commit_all(root: Path, message: str = "init") -> str:
    git(root, "add", "-A")
    git(root, "commit", "-q", "-m", message)
    return git(root, "rev-parse", "HEAD")


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI 测试会把 loguru 输出绑定到 CliRunner 的流上，测试后清除"""
    yield
    logger.remove()


@pytest.fixture
def dotfiles(tmp_path):
    """没有 git 的 dotfiles 仓库目录"""
    root = tmp_path / "dotfiles"
    root.mkdir()
    return root


@pytest.fixture
def no_git(dotfiles):
    """标记为不可用的 GitRepo"""
    repo = GitRepo(dotfiles)
    repo._available = False
    return repo


@pytest.fixture
def git_repo(tmp_path):
    """带有 git 的 dotfiles 仓库"""
    if shutil.which("git") is None:
        pytest.skip("需要 git")
    return init_repo(tmp_path / "dotfiles")
