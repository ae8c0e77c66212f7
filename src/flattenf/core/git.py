"""
git 命令封装模块 - 通过子进程调用 git
"""
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger


class GitError(Exception):
    """git 命令执行失败"""

    def __init__(self, args: List[str], returncode: int, stderr: str = ""):
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(f"git {' '.join(args)} 失败 (退出码 {returncode}): {self.stderr}")


class GitRepo:
    """对单个仓库执行 git 命令"""

    def __init__(self, root: Union[str, Path], executable: Optional[str] = None):
        self.root = Path(root).resolve()
        self.executable = executable or shutil.which("git")
        self._available: Optional[bool] = None

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        """执行 git -C <root> <args>

        Args:
            args: git 子命令及参数
            check: 非零退出码时是否抛出 GitError

        Returns:
            subprocess.CompletedProcess
        """
        if not self.executable:
            raise GitError(list(args), 127, "未找到 git 可执行文件")
        cmd = [self.executable, "-C", str(self.root), *args]
        logger.debug(f"执行: {' '.join(cmd)}")
        result = subprocess.run(cmd, capture_output=True, text=True)
        if check and result.returncode != 0:
            raise GitError(list(args), result.returncode, result.stderr)
        return result

    @property
    def available(self) -> bool:
        """git 可用且 root 位于工作树内"""
        if self._available is None:
            if not self.executable or not self.root.is_dir():
                self._available = False
            else:
                result = self.run("rev-parse", "--is-inside-work-tree", check=False)
                self._available = result.returncode == 0 and result.stdout.strip() == "true"
        return self._available

    def has_uncommitted_changes(self) -> bool:
        """已跟踪文件是否有未提交的修改（含已暂存）"""
        unstaged = self.run("diff", "--quiet", check=False).returncode != 0
        staged = self.run("diff", "--cached", "--quiet", check=False).returncode != 0
        return unstaged or staged

    def has_staged_changes(self) -> bool:
        return self.run("diff", "--cached", "--quiet", check=False).returncode != 0

    def head(self) -> str:
        return self.run("rev-parse", "HEAD").stdout.strip()

    def current_branch(self) -> str:
        return self.run("branch", "--show-current").stdout.strip()

    def branch_exists(self, name: str) -> bool:
        result = self.run("rev-parse", "--verify", "--quiet", f"refs/heads/{name}", check=False)
        return result.returncode == 0

    def checkout(self, name: str, create: bool = False) -> None:
        if create:
            self.run("checkout", "-b", name)
        else:
            self.run("checkout", name)

    def archive(self, output: Path, ref: str = "HEAD") -> None:
        """将 ref 的已提交内容打包为 tar.gz"""
        self.run("archive", "--format=tar.gz", "-o", str(output), ref)

    def is_tracked(self, path: Path) -> bool:
        result = self.run("ls-files", "--error-unmatch", "--", str(path), check=False)
        return result.returncode == 0

    def mv(self, source: Path, target: Path) -> None:
        self.run("mv", "--", str(source), str(target))

    def add(self, *paths: Path) -> None:
        self.run("add", "-A", "--", *[str(p) for p in paths])

    def commit(self, message: str) -> str:
        """提交已暂存的修改，返回新提交的 sha"""
        self.run("commit", "-m", message)
        return self.head()
