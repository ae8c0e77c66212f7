"""flattenf 数据模型"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Optional


class LayoutState(str, Enum):
    """包在磁盘上的布局状态（每次迁移时从文件系统推导）"""
    ABSENT = "absent"
    ALREADY_FLAT = "already_flat"
    NESTED_DIRECTORY = "nested_directory"
    NESTED_SINGLE_FILE = "nested_single_file"


class OutcomeStatus(str, Enum):
    MIGRATED = "migrated"
    SKIPPED = "skipped"
    PLANNED = "planned"  # dry-run


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_DONE = "already_done"
    DESTINATION_CONFLICT = "destination_conflict"
    MOVE_FAILED = "move_failed"
    SYMLINK_CREATION_FAILED = "symlink_creation_failed"
    VERSION_CONTROL_UNAVAILABLE = "version_control_unavailable"
    DIRTY_REPOSITORY = "dirty_repository"
    BRANCH_ABORTED = "branch_aborted"
    BACKUP_FAILED = "backup_failed"


# 这些错误会中止整个迁移循环
FATAL_ERRORS = (ErrorKind.MOVE_FAILED, ErrorKind.SYMLINK_CREATION_FAILED)


class MigrationError(Exception):
    """迁移失败，携带错误类型"""

    def __init__(self, kind: ErrorKind, message: str, package: str = "", path: Optional[Path] = None):
        super().__init__(message)
        self.kind = kind
        self.package = package
        self.path = path

    @property
    def fatal(self) -> bool:
        return self.kind in FATAL_ERRORS


@dataclass(frozen=True)
class Package:
    """目录中定义的一个 dotfiles 包"""
    name: str
    target_path: str = ""  # 包目录内的嵌套路径，默认为 .config/<name>
    proxy: bool = True  # 迁移后是否在旧位置留下代理符号链接

    def __post_init__(self):
        if not self.target_path:
            object.__setattr__(self, "target_path", f".config/{self.name}")

    @property
    def target_parts(self) -> tuple:
        return PurePosixPath(self.target_path).parts


@dataclass
class PlannedAction:
    """计划中的单个步骤，dry-run 时只回显，不执行"""
    kind: str  # move | skip_empty | remove_dir | symlink | commit
    source: Optional[Path] = None
    target: Optional[Path] = None
    detail: str = ""

    def describe(self) -> str:
        if self.kind == "move":
            return f"移动: {self.source} -> {self.target}"
        if self.kind == "skip_empty":
            return f"跳过空目录: {self.source}"
        if self.kind == "remove_dir":
            return f"删除目录: {self.source}"
        if self.kind == "symlink":
            return f"创建代理链接: {self.source} -> {self.detail}"
        if self.kind == "commit":
            return f"提交: {self.detail}"
        return f"{self.kind}: {self.source}"


@dataclass
class MigrationOutcome:
    """单个包的迁移结果"""
    package: str
    status: OutcomeStatus
    reason: str = ""
    state: Optional[LayoutState] = None
    actions: List[PlannedAction] = field(default_factory=list)
    commit: Optional[str] = None  # 提交的 sha，未提交时为 None


class VerifyStatus(str, Enum):
    RESOLVED_SYMLINK = "resolved_symlink"
    BROKEN_SYMLINK = "broken_symlink"
    DIRECT_ENTRY = "direct_entry"
    MISSING = "missing"


@dataclass
class VerifyEntry:
    path: Path
    status: VerifyStatus
    link_target: str = ""


@dataclass
class VerificationReport:
    """符号链接验证报告"""
    entries: List[VerifyEntry] = field(default_factory=list)

    def count(self, status: VerifyStatus) -> int:
        return sum(1 for e in self.entries if e.status == status)

    @property
    def resolved(self) -> int:
        return self.count(VerifyStatus.RESOLVED_SYMLINK)

    @property
    def broken(self) -> int:
        return self.count(VerifyStatus.BROKEN_SYMLINK)

    @property
    def direct(self) -> int:
        return self.count(VerifyStatus.DIRECT_ENTRY)

    @property
    def missing(self) -> int:
        return self.count(VerifyStatus.MISSING)

    @property
    def success(self) -> bool:
        return self.broken == 0


@dataclass
class RunSummary:
    """一次运行的汇总"""
    outcomes: List[MigrationOutcome] = field(default_factory=list)
    errors: List[MigrationError] = field(default_factory=list)
    aborted: bool = False
    dry_run: bool = False
    backup_path: Optional[Path] = None
    branch: str = ""
    branch_created: bool = False
    report: Optional[VerificationReport] = None

    def by_status(self, status: OutcomeStatus) -> List[MigrationOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def ok(self) -> bool:
        return not self.errors and not self.aborted
