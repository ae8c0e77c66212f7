"""
flattenf - dotfiles 展平迁移工具

将 stow 管理的 <pkg>/.config/<pkg>/* 嵌套布局迁移为 <pkg>/* 扁平布局，
并在旧位置留下代理符号链接，$HOME 下已有的链接无需修改即可继续使用。
"""

from .core.catalog import Catalog, CatalogError, load_catalog
from .core.layout_migrator import LayoutMigrator
from .core.migration_service import MigrationService
from .core.models import (
    ErrorKind,
    LayoutState,
    MigrationError,
    MigrationOutcome,
    OutcomeStatus,
    Package,
    VerificationReport,
    VerifyStatus,
)
from .core.verifier import verify

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "CatalogError",
    "ErrorKind",
    "LayoutMigrator",
    "LayoutState",
    "MigrationError",
    "MigrationOutcome",
    "MigrationService",
    "OutcomeStatus",
    "Package",
    "VerificationReport",
    "VerifyStatus",
    "load_catalog",
    "verify",
]
