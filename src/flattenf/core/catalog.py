"""
包目录配置模块 - 从 TOML 加载不可变的包目录
"""
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Tuple

import tomli
from loguru import logger

from .models import Package

# 默认目录文件，随包分发
DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "catalog.toml"

DEFAULT_VERIFY_PATHS = (
    "~/.config/nvim",
    "~/.config/hypr",
    "~/.config/kitty",
    "~/.zshrc",
)

PROXY_STYLES = ("relative", "absolute")


class CatalogError(ValueError):
    """目录文件内容无效"""


@dataclass(frozen=True)
class Catalog:
    """程序启动时加载一次，运行期间不再修改"""
    packages: Tuple[Package, ...] = ()
    verify_paths: Tuple[str, ...] = DEFAULT_VERIFY_PATHS
    branch: str = "flatten-migration"
    backup_dir: str = "~"
    proxy_style: str = "relative"
    source: Optional[Path] = field(default=None, compare=False)

    def names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.packages)

    def get(self, name: str) -> Package:
        for package in self.packages:
            if package.name == name:
                return package
        raise KeyError(name)

    def select(self, package: Optional[str] = None, continue_from: Optional[str] = None) -> Tuple[Package, ...]:
        """按 --package / --continue-from 筛选包

        Raises:
            KeyError: 包名不在目录中
        """
        if package:
            return (self.get(package),)
        if continue_from:
            names = self.names()
            if continue_from not in names:
                raise KeyError(continue_from)
            return self.packages[names.index(continue_from):]
        return self.packages


def _validate_target(name: str, target: str) -> str:
    parts = PurePosixPath(target).parts
    if not parts or PurePosixPath(target).is_absolute() or ".." in parts:
        raise CatalogError(f"包 '{name}' 的 target 无效: {target!r}")
    return str(PurePosixPath(*parts))


def parse_catalog(data: Dict[str, Any], source: Optional[Path] = None) -> Catalog:
    """将 TOML 解析结果转换为 Catalog"""
    settings = data.get("settings", {})
    proxy_style = settings.get("proxy_style", "relative")
    if proxy_style not in PROXY_STYLES:
        raise CatalogError(f"未知的 proxy_style: {proxy_style!r}，支持: {', '.join(PROXY_STYLES)}")

    packages = []
    seen = set()
    for item in data.get("packages", []):
        name = item.get("name", "")
        if not name or "/" in name:
            raise CatalogError(f"包名无效: {name!r}")
        if name in seen:
            raise CatalogError(f"包名重复: {name}")
        seen.add(name)
        target = item.get("target") or f".config/{name}"
        packages.append(Package(
            name=name,
            target_path=_validate_target(name, target),
            proxy=bool(item.get("proxy", True)),
        ))

    verify_paths = tuple(data.get("verify", {}).get("paths", DEFAULT_VERIFY_PATHS))

    return Catalog(
        packages=tuple(packages),
        verify_paths=verify_paths,
        branch=settings.get("branch", "flatten-migration"),
        backup_dir=settings.get("backup_dir", "~"),
        proxy_style=proxy_style,
        source=source,
    )


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """从 TOML 文件加载目录

    Args:
        path: 目录文件路径，默认为包内的 catalog.toml

    Returns:
        Catalog
    """
    path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(path, "rb") as f:
            data = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise CatalogError(f"目录文件格式错误 {path}: {e}") from e
    catalog = parse_catalog(data, source=path)
    logger.debug(f"已加载目录 {path}: {len(catalog.packages)} 个包")
    return catalog
