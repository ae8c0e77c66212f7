"""
符号链接验证模块 - 检查迁移后 $HOME 下的链接是否仍然可以解析
"""
import os
from pathlib import Path
from typing import Iterable, Union

from loguru import logger

from .models import VerificationReport, VerifyEntry, VerifyStatus


def classify(path: Union[str, Path]) -> VerifyEntry:
    """对单个路径分类（不跟随最后一级符号链接）"""
    path = Path(os.path.expanduser(str(path)))
    if os.path.islink(path):
        link_target = os.readlink(path)
        if os.path.exists(path):
            return VerifyEntry(path, VerifyStatus.RESOLVED_SYMLINK, link_target)
        return VerifyEntry(path, VerifyStatus.BROKEN_SYMLINK, link_target)
    if os.path.exists(path):
        return VerifyEntry(path, VerifyStatus.DIRECT_ENTRY)
    return VerifyEntry(path, VerifyStatus.MISSING)


def verify(expected_paths: Iterable[Union[str, Path]]) -> VerificationReport:
    """逐个检查期望的最终路径

    Args:
        expected_paths: 期望存在的路径列表，支持 ~ 展开

    Returns:
        VerificationReport: 没有损坏的链接时 success 为 True
    """
    report = VerificationReport()
    for path in expected_paths:
        entry = classify(path)
        report.entries.append(entry)
        if entry.status == VerifyStatus.RESOLVED_SYMLINK:
            logger.info(f"  {entry.path} -> {entry.link_target}")
        elif entry.status == VerifyStatus.BROKEN_SYMLINK:
            logger.error(f"  {entry.path} -> {entry.link_target} (已损坏)")
        elif entry.status == VerifyStatus.DIRECT_ENTRY:
            logger.info(f"  {entry.path} (不是符号链接)")
        else:
            logger.warning(f"  {entry.path} (不存在)")

    if report.success:
        logger.info(f"验证完成: {report.resolved} 个链接正常")
    else:
        logger.error(f"验证失败: {report.broken} 个链接已损坏")
    return report
