"""
用户界面模块 - 负责确认提示和结果展示
"""
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from ..core.models import (
    OutcomeStatus,
    RunSummary,
    VerificationReport,
    VerifyStatus,
)

STATUS_STYLES = {
    VerifyStatus.RESOLVED_SYMLINK: ("green", "链接正常"),
    VerifyStatus.BROKEN_SYMLINK: ("red", "链接损坏"),
    VerifyStatus.DIRECT_ENTRY: ("cyan", "不是链接"),
    VerifyStatus.MISSING: ("yellow", "不存在"),
}


class InteractiveUI:
    """交互式用户界面类"""

    def __init__(self, console: Console = None, assume_yes: bool = False):
        self.console = console or Console()
        self.assume_yes = assume_yes

    def confirm(self, question: str) -> bool:
        """确认回调，--yes 时直接返回 True"""
        if self.assume_yes:
            self.console.print(f"{escape(question)} [dim](--yes)[/dim]")
            return True
        return Confirm.ask(escape(question), default=False, console=self.console)

    def show_header(self, repo_root: Path, dry_run: bool) -> None:
        mode = "[yellow]DRY RUN[/yellow]" if dry_run else "[green]LIVE[/green]"
        self.console.print(Panel.fit(
            f"仓库: {escape(str(repo_root))}\n模式: {mode}",
            title="Dotfiles Flatten Migration",
            border_style="blue",
        ))

    def show_report(self, report: VerificationReport) -> None:
        table = Table(title="符号链接验证")
        table.add_column("路径", style="white", overflow="fold")
        table.add_column("状态")
        table.add_column("链接目标", style="dim", overflow="fold")
        for entry in report.entries:
            style, label = STATUS_STYLES[entry.status]
            table.add_row(escape(str(entry.path)), f"[{style}]{label}[/{style}]", escape(entry.link_target))
        self.console.print(table)

        if report.success:
            self.console.print(f"[bold green]全部链接验证通过[/bold green] ({report.resolved} 个正常)")
        else:
            self.console.print(f"[bold red]{report.broken} 个链接已损坏[/bold red]，可能需要执行: stow -R <package>")

    def show_summary(self, summary: RunSummary) -> None:
        table = Table(title="迁移总结")
        table.add_column("包", style="magenta")
        table.add_column("结果")
        table.add_column("说明", overflow="fold")
        for outcome in summary.outcomes:
            if outcome.status == OutcomeStatus.MIGRATED:
                table.add_row(outcome.package, "[green]已迁移[/green]", f"提交 {outcome.commit[:8]}")
            elif outcome.status == OutcomeStatus.PLANNED:
                table.add_row(outcome.package, "[yellow]计划中[/yellow]", f"{len(outcome.actions)} 个步骤")
            elif outcome.actions:
                # 文件已移动但没有提交
                table.add_row(outcome.package, "[yellow]已移动，未提交[/yellow]", outcome.reason)
            else:
                table.add_row(outcome.package, "[dim]跳过[/dim]", outcome.reason)
        for error in summary.errors:
            table.add_row(error.package or "-", f"[red]{error.kind.value}[/red]", escape(str(error)))
        self.console.print(table)

        if summary.aborted:
            self.console.print("[bold red]迁移已中止[/bold red]，已完成的提交保留在分支上")

    def show_next_steps(self, summary: RunSummary) -> None:
        if summary.dry_run:
            self.console.print("\n[yellow]预览完成。去掉 --dry-run 以实际执行。[/yellow]")
            return
        if summary.backup_path:
            self.console.print(f"备份: {escape(str(summary.backup_path))}")
        if summary.branch:
            self.console.print(Panel(
                f"当前分支: {escape(summary.branch)}\n\n"
                f"确认无误后合并:\n  git checkout main && git merge {escape(summary.branch)}\n\n"
                f"出现问题时放弃分支:\n  git checkout main",
                title="下一步",
                border_style="cyan",
            ))
