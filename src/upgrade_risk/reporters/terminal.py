"""Terminal reporter using Rich library."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from upgrade_risk.analyzer import UpgradeEvaluation
from upgrade_risk.models import RiskLevel, Severity


class TerminalReporter:
    """Generates terminal output using Rich."""

    def __init__(self, color: bool = True, console: Console | None = None) -> None:
        """Initialize terminal reporter.

        Args:
            color: If True, use colored output
            console: Console to print to (a new one by default)
        """
        self.console = console or Console(color_system="auto" if color else None)

    def print_evaluation(self, evaluation: UpgradeEvaluation, verbose: bool = False) -> None:
        """Print the verdict for a single dependency upgrade.

        Args:
            evaluation: Upgrade evaluation
            verbose: If True, also list every breaking change finding
        """
        assessment = evaluation.assessment
        color = self._get_level_color(assessment.level)
        icon = self._get_level_icon(assessment.level)

        title = escape(f"📦 {evaluation.package_name}: {evaluation.from_version} → {evaluation.to_version}")
        self.console.print(f"\n[bold]{title}[/bold]")

        risk_panel = Panel(
            f"[{color}]{icon} {assessment.level.value.upper()}[/{color}]\n"
            f"Risk Score: {assessment.score:.1f}/100\n"
            f"Confidence: {assessment.confidence:.0%}",
            title="Risk Assessment",
            border_style=color,
        )
        self.console.print(risk_panel)

        if assessment.is_safe:
            self.console.print("[green]✅ Safe to merge without manual review[/green]")

        self.print_statistics(evaluation)

        if assessment.factors:
            self.console.print("\n[bold]Risk Factors:[/bold]")
            for factor in assessment.factors:
                self.console.print(f"  • {escape(factor)}")

        if evaluation.breaking_changes:
            self.console.print("\n[bold red]⚠️  Breaking Changes:[/bold red]")
            self.print_breaking_changes(evaluation, limit=None if verbose else 5)

        if assessment.mitigation_steps:
            self.console.print("\n[bold]💡 Mitigation Steps:[/bold]")
            for step in assessment.mitigation_steps:
                self.console.print(f"  • {escape(step)}")

        self.console.print(
            f"\n  Estimated Effort: [bold]{assessment.estimated_effort.value}[/bold]"
            f"  |  Testing Scope: [bold]{assessment.testing_scope.value}[/bold]"
            f"  |  Migration: [bold]{evaluation.migration_complexity.value}[/bold]"
        )
        self.console.print("")

    def print_breaking_changes(self, evaluation: UpgradeEvaluation, limit: int | None = 5) -> None:
        """Print breaking change findings as a table.

        Args:
            evaluation: Upgrade evaluation
            limit: Maximum number of rows, or None for all
        """
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Severity", justify="center")
        table.add_column("Category")
        table.add_column("Change")
        table.add_column("Source", style="dim")
        table.add_column("Confidence", justify="right")

        changes = evaluation.breaking_changes
        shown = changes if limit is None else changes[:limit]

        for change in shown:
            color = self._get_severity_color(change.severity)
            table.add_row(
                f"[{color}]{change.severity.value}[/{color}]",
                change.category.value,
                escape(change.text),
                change.source,
                f"{change.confidence:.2f}",
            )

        self.console.print(table)

        if len(shown) < len(changes):
            self.console.print(f"  ... and {len(changes) - len(shown)} more", style="dim")

    def print_statistics(self, evaluation: UpgradeEvaluation) -> None:
        """Print diff and version statistics.

        Args:
            evaluation: Upgrade evaluation
        """
        stats = evaluation.diff_stats

        text = Text()
        text.append("📊 Summary: ", style="bold")
        text.append(f"version jump {evaluation.version_jump} | ")
        text.append(f"{stats.files_changed} files changed ")
        text.append(f"+{stats.additions} ", style="green")
        text.append(f"-{stats.deletions}", style="red")

        if evaluation.is_lockfile_only:
            text.append(" | lockfile only", style="dim")
        if evaluation.is_type_definition:
            text.append(" | type definitions", style="dim")

        self.console.print(Panel(text, border_style="blue"))

    @staticmethod
    def _get_level_color(level: RiskLevel) -> str:
        """Get color for risk level.

        Args:
            level: Risk level

        Returns:
            Color name
        """
        colors = {
            RiskLevel.CRITICAL: "red",
            RiskLevel.HIGH: "yellow",
            RiskLevel.MEDIUM: "blue",
            RiskLevel.LOW: "green",
            RiskLevel.SAFE: "green",
        }

        return colors.get(level, "white")

    @staticmethod
    def _get_level_icon(level: RiskLevel) -> str:
        """Get icon for risk level."""
        icons = {
            RiskLevel.CRITICAL: "🔴",
            RiskLevel.HIGH: "🟠",
            RiskLevel.MEDIUM: "🟡",
            RiskLevel.LOW: "🟢",
            RiskLevel.SAFE: "✅",
        }

        return icons.get(level, "⚪")

    @staticmethod
    def _get_severity_color(severity: Severity) -> str:
        """Get color for breaking change severity."""
        colors = {
            Severity.CRITICAL: "red",
            Severity.BREAKING: "yellow",
            Severity.WARNING: "blue",
        }

        return colors[severity]
