"""CLI interface using Typer."""

import logging
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from upgrade_risk.analyzer import UpgradeEvaluation, UpgradeRequest, UpgradeRiskAnalyzer
from upgrade_risk.analyzer import analyze as detect_breaking_changes
from upgrade_risk.config import Config, find_config_file, get_config
from upgrade_risk.models import ChangelogSource, RiskLevel
from upgrade_risk.parsers.diff import parse_diff
from upgrade_risk.parsers.package_traits import entry_hints_from_manifest
from upgrade_risk.reporters.json_format import JSONReporter
from upgrade_risk.reporters.terminal import TerminalReporter

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="upgrade-risk",
    help="Breaking change detection and risk scoring for dependency upgrades",
    add_completion=False,
)

console = Console()


class OutputFormat(str, Enum):
    """Output format options."""
    terminal = "terminal"
    json = "json"


def _read_input(path: Path | None, label: str) -> str | None:
    """Read an optional input file, exiting with an error if it is missing."""
    if path is None:
        return None

    if not path.is_file():
        console.print(f"[red]Error: {label} file not found: {path}[/red]")
        raise typer.Exit(1)

    return path.read_text(encoding="utf-8", errors="replace")


def _load_config(config_file: Path | None) -> Config:
    """Load the explicit config file, or the project one if present."""
    if config_file is not None and not config_file.is_file():
        console.print(f"[red]Error: Config file not found: {config_file}[/red]")
        raise typer.Exit(1)

    return get_config(config_file or find_config_file())


def _resolve_entry_hints(
    entry_hints: list[str] | None,
    manifest_file: Path | None,
    config: Config,
) -> tuple[str, ...]:
    """Public entry points from --entry-hint, then --manifest, then the config."""
    if entry_hints:
        return tuple(entry_hints)

    manifest = _read_input(manifest_file, "Manifest")
    if manifest is not None:
        hints = entry_hints_from_manifest(manifest)
        if hints:
            return tuple(hints)
        logger.warning(f"No entry points found in {manifest_file}")

    return tuple(config.public_entry_hints)


def _parse_changelog_source(value: str | None) -> ChangelogSource | None:
    if value is None:
        return None

    try:
        return ChangelogSource(value.lower())
    except ValueError:
        choices = ", ".join(s.value for s in ChangelogSource)
        console.print(f"[red]Error: Unknown changelog source '{value}' (choose from: {choices})[/red]")
        raise typer.Exit(1)


def _default_format(config: Config) -> OutputFormat:
    try:
        return OutputFormat(config.output_format)
    except ValueError:
        logger.warning(f"Unknown output.format {config.output_format!r}, using terminal")
        return OutputFormat.terminal


def should_fail(level: RiskLevel, config: Config) -> bool:
    """Check if a risk level fails the CI gate.

    Args:
        level: Assessed risk level
        config: Configuration with the ``ci`` section

    Returns:
        True if the check should fail
    """
    if level is RiskLevel.UNKNOWN:
        return config.fail_on_unknown
    return level.order >= config.fail_on.order


@app.command()
def analyze(
    package: str = typer.Option(
        ...,
        "--package",
        "-p",
        help="Name of the package being upgraded",
    ),
    from_version: str = typer.Option(
        ...,
        "--from",
        help="Current version",
    ),
    to_version: str = typer.Option(
        ...,
        "--to",
        help="Target version",
    ),
    diff_file: Path = typer.Option(
        None,
        "--diff",
        "-d",
        help="Unified diff between the two versions (git diff / npm diff output)",
    ),
    changelog_file: Path = typer.Option(
        None,
        "--changelog",
        "-c",
        help="Changelog or release notes text",
    ),
    changelog_source: str = typer.Option(
        None,
        "--changelog-source",
        help="Where the changelog came from (github-releases, changelog-file, npm-registry, pypi, git-commits)",
    ),
    usage: int = typer.Option(
        0,
        "--usage",
        help="Number of production code locations using the package",
    ),
    test_usage: int = typer.Option(
        0,
        "--test-usage",
        help="Number of test code locations using the package",
    ),
    critical_path: bool = typer.Option(
        False,
        "--critical-path",
        help="The package is used on a critical code path",
    ),
    coverage: float = typer.Option(
        None,
        "--coverage",
        help="Measured test coverage (0-100); estimated from usage counts if omitted",
    ),
    dev: bool = typer.Option(
        False,
        "--dev",
        help="The package is a development dependency",
    ),
    entry_hints: list[str] = typer.Option(
        None,
        "--entry-hint",
        help="Public entry point path of the package (can be repeated)",
    ),
    manifest_file: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="package.json of the new version; its main/module/types/exports become entry hints",
    ),
    output_format: OutputFormat = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="Path to output file (JSON format)",
    ),
    check_only: bool = typer.Option(
        False,
        "--check-only",
        help="Exit with code 1 if the risk reaches the configured level (CI mode)",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        help="Path to configuration file (defaults to ./.upgrade-risk.toml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging and every breaking change",
    ),
) -> None:
    """Assess the risk of upgrading a single dependency."""

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = _load_config(config_file)
    fmt = output_format or _default_format(config)

    request = UpgradeRequest(
        package_name=package,
        from_version=from_version,
        to_version=to_version,
        diff_text=_read_input(diff_file, "Diff"),
        changelog_text=_read_input(changelog_file, "Changelog"),
        changelog_source=_parse_changelog_source(changelog_source),
        production_usage_count=usage,
        test_usage_count=test_usage,
        critical_path_usage=critical_path,
        test_coverage=coverage,
        is_dev_dependency=dev,
        public_entry_hints=_resolve_entry_hints(entry_hints, manifest_file, config),
    )

    try:
        analyzer = UpgradeRiskAnalyzer(max_changelog_tokens=config.max_changelog_tokens)
        evaluation = analyzer.evaluate(request)
    except Exception as e:
        if verbose:
            logger.exception("Analysis failed")
        console.print(f"\n[red]Error during analysis: {str(e)}[/red]")
        raise typer.Exit(1)

    _report(evaluation, fmt, output, config, verbose)

    if check_only and should_fail(evaluation.assessment.level, config):
        if fmt == OutputFormat.terminal:
            console.print(
                f"\n[red]❌ {evaluation.assessment.level.value.upper()} risk upgrade. CI check failed.[/red]"
            )
        raise typer.Exit(1)


def _report(
    evaluation: UpgradeEvaluation,
    fmt: OutputFormat,
    output: Path | None,
    config: Config,
    verbose: bool,
) -> None:
    """Print or save an evaluation in the requested format."""
    if fmt == OutputFormat.json:
        json_output = JSONReporter().generate_report(evaluation, output)
        if output:
            console.print(f"[green]✅ Report saved to: {output}[/green]")
        else:
            typer.echo(json_output)
        return

    reporter = TerminalReporter(
        color=config.color,
        console=console if config.color else None,
    )
    reporter.print_evaluation(evaluation, verbose=verbose)

    if output:
        JSONReporter().generate_report(evaluation, output)
        console.print(f"[green]✅ Report saved to: {output}[/green]")


@app.command()
def detect(
    diff_file: Path = typer.Option(
        ...,
        "--diff",
        "-d",
        help="Unified diff between the two versions",
    ),
    package: str = typer.Option(
        ...,
        "--package",
        "-p",
        help="Name of the package being upgraded",
    ),
    from_version: str = typer.Option(
        ...,
        "--from",
        help="Current version",
    ),
    to_version: str = typer.Option(
        ...,
        "--to",
        help="Target version",
    ),
    entry_hints: list[str] = typer.Option(
        None,
        "--entry-hint",
        help="Public entry point path of the package (can be repeated)",
    ),
    manifest_file: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="package.json of the new version; its main/module/types/exports become entry hints",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        help="Path to configuration file (defaults to ./.upgrade-risk.toml)",
    ),
) -> None:
    """List breaking changes found in a diff without scoring them."""

    config = _load_config(config_file)
    hints = _resolve_entry_hints(entry_hints, manifest_file, config)

    diff_text = _read_input(diff_file, "Diff")
    changes = parse_diff(diff_text)
    findings = detect_breaking_changes(
        changes, package, from_version, to_version, public_entry_hints=hints or None
    )

    if not findings:
        console.print("[green]No breaking changes detected[/green]")
        return

    console.print(f"\n[bold]{len(findings)} breaking change(s) in {package}:[/bold]\n")
    for change in findings:
        console.print(
            f"  • ({change.severity.value}) {escape(change.text)} "
            f"[dim]({change.category.value}, {change.confidence:.2f})[/dim]"
        )


@app.command()
def version() -> None:
    """Show version information."""

    from upgrade_risk import __version__

    console.print(f"[bold]Upgrade Risk[/bold] v{__version__}")
    console.print("\n[dim]Features:[/dim]")
    console.print("  • Breaking change detection from diffs and changelogs")
    console.print("  • Version jump, usage and coverage based risk scoring")
    console.print("  • Evidence-based confidence estimation")
    console.print("  • Terminal and JSON output, CI gating")


if __name__ == "__main__":
    app()
