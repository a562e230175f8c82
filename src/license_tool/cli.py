"""Command-line interface for license_tool.

Provides the ``write``, ``check`` and ``dump`` subcommands for maintaining a
project's third-party license report.
"""

import asyncio
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from license_tool.compare import diff, is_canonical
from license_tool.config import DEFAULT_CONFIG_FILENAME, OverrideStore
from license_tool.copyright import LicenseFileScanner
from license_tool.exceptions import ConfigError, ParseError, ResolutionError
from license_tool.models import ComparisonResult, ReportRow, ResolutionReport
from license_tool.reporters import (
    DEFAULT_REPORT_FILENAME,
    CsvReporter,
    MarkdownReporter,
    build_rows,
)
from license_tool.resolvers import MetadataResolver
from license_tool.scanners import get_scanner

app = typer.Typer(
    name="license-tool",
    help="Generate and verify the third-party license report (LICENSE-3rdparty.csv).",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("license_tool")


class OutputFormat(str, Enum):
    csv = "csv"
    markdown = "markdown"


ManifestOption = Annotated[
    Path,
    typer.Option(
        "--manifest-path",
        "-m",
        help="pyproject.toml, `cargo metadata` JSON, or dependency graph JSON",
    ),
]
ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Override configuration file",
    ),
]
FeaturesOption = Annotated[
    Optional[str],
    typer.Option(
        "--features",
        "-F",
        help="Comma-separated optional dependency groups (features) to include",
    ),
]
AllFeaturesOption = Annotated[
    bool,
    typer.Option(
        "--all-features",
        help="Include every optional dependency group",
    ),
]
MergeAliasesOption = Annotated[
    bool,
    typer.Option(
        "--merge-aliases",
        help="Collapse components that share a repository into one row",
    ),
]
FailFastOption = Annotated[
    bool,
    typer.Option(
        "--fail-fast",
        help="Stop at the first package that cannot be resolved",
    ),
]
OutputOption = Annotated[
    Path,
    typer.Option(
        "--output",
        "-o",
        help="Report file path",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
]


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("license_tool").setLevel(level)


def _parse_features(features: Optional[str]) -> list[str]:
    if not features:
        return []
    return [name for name in re.split(r"[,\s]+", features) if name]


async def _scan_and_resolve(
    manifest_path: Path,
    config: Path,
    features: list[str],
    all_features: bool,
    fail_fast: bool,
    verbose: bool,
) -> ResolutionReport:
    """Scan the dependency graph and resolve every package.

    This is shared logic used by all commands.

    Args:
        manifest_path: Manifest or graph file describing the dependencies.
        config: Override configuration file.
        features: Optional dependency groups to include.
        all_features: Include every optional dependency group.
        fail_fast: Stop at the first unresolvable package.
        verbose: Whether to print verbose output.

    Returns:
        ResolutionReport for the whole graph.

    Raises:
        ConfigError: If the override configuration is malformed.
        ValueError: If the manifest cannot be scanned.
        ResolutionError: If fail_fast is set and a package fails.
    """
    overrides = OverrideStore.load(config)
    if verbose and len(overrides):
        err_console.print(
            f"[dim]Loaded {len(overrides)} override(s) from {escape(str(config))}: "
            f"{escape(', '.join(overrides.keys))}[/dim]"
        )

    scanner = get_scanner(manifest_path, features=features, all_features=all_features)
    if verbose:
        err_console.print(f"[dim]Using scanner: {scanner.source_name}[/dim]")

    packages = scanner.scan()

    resolver = MetadataResolver(overrides=overrides, scanner=LicenseFileScanner())
    return await resolver.resolve_batch(packages, fail_fast=fail_fast)


def _compute_rows(
    manifest_path: Path,
    config: Path,
    features: Optional[str],
    all_features: bool,
    merge_aliases: bool,
    fail_fast: bool,
    verbose: bool,
) -> Optional[list[ReportRow]]:
    """Run the pipeline and report problems.

    Returns:
        The report rows, or None if anything failed (already reported).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning and resolving licenses...", total=None)

        try:
            report = asyncio.run(
                _scan_and_resolve(
                    manifest_path=manifest_path,
                    config=config,
                    features=_parse_features(features),
                    all_features=all_features,
                    fail_fast=fail_fast,
                    verbose=verbose,
                )
            )
        except ConfigError as e:
            err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
            return None
        except ResolutionError as e:
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
            return None
        except (ValueError, OSError) as e:
            err_console.print(f"[red]Error scanning {manifest_path}:[/red] {escape(str(e))}")
            return None

        progress.update(task, completed=True)

    for identity in report.missing_copyright:
        err_console.print(
            f"[yellow]Warning:[/yellow] No copyright found for {escape(str(identity))}"
        )

    if not report.ok:
        err_console.print(
            f"[red]Could not resolve {len(report.errors)} package problem(s):[/red]"
        )
        for error in report.errors:
            err_console.print(f"  - {escape(str(error))}")
        return None

    return build_rows(report.records, merge_aliases=merge_aliases)


def _print_differences(output: Path, result: ComparisonResult) -> None:
    console.print(f"[red]{escape(str(output))} is not up to date:[/red]")
    for component, differences in result.by_component().items():
        console.print(f"  {escape(component)}:")
        for difference in differences:
            if difference.field == "row":
                if difference.expected is not None:
                    console.print(f"    - {escape(difference.expected)}")
                if difference.actual is not None:
                    console.print(f"    + {escape(difference.actual)}")
            else:
                console.print(
                    f"    {difference.field}: {escape(repr(difference.expected))}"
                    f" -> {escape(repr(difference.actual))}"
                )


def _run_write(output: Path, rows: list[ReportRow]) -> int:
    try:
        CsvReporter().write(rows, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {escape(str(e))}")
        return 1

    console.print(f"[green]Wrote[/green] {len(rows)} records to {escape(str(output))}")
    return 0


def _run_check(output: Path, rows: list[ReportRow]) -> int:
    if not output.exists():
        err_console.print(
            f"[red]Report not found:[/red] {escape(str(output))} "
            "(run `license-tool write` to create it)"
        )
        return 1

    try:
        text, existing = CsvReporter().read(output)
    except ParseError as e:
        err_console.print(f"[red]Could not parse {escape(str(output))}:[/red] {escape(str(e))}")
        return 1
    except OSError as e:
        err_console.print(f"[red]Could not read {escape(str(output))}:[/red] {escape(str(e))}")
        return 1

    result = diff(existing, rows)
    if not result.identical:
        _print_differences(output, result)
        return 1

    if not is_canonical(text, rows):
        console.print(
            f"[red]{escape(str(output))} is not in canonical order or format[/red]"
        )
        return 1

    console.print(f"[green]{escape(str(output))} is up to date[/green] ({len(rows)} records)")
    return 0


@app.command()
def write(
    manifest_path: ManifestOption = Path("pyproject.toml"),
    config: ConfigOption = Path(DEFAULT_CONFIG_FILENAME),
    output: OutputOption = Path(DEFAULT_REPORT_FILENAME),
    features: FeaturesOption = None,
    all_features: AllFeaturesOption = False,
    merge_aliases: MergeAliasesOption = False,
    fail_fast: FailFastOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Write the third-party license report.

    Nothing is written unless every package resolves.
    """
    _setup_logging(verbose)

    rows = _compute_rows(
        manifest_path, config, features, all_features, merge_aliases, fail_fast, verbose
    )
    if rows is None:
        raise typer.Exit(code=1)

    raise typer.Exit(code=_run_write(output, rows))


@app.command()
def check(
    manifest_path: ManifestOption = Path("pyproject.toml"),
    config: ConfigOption = Path(DEFAULT_CONFIG_FILENAME),
    output: OutputOption = Path(DEFAULT_REPORT_FILENAME),
    features: FeaturesOption = None,
    all_features: AllFeaturesOption = False,
    merge_aliases: MergeAliasesOption = False,
    fail_fast: FailFastOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Check that the third-party license report is up to date.

    Exit codes:
        0 - Report matches the current dependency graph
        1 - Report differs, is missing, or an error occurred
    """
    _setup_logging(verbose)

    rows = _compute_rows(
        manifest_path, config, features, all_features, merge_aliases, fail_fast, verbose
    )
    if rows is None:
        raise typer.Exit(code=1)

    raise typer.Exit(code=_run_check(output, rows))


@app.command()
def dump(
    manifest_path: ManifestOption = Path("pyproject.toml"),
    config: ConfigOption = Path(DEFAULT_CONFIG_FILENAME),
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format",
        ),
    ] = OutputFormat.csv,
    template: Annotated[
        Optional[Path],
        typer.Option(
            "--template",
            "-t",
            help="Custom Jinja2 template file (markdown format)",
            exists=True,
            readable=True,
        ),
    ] = None,
    features: FeaturesOption = None,
    all_features: AllFeaturesOption = False,
    merge_aliases: MergeAliasesOption = False,
    fail_fast: FailFastOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Print the license report to standard output."""
    _setup_logging(verbose)

    rows = _compute_rows(
        manifest_path, config, features, all_features, merge_aliases, fail_fast, verbose
    )
    if rows is None:
        raise typer.Exit(code=1)

    if output_format is OutputFormat.markdown:
        reporter = MarkdownReporter(template_path=template)
    else:
        reporter = CsvReporter()

    typer.echo(reporter.render(rows), nl=False)
    raise typer.Exit(code=0)


if __name__ == "__main__":
    app()
